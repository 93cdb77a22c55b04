"""HTTP surface for signing, verification, key discovery and trust queries."""

from filesig.transport.server import create_app

__all__ = ["create_app"]
