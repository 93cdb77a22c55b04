"""Observability helpers for filesig (structured logging).

Example:
    >>> from filesig.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("filesig.signature.issued", key_id="3f2a...")
"""

from filesig.observability.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    sanitize_for_logging,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "sanitize_for_logging",
]
