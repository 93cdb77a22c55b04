"""Storage interfaces for issued signature bundles."""

from filesig.state.signatures import InMemorySignatureStore, SignatureRecord, SignatureStore

__all__ = ["InMemorySignatureStore", "SignatureRecord", "SignatureStore"]
