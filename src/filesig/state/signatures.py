"""Signature bundle lookup store.

Issued bundles may be kept so that a share link can be rebuilt from the
signature value alone. The store is keyed by the signature string; it is
an optional collaborator and plays no part in verification.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from filesig.models import SignatureBundle, SignaturePayload


class SignatureRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    bundle: SignatureBundle
    payload: SignaturePayload


@runtime_checkable
class SignatureStore(Protocol):
    def save(self, bundle: SignatureBundle, payload: SignaturePayload) -> None:
        """Persist ``bundle`` under its signature value."""
        ...

    def get(self, signature: str) -> SignatureRecord | None:
        """Record for ``signature``, or None if unknown."""
        ...


class InMemorySignatureStore:
    """Thread-safe dict-backed SignatureStore."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, SignatureRecord] = {}

    def save(self, bundle: SignatureBundle, payload: SignaturePayload) -> None:
        with self._lock:
            self._records[bundle.signature] = SignatureRecord(bundle=bundle, payload=payload)

    def get(self, signature: str) -> SignatureRecord | None:
        with self._lock:
            return self._records.get(signature)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
