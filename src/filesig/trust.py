"""Cosmetic trust bucketing from an identity's signature count.

The count lives in an external counter store; this module only maps it to a
TrustLevel. Nothing here is security relevant.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from filesig.models import TrustQuery
from filesig.observability import get_logger
from filesig.trust_levels import TrustLevel

logger = get_logger(__name__)

LOW_MAX = 3
MEDIUM_MAX = 10

TRUST_DATA_UNAVAILABLE = "Trust data unavailable"


def bucket_for(count: int) -> TrustLevel:
    """none (<=0), low (1-3), medium (4-10), high (>10)."""
    if count <= 0:
        return TrustLevel.NONE
    if count <= LOW_MAX:
        return TrustLevel.LOW
    if count <= MEDIUM_MAX:
        return TrustLevel.MEDIUM
    return TrustLevel.HIGH


@runtime_checkable
class SignatureCounter(Protocol):
    """Per-identity signature counter backed by an external store.

    Callers pass identities already passed through normalize_identity, on
    both the increment and the read path; implementations store keys as given.
    """

    def get(self, identity: str) -> int:
        """Current count, 0 when unknown."""
        ...

    def increment(self, identity: str) -> int:
        """Add one and return the new count."""
        ...


class InMemorySignatureCounter:
    """Thread-safe in-process counter, for tests and single-process deployments."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._counts: dict[str, int] = {}

    def get(self, identity: str) -> int:
        with self._lock:
            return self._counts.get(identity, 0)

    def increment(self, identity: str) -> int:
        with self._lock:
            self._counts[identity] = self._counts.get(identity, 0) + 1
            return self._counts[identity]


def normalize_identity(identity: str) -> str:
    return identity.strip().lower()


def trust_report(identity: str, counter: SignatureCounter) -> TrustQuery:
    """Build the trust query response for ``identity``.

    A failing counter store degrades to a ``none`` report with a note rather
    than an error, since the level is only cosmetic.
    """
    normalized = normalize_identity(identity)
    try:
        total = max(int(counter.get(normalized)), 0)
    except Exception as e:  # noqa: BLE001
        logger.warning("filesig.trust.counter_unavailable", error=str(e))
        return TrustQuery(
            identity=normalized,
            total_signatures=0,
            trust_level=TrustLevel.NONE,
            note=TRUST_DATA_UNAVAILABLE,
        )
    return TrustQuery(identity=normalized, total_signatures=total, trust_level=bucket_for(total))
