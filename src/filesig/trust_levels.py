"""Trust level enum; separate module to avoid circular imports."""

from enum import Enum


class TrustLevel(str, Enum):
    """Coarse, non-authoritative bucket derived from an identity's signature count."""

    NONE = "none"
    """No signatures issued yet."""

    LOW = "low"
    """1-3 signatures."""

    MEDIUM = "medium"
    """4-10 signatures."""

    HIGH = "high"
    """More than 10 signatures."""
