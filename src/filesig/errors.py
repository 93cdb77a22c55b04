"""filesig error taxonomy.

Every error raised by the package carries a stable ``code`` so that outer
layers (HTTP, CLI) can map it without string matching. A signature that
does not verify is not an error: verification returns ``False``/``None``.
"""
from __future__ import annotations

from typing import Any


class FileSigError(Exception):
    """Base exception for all filesig errors.

    Attributes:
        code: Error code following the filesig:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(FileSigError):
    """Raised when a payload field has the wrong shape.

    Covers a fingerprint that is not 64 hex characters, an empty identity,
    and a timestamp that is not a non-negative integer. Always a caller
    error; detected before any cryptographic work.

    Attributes:
        field: Name of the offending field, when known
    """

    def __init__(
        self, reason: str, field: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        extra = {"field": field} if field else {}
        super().__init__(
            code="filesig:input/invalid",
            message=f"Invalid input: {reason}",
            details={**extra, **(details or {})},
        )
        self.reason = reason
        self.field = field


class ConfigurationError(FileSigError):
    """Raised when key material is missing or malformed.

    Fatal to the operation that needed it. Retrying will not help until the
    configuration is fixed.
    """

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="filesig:config/invalid",
            message=f"Configuration error: {reason}",
            details=details or {},
        )
        self.reason = reason


class DecodeError(FileSigError):
    """Raised when a transport encoding (base64, UTF-8, JSON) cannot be decoded."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="filesig:codec/decode",
            message=f"Decode error: {reason}",
            details=details or {},
        )
        self.reason = reason
