"""Test data factories shared across filesig tests."""

from __future__ import annotations

from typing import Any

SCENARIO_FINGERPRINT = "a" * 64
SCENARIO_IDENTITY = "user@example.com"
SCENARIO_TIMESTAMP = 1700000000000


def signing_body(**overrides: Any) -> dict[str, Any]:
    """Wire-format signing request body."""
    body: dict[str, Any] = {
        "fileHash": SCENARIO_FINGERPRINT,
        "identity": SCENARIO_IDENTITY,
        "timestamp": SCENARIO_TIMESTAMP,
    }
    body.update(overrides)
    return body


def verification_body(signature: str, **overrides: Any) -> dict[str, Any]:
    """Wire-format verification request body."""
    body = signing_body(signature=signature)
    body.update(overrides)
    return body
