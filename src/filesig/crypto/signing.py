"""Detached Ed25519 signing over the canonical payload message."""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from filesig.codec import b64url_encode
from filesig.crypto.keys import ED25519_SIGNATURE_LENGTH, key_id, public_key_to_spki_base64
from filesig.crypto.registry import KeyRegistry
from filesig.models import SignatureBundle, SignaturePayload, parse_model
from filesig.observability import get_logger

logger = get_logger(__name__)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def sign_payload(payload: SignaturePayload, private_key: Ed25519PrivateKey) -> bytes:
    """Raw 64-byte signature. Ed25519 is deterministic per (message, key)."""
    raw_signature = private_key.sign(payload.message())
    assert len(raw_signature) == ED25519_SIGNATURE_LENGTH, "Ed25519 signature must be 64 bytes"
    return raw_signature


class Signer:
    """Issues signature bundles with the registry's current key."""

    def __init__(self, registry: KeyRegistry) -> None:
        self._registry = registry

    def issue(self, payload: SignaturePayload | Mapping[str, Any]) -> SignatureBundle:
        """Sign ``payload``.

        Raises:
            InvalidInputError: malformed fingerprint, identity or timestamp
            ConfigurationError: no usable private key
        """
        validated: SignaturePayload = parse_model(SignaturePayload, payload)
        private_key, public_key = self._registry.get_signing_key_pair()
        raw_signature = sign_payload(validated, private_key)
        logger.debug(
            "filesig.signature.issued",
            key_id=key_id(public_key),
            timestamp=validated.timestamp,
        )
        return SignatureBundle(
            signature=b64url_encode(raw_signature),
            public_key=public_key_to_spki_base64(public_key),
            timestamp=validated.timestamp,
        )

    def issue_for(
        self, fingerprint: str, identity: str, timestamp: int | None = None
    ) -> SignatureBundle:
        """issue() with ``timestamp`` defaulting to now (ms)."""
        return self.issue(
            {
                "fingerprint": fingerprint,
                "identity": identity,
                "timestamp": now_ms() if timestamp is None else timestamp,
            }
        )
