"""Signature verification against one key or the registry's accepted set.

A signature that does not verify is a normal ``False``/``None`` result, never
an exception. Undecodable signature or key tokens also verify as ``False``:
the caller learns only that verification failed, not why.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from filesig.codec import b64_decode, b64url_decode
from filesig.crypto.keys import ED25519_SIGNATURE_LENGTH, spki_to_raw
from filesig.crypto.registry import KeyRegistry
from filesig.errors import DecodeError
from filesig.models import (
    SignaturePayload,
    VerificationRequest,
    VerificationResult,
    parse_model,
)
from filesig.observability import get_logger

logger = get_logger(__name__)


def _decode_signature(signature_token: str) -> bytes | None:
    try:
        raw = b64url_decode(signature_token)
    except DecodeError:
        return None
    if len(raw) != ED25519_SIGNATURE_LENGTH:
        return None
    return raw


def _verify_raw(public_key: Ed25519PublicKey, raw_signature: bytes, message: bytes) -> bool:
    try:
        public_key.verify(raw_signature, message)
    except InvalidSignature:
        return False
    return True


def verify_with_key(
    payload: SignaturePayload | Mapping[str, Any],
    signature_token: str,
    public_key_token: str,
) -> bool:
    """Check ``signature_token`` over ``payload`` with one SPKI base64 key.

    Raises InvalidInputError only for a malformed payload; everything about
    the signature or key yields a boolean.
    """
    validated: SignaturePayload = parse_model(SignaturePayload, payload)
    raw_signature = _decode_signature(signature_token)
    if raw_signature is None:
        return False
    try:
        raw_key = spki_to_raw(b64_decode(public_key_token))
    except (DecodeError, ValueError):
        return False
    public_key = Ed25519PublicKey.from_public_bytes(raw_key)
    return _verify_raw(public_key, raw_signature, validated.message())


class Verifier:
    """Verifies against every accepted key, current key first.

    Needs only public keys; works with a verification-only registry.
    """

    def __init__(self, registry: KeyRegistry) -> None:
        self._registry = registry

    def verify_against_accepted_keys(
        self,
        payload: SignaturePayload | Mapping[str, Any],
        signature_token: str,
    ) -> str | None:
        """Token of the first accepted key that validates, or None.

        Raises:
            InvalidInputError: malformed payload
            ConfigurationError: no current public key configured
        """
        validated: SignaturePayload = parse_model(SignaturePayload, payload)
        accepted = self._registry.get_accepted_keys()
        raw_signature = _decode_signature(signature_token)
        if raw_signature is None:
            logger.debug("filesig.verify.malformed_signature")
            return None
        message = validated.message()
        for entry in accepted:
            if _verify_raw(entry.public_key, raw_signature, message):
                logger.debug(
                    "filesig.verify.matched",
                    key_id=entry.key_id,
                    current=entry.current,
                )
                return entry.token
        logger.debug("filesig.verify.no_match", keys_checked=len(accepted))
        return None

    def verify(self, request: VerificationRequest | Mapping[str, Any]) -> VerificationResult:
        validated: VerificationRequest = parse_model(VerificationRequest, request)
        matched = self.verify_against_accepted_keys(validated.to_payload(), validated.signature)
        return VerificationResult(valid=matched is not None, public_key=matched)
