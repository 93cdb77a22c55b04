"""Ed25519 key generation, DER (de)serialization and raw-key extraction.

Key material crosses the boundary as standard base64 of DER: PKCS#8 for
private keys, SubjectPublicKeyInfo for public keys. An Ed25519 SPKI is a
fixed 12-byte ASN.1 header followed by the 32-byte raw key.
"""

from __future__ import annotations

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from filesig.codec import b64_decode, b64_encode, sha256_hex
from filesig.errors import ConfigurationError, DecodeError

ED25519_RAW_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64
# 30 2a 30 05 06 03 2b 65 70 03 21 00
ED25519_SPKI_PREFIX = bytes.fromhex("302a300506032b6570032100")
KEY_ID_LENGTH = 16


def generate_keypair() -> tuple[Ed25519PrivateKey, Ed25519PublicKey]:
    private_key = Ed25519PrivateKey.generate()
    return (private_key, private_key.public_key())


def private_key_to_pkcs8_base64(key: Ed25519PrivateKey) -> str:
    der = key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return b64_encode(der)


def public_key_to_spki_base64(key: Ed25519PublicKey) -> str:
    der = key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return b64_encode(der)


def generate_keypair_base64() -> tuple[str, str]:
    """New key pair as (PKCS#8 base64, SPKI base64). Nothing is persisted."""
    private_key, public_key = generate_keypair()
    return (private_key_to_pkcs8_base64(private_key), public_key_to_spki_base64(public_key))


def load_private_key(b64: str) -> Ed25519PrivateKey:
    """From base64 PKCS#8 DER. Raises ConfigurationError if invalid or not Ed25519."""
    try:
        der = b64_decode(b64)
    except DecodeError as e:
        raise ConfigurationError("private key is not valid base64") from e
    try:
        key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationError("private key is not valid PKCS#8 DER") from e
    if not isinstance(key, Ed25519PrivateKey):
        raise ConfigurationError(
            "private key is not an Ed25519 key", details={"type": type(key).__name__}
        )
    return key


def spki_to_raw(der: bytes) -> bytes:
    """32-byte raw Ed25519 key from SPKI DER. Raises ValueError if not Ed25519 SPKI."""
    key = _load_spki(der)
    if not isinstance(key, Ed25519PublicKey):
        raise ValueError(f"public key is not an Ed25519 key: {type(key).__name__}")
    return raw_public_key(key)


def raw_public_key(key: Ed25519PublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def parse_public_key(b64: str) -> Ed25519PublicKey:
    """From base64 SPKI DER. Raises DecodeError on bad base64, ValueError on bad DER."""
    key = _load_spki(b64_decode(b64))
    if not isinstance(key, Ed25519PublicKey):
        raise ValueError(f"public key is not an Ed25519 key: {type(key).__name__}")
    return key


def load_public_key(b64: str) -> Ed25519PublicKey:
    """Configuration-time variant of parse_public_key: failures are ConfigurationError."""
    try:
        return parse_public_key(b64)
    except (DecodeError, ValueError) as e:
        raise ConfigurationError(
            "public key is not valid base64 SPKI DER for Ed25519",
            details={"key_preview": b64[:16] + "..."},
        ) from e


def key_id(public_key: Ed25519PublicKey) -> str:
    """Short stable identifier: truncated SHA-256 hex of the raw key."""
    return sha256_hex(raw_public_key(public_key))[:KEY_ID_LENGTH]


def _load_spki(der: bytes) -> object:
    try:
        return serialization.load_der_public_key(der)
    except UnsupportedAlgorithm as e:
        raise ValueError(f"unsupported public key algorithm: {e}") from e
