"""Ed25519 key handling, signing and multi-key verification.

Public exports:
    keys: key generation and DER/base64 (de)serialization
    KeyRegistry: current signing key and accepted verification keys
    Signer, sign_payload: signature issuance
    Verifier, verify_with_key: single-key and accepted-set verification
"""

from filesig.crypto import keys
from filesig.crypto.registry import AcceptedKey, KeyRegistry
from filesig.crypto.signing import Signer, sign_payload
from filesig.crypto.verify import Verifier, verify_with_key

__all__ = [
    "keys",
    "AcceptedKey",
    "KeyRegistry",
    "Signer",
    "Verifier",
    "sign_payload",
    "verify_with_key",
]
