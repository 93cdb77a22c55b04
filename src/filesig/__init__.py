"""filesig: detached Ed25519 signatures over file fingerprints.

Issues signatures over a canonical ``fingerprint:identity:timestamp`` message
and verifies them against a rotating set of accepted public keys.

Public exports:
    Signer, Verifier, KeyRegistry: issuance and verification
    KeyConfig, Settings: explicit configuration objects
    encode_token, decode_token: shareable token codec
    TrustLevel, bucket_for: cosmetic trust bucketing
"""

__version__ = "0.3.0"

from filesig.codec import canonical_message, decode_token, encode_token
from filesig.config import KeyConfig, Settings
from filesig.crypto.registry import KeyRegistry
from filesig.crypto.signing import Signer
from filesig.crypto.verify import Verifier, verify_with_key
from filesig.errors import ConfigurationError, DecodeError, FileSigError, InvalidInputError
from filesig.models import (
    KeyDiscoveryDocument,
    SignatureBundle,
    SignaturePayload,
    TrustQuery,
    VerificationRequest,
    VerificationResult,
)
from filesig.trust import TrustLevel, bucket_for

__all__ = [
    "__version__",
    "ConfigurationError",
    "DecodeError",
    "FileSigError",
    "InvalidInputError",
    "KeyConfig",
    "KeyDiscoveryDocument",
    "KeyRegistry",
    "Settings",
    "SignatureBundle",
    "SignaturePayload",
    "Signer",
    "TrustLevel",
    "TrustQuery",
    "VerificationRequest",
    "VerificationResult",
    "Verifier",
    "bucket_for",
    "canonical_message",
    "decode_token",
    "encode_token",
    "verify_with_key",
]
