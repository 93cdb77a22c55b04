"""Transport encodings and canonical message construction.

Two base64 flavours cross the boundary:

- URL-safe, unpadded (RFC 4648 §5) for signatures and shareable tokens
- standard, padded for DER key material

The canonical message is ``f"{fingerprint}:{identity}:{timestamp}"`` as UTF-8.
Signer and verifier both build it here; changing field order, separator or
encoding invalidates every signature already issued.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from filesig.errors import DecodeError, InvalidInputError

FINGERPRINT_HEX_LENGTH = 64
MESSAGE_SEPARATOR = ":"

_FINGERPRINT_RE = re.compile(r"[0-9a-fA-F]{64}")
_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")
_FILE_CHUNK_SIZE = 64 * 1024


def b64url_encode(data: bytes) -> str:
    """URL-safe base64 without ``=`` padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(value: str) -> bytes:
    """Decode URL-safe base64, tolerating missing padding.

    Standard-alphabet input (``+``/``/``) is accepted too, since it maps to
    the same bytes. Raises DecodeError on any other character or on a length
    no padding can repair.
    """
    if not isinstance(value, str):
        raise DecodeError("base64url value must be a string", details={"type": type(value).__name__})
    stripped = value.strip().rstrip("=")
    if len(stripped) % 4 == 1:
        raise DecodeError("base64url value has an impossible length", details={"length": len(stripped)})
    padded = stripped + "=" * (-len(stripped) % 4)
    standard = padded.replace("-", "+").replace("_", "/")
    try:
        return base64.b64decode(standard, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"invalid base64url: {e}") from e


def b64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64_decode(value: str) -> bytes:
    """Strict standard base64 decode. Raises DecodeError on bad input."""
    if not isinstance(value, str):
        raise DecodeError("base64 value must be a string", details={"type": type(value).__name__})
    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"invalid base64: {e}") from e


def _to_jsonable(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    return obj


def encode_token(obj: Any) -> str:
    """Serialize a JSON-compatible value (or pydantic model) to a URL-safe token.

    Non-ASCII text is kept as UTF-8 rather than ``\\u`` escaped, so the token
    carries the same bytes a browser-side encoder would produce.
    """
    try:
        text = json.dumps(_to_jsonable(obj), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"value is not JSON serializable: {e}") from e
    return b64url_encode(text.encode("utf-8"))


def decode_token(token: str) -> Any:
    """Inverse of encode_token. Raises DecodeError on any decoding stage failure."""
    raw = b64url_decode(token)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"token is not valid UTF-8: {e.reason}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"token is not valid JSON: {e.msg}", details={"pos": e.pos}) from e
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"token is not valid JSON: {e}") from e


def raw_to_hex(data: bytes) -> str:
    return data.hex()


def hex_to_raw(value: str) -> bytes:
    """Strict hex: an even number of hex digits, no whitespace or separators."""
    if not isinstance(value, str) or _HEX_RE.fullmatch(value) is None:
        raise DecodeError("invalid hex: expected an even number of hex digits")
    return bytes.fromhex(value)


def validate_fingerprint(value: Any) -> str:
    """Return value unchanged if it is exactly 64 hex characters (any case)."""
    if not isinstance(value, str) or _FINGERPRINT_RE.fullmatch(value) is None:
        raise InvalidInputError(
            f"fingerprint must be {FINGERPRINT_HEX_LENGTH} hex characters",
            field="fingerprint",
        )
    return value


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def fingerprint_file(path: str | Path) -> str:
    """SHA-256 hex digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(_FILE_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def canonical_message(fingerprint: str, identity: str, timestamp: int) -> bytes:
    """Bytes that get signed: ``fingerprint:identity:timestamp`` in UTF-8.

    Callers are expected to have validated the fields (see SignaturePayload).
    """
    return MESSAGE_SEPARATOR.join((fingerprint, identity, str(timestamp))).encode("utf-8")
