"""Shareable verification links.

A link carries the whole signature bundle as a URL-safe token in the
``data`` query parameter, so the verify page needs no server lookup to show
who signed what and when. Rendering the URL as a QR image happens elsewhere.
"""

from __future__ import annotations

from pydantic import ValidationError

from filesig.codec import decode_token, encode_token
from filesig.errors import DecodeError
from filesig.models import SignatureBundle

VERIFY_PATH = "/verify"
DATA_PARAM = "data"


def build_share_token(bundle: SignatureBundle) -> str:
    return encode_token(bundle)


def parse_share_token(token: str) -> SignatureBundle:
    """Decode a share token back into a bundle. Raises DecodeError if it is not one."""
    data = decode_token(token)
    try:
        return SignatureBundle.model_validate(data)
    except ValidationError as e:
        raise DecodeError(
            "token does not contain a signature bundle",
            details={"errors": e.error_count()},
        ) from e


def create_verification_url(token: str, base_url: str = "") -> str:
    """``{base_url}/verify?data={token}``; tokens are already URL-safe."""
    return f"{base_url.rstrip('/')}{VERIFY_PATH}?{DATA_PARAM}={token}"
