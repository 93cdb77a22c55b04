"""Pydantic models for the request/response shapes exchanged at the boundary.

Wire names are camelCase (``fileHash``, ``publicKey``); Python attributes are
snake_case. Models are frozen so a bundle cannot change after issuance.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, model_validator

from filesig.codec import FINGERPRINT_HEX_LENGTH, canonical_message
from filesig.errors import InvalidInputError
from filesig.trust_levels import TrustLevel

# Largest integer a JavaScript client can represent exactly.
MAX_TIMESTAMP_MS = 2**53 - 1

FINGERPRINT_PATTERN = rf"^[0-9a-fA-F]{{{FINGERPRINT_HEX_LENGTH}}}$"
BASE64_PATTERN = r"^[A-Za-z0-9+/=]+$"
BASE64URL_PATTERN = r"^[A-Za-z0-9_\-]+={0,2}$"

Fingerprint = Annotated[
    str,
    Field(
        alias="fileHash",
        pattern=FINGERPRINT_PATTERN,
        description="SHA-256 hex digest of the signed content (64 hex chars).",
    ),
]
Identity = Annotated[str, Field(min_length=1, description="Opaque signer identity.")]
TimestampMs = Annotated[
    StrictInt,
    Field(ge=0, le=MAX_TIMESTAMP_MS, description="Milliseconds since the Unix epoch."),
]


class FileSigModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        validate_default=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using wire (alias) names."""
        return self.model_dump(mode="json", by_alias=True)


class SignaturePayload(FileSigModel):
    """The three fields covered by a signature."""

    fingerprint: Fingerprint
    identity: Identity
    timestamp: TimestampMs

    def message(self) -> bytes:
        return canonical_message(self.fingerprint, self.identity, self.timestamp)


class SigningRequest(FileSigModel):
    """Body of a signing request; timestamp is stamped server-side when omitted."""

    fingerprint: Fingerprint
    identity: Identity
    timestamp: TimestampMs | None = None


class SignatureBundle(FileSigModel):
    """Result of signing. Carries the public key so verifiers need no prior config."""

    signature: Annotated[
        str,
        Field(pattern=BASE64URL_PATTERN, description="URL-safe base64 64-byte Ed25519 signature."),
    ]
    public_key: Annotated[
        str,
        Field(
            alias="publicKey",
            pattern=BASE64_PATTERN,
            description="Standard base64 SPKI DER public key used to sign.",
        ),
    ]
    timestamp: TimestampMs


class VerificationRequest(FileSigModel):
    fingerprint: Fingerprint
    identity: Identity
    timestamp: TimestampMs
    signature: Annotated[str, Field(min_length=1)]

    def to_payload(self) -> SignaturePayload:
        return SignaturePayload(
            fingerprint=self.fingerprint, identity=self.identity, timestamp=self.timestamp
        )


class VerificationResult(FileSigModel):
    """``public_key`` names the accepted key that matched; set only when valid."""

    valid: bool
    public_key: str | None = Field(default=None, alias="publicKey")

    @model_validator(mode="after")
    def _key_only_when_valid(self) -> VerificationResult:
        if self.valid != (self.public_key is not None):
            raise ValueError("publicKey must be set if and only if valid is true")
        return self


class KeyDiscoveryDocument(FileSigModel):
    """Published set of verification keys (base64 SPKI DER)."""

    current: str
    history: list[str] = Field(default_factory=list)


class TrustQuery(FileSigModel):
    identity: str
    total_signatures: int = Field(alias="totalSignatures", ge=0)
    trust_level: TrustLevel = Field(alias="trustLevel")
    note: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _first_error(error: ValidationError) -> tuple[str | None, str]:
    first = error.errors()[0]
    loc = first.get("loc") or ()
    field = str(loc[0]) if loc else None
    return field, first.get("msg", "invalid value")


def parse_model(model: type[FileSigModel], data: Any) -> Any:
    """Validate ``data`` into ``model``, raising InvalidInputError on failure."""
    if isinstance(data, model):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except ValidationError as e:
        field, msg = _first_error(e)
        raise InvalidInputError(
            msg,
            field=field,
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e
