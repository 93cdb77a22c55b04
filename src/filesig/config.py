"""Explicit configuration objects.

Key material and service settings are read from the environment only in the
``from_env`` constructors; everything else receives these objects as
arguments. Rotating keys at runtime means building a new KeyConfig and
handing it to ``KeyRegistry.reload``.

Environment Variables:
    ED25519_PRIVATE_KEY: base64 PKCS#8 DER private key (signing deployments only)
    ED25519_PUBLIC_KEY: base64 SPKI DER current public key
    ED25519_PUBLIC_KEYS_PREVIOUS: comma-separated base64 SPKI DER historical keys
    FILESIG_VERIFY_BASE_URL: origin used when building verification links
    FILESIG_ALLOWED_EMAIL_DOMAINS: comma/space separated signer domain allow-list
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from filesig.auth.validation import parse_allowed_domains

ENV_PRIVATE_KEY = "ED25519_PRIVATE_KEY"
ENV_PUBLIC_KEY = "ED25519_PUBLIC_KEY"
ENV_PUBLIC_KEYS_PREVIOUS = "ED25519_PUBLIC_KEYS_PREVIOUS"
ENV_VERIFY_BASE_URL = "FILESIG_VERIFY_BASE_URL"
ENV_ALLOWED_EMAIL_DOMAINS = "FILESIG_ALLOWED_EMAIL_DOMAINS"


def _split_keys(raw: str) -> list[str]:
    return [k.strip() for k in raw.split(",") if k.strip()]


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class KeyConfig(BaseModel):
    """Key material, transport-encoded as standard base64 DER."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    private_key: str | None = Field(default=None, repr=False)
    public_key: str | None = None
    historical_public_keys: tuple[str, ...] = ()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> KeyConfig:
        env = os.environ if environ is None else environ
        return cls(
            private_key=_optional(env.get(ENV_PRIVATE_KEY)),
            public_key=_optional(env.get(ENV_PUBLIC_KEY)),
            historical_public_keys=tuple(_split_keys(env.get(ENV_PUBLIC_KEYS_PREVIOUS, ""))),
        )

    def public_only(self) -> KeyConfig:
        """Same accepted set without the private half (verification-only deployments)."""
        return self.model_copy(update={"private_key": None})


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    keys: KeyConfig = Field(default_factory=KeyConfig)
    verify_base_url: str = ""
    allowed_email_domains: tuple[str, ...] = ()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            keys=KeyConfig.from_env(env),
            verify_base_url=env.get(ENV_VERIFY_BASE_URL, "").strip().rstrip("/"),
            allowed_email_domains=tuple(parse_allowed_domains(env.get(ENV_ALLOWED_EMAIL_DOMAINS))),
        )
