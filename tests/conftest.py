"""Shared pytest fixtures for filesig tests."""

from __future__ import annotations

import pytest

from filesig.config import KeyConfig
from filesig.crypto.keys import generate_keypair_base64
from filesig.crypto.registry import KeyRegistry
from filesig.crypto.signing import Signer
from filesig.crypto.verify import Verifier
from filesig.models import SignaturePayload

from tests.factories import SCENARIO_FINGERPRINT, SCENARIO_IDENTITY, SCENARIO_TIMESTAMP


@pytest.fixture
def key_pair_b64() -> tuple[str, str]:
    """Fresh (PKCS#8 base64, SPKI base64) key pair."""
    return generate_keypair_base64()


@pytest.fixture
def key_config(key_pair_b64: tuple[str, str]) -> KeyConfig:
    private_b64, public_b64 = key_pair_b64
    return KeyConfig(private_key=private_b64, public_key=public_b64)


@pytest.fixture
def registry(key_config: KeyConfig) -> KeyRegistry:
    return KeyRegistry(key_config)


@pytest.fixture
def signer(registry: KeyRegistry) -> Signer:
    return Signer(registry)


@pytest.fixture
def verifier(registry: KeyRegistry) -> Verifier:
    return Verifier(registry)


@pytest.fixture
def payload() -> SignaturePayload:
    return SignaturePayload(
        fingerprint=SCENARIO_FINGERPRINT,
        identity=SCENARIO_IDENTITY,
        timestamp=SCENARIO_TIMESTAMP,
    )
