"""Tests for boundary models and their wire names."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from filesig.errors import InvalidInputError
from filesig.models import (
    MAX_TIMESTAMP_MS,
    KeyDiscoveryDocument,
    SignatureBundle,
    SignaturePayload,
    SigningRequest,
    TrustQuery,
    VerificationResult,
    parse_model,
)
from filesig.trust_levels import TrustLevel

from tests.factories import SCENARIO_FINGERPRINT, signing_body


def test_payload_accepts_wire_and_python_names() -> None:
    by_alias = SignaturePayload.model_validate(signing_body())
    by_name = SignaturePayload(fingerprint=SCENARIO_FINGERPRINT, identity="user@example.com", timestamp=1700000000000)
    assert by_alias == by_name
    assert by_alias.to_wire()["fileHash"] == SCENARIO_FINGERPRINT


def test_payload_is_frozen() -> None:
    payload = SignaturePayload.model_validate(signing_body())
    with pytest.raises(ValidationError):
        payload.identity = "other"  # type: ignore[misc]


def test_payload_rejects_extra_fields() -> None:
    with pytest.raises(ValidationError):
        SignaturePayload.model_validate(signing_body(extra="nope"))


def test_timestamp_upper_bound() -> None:
    SignaturePayload.model_validate(signing_body(timestamp=MAX_TIMESTAMP_MS))
    with pytest.raises(ValidationError):
        SignaturePayload.model_validate(signing_body(timestamp=MAX_TIMESTAMP_MS + 1))


def test_signing_request_timestamp_optional() -> None:
    body = signing_body()
    del body["timestamp"]
    assert SigningRequest.model_validate(body).timestamp is None


def test_bundle_wire_shape() -> None:
    bundle = SignatureBundle(signature="abc_-", public_key="MCow+/==", timestamp=5)
    assert bundle.to_wire() == {"signature": "abc_-", "publicKey": "MCow+/==", "timestamp": 5}


def test_bundle_rejects_standard_alphabet_signature() -> None:
    with pytest.raises(ValidationError):
        SignatureBundle(signature="ab+/", public_key="MCow", timestamp=5)


def test_verification_result_key_only_when_valid() -> None:
    assert VerificationResult(valid=False).to_wire() == {"valid": False, "publicKey": None}
    with pytest.raises(ValidationError):
        VerificationResult(valid=True)
    with pytest.raises(ValidationError):
        VerificationResult(valid=False, public_key="MCow")


def test_discovery_document_defaults_to_empty_history() -> None:
    assert KeyDiscoveryDocument(current="MCow").to_wire() == {"current": "MCow", "history": []}


def test_trust_query_wire_shape_omits_empty_note() -> None:
    query = TrustQuery(identity="a@b.c", total_signatures=4, trust_level=TrustLevel.MEDIUM)
    assert query.to_wire() == {"identity": "a@b.c", "totalSignatures": 4, "trustLevel": "medium"}


def test_parse_model_maps_validation_error() -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        parse_model(SignaturePayload, signing_body(fileHash="xyz"))
    err = exc_info.value
    assert err.field == "fileHash"
    assert err.code == "filesig:input/invalid"
    assert err.details["errors"]


def test_parse_model_rejects_non_mapping() -> None:
    with pytest.raises(InvalidInputError):
        parse_model(SignaturePayload, ["not", "a", "dict"])
