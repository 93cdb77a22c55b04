"""Tests for the FastAPI signing/verification surface."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from filesig.config import KeyConfig, Settings
from filesig.crypto.keys import generate_keypair_base64
from filesig.crypto.registry import KeyRegistry
from filesig.links import parse_share_token
from filesig.state import InMemorySignatureStore
from filesig.transport.server import PUBLIC_KEYS_PATH, create_app
from filesig.trust import InMemorySignatureCounter

from tests.factories import SCENARIO_TIMESTAMP, signing_body, verification_body


@pytest.fixture
def store() -> InMemorySignatureStore:
    return InMemorySignatureStore()


@pytest.fixture
def counter() -> InMemorySignatureCounter:
    return InMemorySignatureCounter()


@pytest.fixture
def client(
    registry: KeyRegistry, store: InMemorySignatureStore, counter: InMemorySignatureCounter
) -> TestClient:
    app = create_app(
        registry,
        settings=Settings(verify_base_url="https://sig.example.com"),
        signature_store=store,
        signature_counter=counter,
    )
    return TestClient(app)


def _sign(client: TestClient, **overrides: Any) -> dict[str, Any]:
    response = client.post("/api/sign", json=signing_body(**overrides))
    assert response.status_code == 200, response.text
    return response.json()


class TestSign:
    def test_returns_bundle(self, client: TestClient, registry: KeyRegistry) -> None:
        bundle = _sign(client)
        assert set(bundle) == {"signature", "publicKey", "timestamp"}
        assert bundle["timestamp"] == SCENARIO_TIMESTAMP
        assert bundle["publicKey"] == registry.get_accepted_public_keys()[0]

    def test_stamps_timestamp_when_omitted(self, client: TestClient) -> None:
        body = signing_body()
        del body["timestamp"]
        response = client.post("/api/sign", json=body)
        assert response.status_code == 200
        assert response.json()["timestamp"] > SCENARIO_TIMESTAMP

    def test_records_bundle_and_count(
        self,
        client: TestClient,
        store: InMemorySignatureStore,
        counter: InMemorySignatureCounter,
    ) -> None:
        bundle = _sign(client)
        assert store.get(bundle["signature"]) is not None
        assert counter.get("user@example.com") == 1

    @pytest.mark.parametrize(
        "overrides",
        [{"fileHash": "abc"}, {"identity": ""}, {"timestamp": -1}, {"timestamp": "now"}],
    )
    def test_malformed_request_is_400(self, client: TestClient, overrides: dict[str, Any]) -> None:
        response = client.post("/api/sign", json=signing_body(**overrides))
        assert response.status_code == 400
        assert response.json()["code"] == "filesig:input/invalid"

    def test_non_json_body_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/sign", content=b"not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    def test_verification_only_registry_is_503(self, key_config: KeyConfig) -> None:
        app = create_app(KeyRegistry(key_config.public_only()))
        response = TestClient(app).post("/api/sign", json=signing_body())
        assert response.status_code == 503
        assert response.json()["code"] == "filesig:config/invalid"

    def test_allow_list_rejects_other_domains(self, registry: KeyRegistry) -> None:
        app = create_app(registry, settings=Settings(allowed_email_domains=("corp.example",)))
        client = TestClient(app)
        assert client.post("/api/sign", json=signing_body()).status_code == 403
        allowed = client.post("/api/sign", json=signing_body(identity="me@corp.example"))
        assert allowed.status_code == 200

    def test_bookkeeping_failure_does_not_fail_signing(self, registry: KeyRegistry) -> None:
        class BrokenStore:
            def save(self, bundle: Any, payload: Any) -> None:
                raise ConnectionError("down")

            def get(self, signature: str) -> None:
                return None

        client = TestClient(create_app(registry, signature_store=BrokenStore()))
        assert client.post("/api/sign", json=signing_body()).status_code == 200


class TestVerify:
    def test_valid_signature(self, client: TestClient) -> None:
        bundle = _sign(client)
        response = client.post("/api/verify", json=verification_body(bundle["signature"]))
        assert response.status_code == 200
        assert response.json() == {"valid": True, "publicKey": bundle["publicKey"]}

    def test_shifted_timestamp_is_invalid(self, client: TestClient) -> None:
        bundle = _sign(client)
        response = client.post(
            "/api/verify",
            json=verification_body(bundle["signature"], timestamp=SCENARIO_TIMESTAMP + 1),
        )
        assert response.status_code == 200
        assert response.json() == {"valid": False, "publicKey": None}

    def test_garbage_signature_is_invalid_not_error(self, client: TestClient) -> None:
        response = client.post("/api/verify", json=verification_body("!!!"))
        assert response.status_code == 200
        assert response.json()["valid"] is False

    def test_missing_signature_is_400(self, client: TestClient) -> None:
        response = client.post("/api/verify", json=signing_body())
        assert response.status_code == 400

    def test_verifies_after_rotation(self, client: TestClient, registry: KeyRegistry) -> None:
        bundle = _sign(client)
        registry.reload(
            KeyConfig(
                public_key=generate_keypair_base64()[1],
                historical_public_keys=(bundle["publicKey"],),
            )
        )
        response = client.post("/api/verify", json=verification_body(bundle["signature"]))
        assert response.json() == {"valid": True, "publicKey": bundle["publicKey"]}


class TestPublicKeys:
    def test_discovery_document_and_headers(self, client: TestClient, registry: KeyRegistry) -> None:
        response = client.get(PUBLIC_KEYS_PATH)
        assert response.status_code == 200
        assert response.json() == {"current": registry.get_accepted_public_keys()[0], "history": []}
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["cache-control"] == "public, max-age=0, must-revalidate"

    def test_unconfigured_registry_is_503(self) -> None:
        client = TestClient(create_app(KeyRegistry(KeyConfig())))
        assert client.get(PUBLIC_KEYS_PATH).status_code == 503


class TestTrustAndShare:
    def test_trust_level_grows_with_signatures(self, client: TestClient) -> None:
        assert client.get("/api/trust/user@example.com").json()["trustLevel"] == "none"
        for i in range(4):
            _sign(client, timestamp=SCENARIO_TIMESTAMP + i)
        assert client.get("/api/trust/USER@example.com").json() == {
            "identity": "user@example.com",
            "totalSignatures": 4,
            "trustLevel": "medium",
        }

    def test_sign_and_trust_use_the_same_counter_key(self, registry: KeyRegistry) -> None:
        class DictCounter:
            def __init__(self) -> None:
                self.counts: dict[str, int] = {}

            def get(self, identity: str) -> int:
                return self.counts.get(identity, 0)

            def increment(self, identity: str) -> int:
                self.counts[identity] = self.counts.get(identity, 0) + 1
                return self.counts[identity]

        counter = DictCounter()
        client = TestClient(create_app(registry, signature_counter=counter))
        _sign(client, identity="Alice@Example.com")

        assert counter.counts == {"alice@example.com": 1}
        assert client.get("/api/trust/Alice@Example.com").json() == {
            "identity": "alice@example.com",
            "totalSignatures": 1,
            "trustLevel": "low",
        }

    def test_trust_without_counter_is_503(self, registry: KeyRegistry) -> None:
        client = TestClient(create_app(registry))
        assert client.get("/api/trust/user@example.com").status_code == 503

    def test_share_link(self, client: TestClient) -> None:
        bundle = _sign(client)
        response = client.get(f"/api/share/{bundle['signature']}")
        assert response.status_code == 200
        body = response.json()
        assert body["verifyUrl"] == f"https://sig.example.com/verify?data={body['token']}"
        assert parse_share_token(body["token"]).to_wire() == bundle

    def test_share_unknown_signature_is_404(self, client: TestClient) -> None:
        assert client.get("/api/share/unknown").status_code == 404
