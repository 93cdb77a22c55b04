"""FastAPI application exposing the signing subsystem over JSON.

Routes:
    POST /api/sign                      issue a signature bundle
    POST /api/verify                    verify against all accepted keys
    GET  /.well-known/public-keys.json  key discovery document
    GET  /api/trust/{identity}          cosmetic trust level
    GET  /api/share/{signature}         shareable verification link

Caller authentication and rate limiting are expected upstream (reverse proxy
or gateway); the identity in a signing request is taken as already verified.

Error responses are ``{"error": ..., "code": ...}``. Malformed requests get
400; missing key material gets 503. A signature that does not verify is a
200 with ``valid: false`` and no hint as to why.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from filesig import __version__
from filesig.auth.validation import is_allowed_email
from filesig.config import Settings
from filesig.crypto.registry import KeyRegistry
from filesig.crypto.signing import Signer, now_ms
from filesig.crypto.verify import Verifier
from filesig.errors import ConfigurationError, DecodeError, FileSigError, InvalidInputError
from filesig.links import build_share_token, create_verification_url
from filesig.models import SignatureBundle, SignaturePayload, SigningRequest, parse_model
from filesig.observability import get_logger
from filesig.state.signatures import SignatureStore
from filesig.trust import SignatureCounter, normalize_identity, trust_report

logger = get_logger(__name__)

PUBLIC_KEYS_PATH = "/.well-known/public-keys.json"
PUBLIC_KEYS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Cache-Control": "public, max-age=0, must-revalidate",
}


def _error(status_code: int, message: str, code: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": message}
    if code is not None:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidInputError("request body is not valid JSON") from e


async def _invalid_input_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, FileSigError)
    return _error(400, "Invalid request body", exc.code)


async def _configuration_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ConfigurationError)
    logger.error("filesig.server.configuration_error", reason=exc.reason)
    return _error(503, "Signing service unavailable", exc.code)


def create_signing_router() -> APIRouter:
    router = APIRouter(tags=["signatures"])

    @router.post("/api/sign")
    async def sign(request: Request) -> JSONResponse:
        state = request.app.state
        body = await _read_json(request)
        signing_request: SigningRequest = parse_model(SigningRequest, body)
        if not is_allowed_email(signing_request.identity, state.settings.allowed_email_domains):
            return _error(403, "Identity not allowed")
        payload = SignaturePayload(
            fingerprint=signing_request.fingerprint,
            identity=signing_request.identity,
            timestamp=(
                signing_request.timestamp if signing_request.timestamp is not None else now_ms()
            ),
        )
        bundle = state.signer.issue(payload)
        _record_issued(state.signature_store, state.signature_counter, bundle, payload)
        return JSONResponse(status_code=200, content=bundle.to_wire())

    @router.post("/api/verify")
    async def verify(request: Request) -> JSONResponse:
        body = await _read_json(request)
        result = request.app.state.verifier.verify(body)
        return JSONResponse(status_code=200, content=result.to_wire())

    @router.get(PUBLIC_KEYS_PATH)
    async def public_keys(request: Request) -> JSONResponse:
        document = request.app.state.registry.discovery_document()
        return JSONResponse(
            status_code=200,
            content=document.to_wire(),
            headers=PUBLIC_KEYS_HEADERS,
        )

    @router.get("/api/trust/{identity}")
    async def trust(identity: str, request: Request) -> JSONResponse:
        state = request.app.state
        if not identity.strip():
            return _error(400, "Invalid identity")
        if state.signature_counter is None:
            return _error(503, "Trust data not configured")
        report = trust_report(identity, state.signature_counter)
        return JSONResponse(status_code=200, content=report.to_wire())

    @router.get("/api/share/{signature}")
    async def share(signature: str, request: Request) -> JSONResponse:
        state = request.app.state
        if state.signature_store is None:
            return _error(503, "Signature lookup not configured")
        record = state.signature_store.get(signature)
        if record is None:
            return _error(404, "Signature not found")
        token = build_share_token(record.bundle)
        return JSONResponse(
            status_code=200,
            content={
                "token": token,
                "verifyUrl": create_verification_url(token, state.settings.verify_base_url),
            },
        )

    return router


def _record_issued(
    store: SignatureStore | None,
    counter: SignatureCounter | None,
    bundle: SignatureBundle,
    payload: SignaturePayload,
) -> None:
    """Best-effort bookkeeping after issuance; the bundle is valid either way."""
    try:
        if store is not None:
            store.save(bundle, payload)
        if counter is not None:
            counter.increment(normalize_identity(payload.identity))
    except Exception as e:  # noqa: BLE001
        logger.warning("filesig.server.bookkeeping_failed", error=str(e))


def create_app(
    registry: KeyRegistry,
    settings: Settings | None = None,
    signature_store: SignatureStore | None = None,
    signature_counter: SignatureCounter | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        registry: Key registry; a verification-only registry makes /api/sign return 503
        settings: Service settings (base URL, email allow-list). Defaults to empty Settings
        signature_store: Optional store used by /api/share
        signature_counter: Optional counter used by /api/trust and incremented on sign
    """
    app = FastAPI(title="filesig", version=__version__)
    app.state.settings = settings or Settings()
    app.state.registry = registry
    app.state.signer = Signer(registry)
    app.state.verifier = Verifier(registry)
    app.state.signature_store = signature_store
    app.state.signature_counter = signature_counter

    app.add_exception_handler(InvalidInputError, _invalid_input_handler)
    app.add_exception_handler(DecodeError, _invalid_input_handler)
    app.add_exception_handler(ConfigurationError, _configuration_handler)
    app.include_router(create_signing_router())

    logger.info(
        "filesig.server.created",
        signing_enabled=registry.is_signing_enabled,
        store=signature_store is not None,
        counter=signature_counter is not None,
    )
    return app
