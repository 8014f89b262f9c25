from __future__ import annotations

import asyncio
import json
import logging
from io import BytesIO
from typing import Any

import pytest
from fastapi import FastAPI, HTTPException, UploadFile
from starlette.requests import Request
from starlette.responses import Response

from app.api.http_setup import register_exception_handlers, register_http_middleware
from app.api.uploads import read_limited
from app.core.config import (
    AppConfig,
    ExtractionConfig,
    IntakeConfig,
    LoggingConfig,
    SecurityConfig,
)
from app.core.errors import (
    CaptureBusy,
    DocumentAssistError,
    ExtractionError,
    IntakeBusy,
    MergeAbort,
    SessionNotFound,
    VoiceInputUnavailable,
)
from app.core.logging import CORRELATION_ID_CTX, JsonLogFormatter

LOGGER = logging.getLogger("tests.http_setup")
INTAKE_PATH = "/api/sessions/s1/profile/intake"
REQUEST_MAX_BYTES = 64


def _app() -> FastAPI:
    config = AppConfig(
        extraction=ExtractionConfig(api_key="", model_name="gemini-test"),
        intake=IntakeConfig(max_files=5),
        logging=LoggingConfig(level="INFO"),
        security=SecurityConfig(
            cors_allowed_origins=["http://localhost:3000"],
            request_max_bytes=REQUEST_MAX_BYTES,
            upload_max_bytes=16,
        ),
    )
    app = FastAPI()
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)
    return app


def _request(path: str, method: str = "POST", headers: dict[str, str] | None = None) -> Request:
    scope: dict[str, Any] = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
    }
    return Request(scope)


def _dispatch(app: FastAPI, name: str):
    for middleware in app.user_middleware:
        dispatch = middleware.kwargs.get("dispatch")
        if getattr(dispatch, "__name__", "") == name:
            return dispatch
    raise AssertionError(f"Dispatch {name!r} not found")


def _handle(app: FastAPI, exc_type: type[Exception], exc: Exception, path: str = INTAKE_PATH) -> Response:
    return asyncio.run(app.exception_handlers[exc_type](_request(path), exc))


def _body(response: Response) -> dict[str, Any]:
    return json.loads(bytes(response.body))


def test_intake_upload_over_request_limit_is_rejected_before_handler() -> None:
    dispatch = _dispatch(_app(), "request_size_limit_middleware")
    reached: list[str] = []

    async def call_next(request: Request) -> Response:
        reached.append(request.url.path)
        return Response(status_code=200)

    too_big = asyncio.run(
        dispatch(
            _request(INTAKE_PATH, headers={"content-length": str(REQUEST_MAX_BYTES + 1)}),
            call_next,
        )
    )
    within = asyncio.run(
        dispatch(
            _request(INTAKE_PATH, headers={"content-length": str(REQUEST_MAX_BYTES)}),
            call_next,
        )
    )

    assert too_big.status_code == 413
    assert _body(too_big)["error_code"] == "REQUEST_TOO_LARGE"
    assert str(REQUEST_MAX_BYTES) in _body(too_big)["message"]
    assert within.status_code == 200
    assert reached == [INTAKE_PATH]


def test_request_id_is_bound_for_the_handler_and_echoed() -> None:
    dispatch = _dispatch(_app(), "request_logging_middleware")
    seen: list[str] = []

    async def call_next(_request: Request) -> Response:
        seen.append(CORRELATION_ID_CTX.get())
        return Response(status_code=200)

    echoed = asyncio.run(dispatch(_request("/api/health", "GET", {"X-Request-ID": "req-7"}), call_next))
    generated = asyncio.run(dispatch(_request("/api/health", "GET"), call_next))

    assert seen[0] == "req-7"
    assert echoed.headers["X-Request-ID"] == "req-7"
    assert len(seen[1]) == 32
    assert generated.headers["X-Request-ID"] == seen[1]
    assert generated.headers["X-Frame-Options"] == "DENY"


def test_session_log_line_carries_correlation_id() -> None:
    dispatch = _dispatch(_app(), "request_logging_middleware")
    lines: list[dict[str, Any]] = []

    async def call_next(_request: Request) -> Response:
        record = LOGGER.makeRecord(
            LOGGER.name,
            logging.INFO,
            __file__,
            1,
            "Document %s of %s merged",
            (1, 2),
            None,
            extra={"session_id": "s1", "document_type": "PAN Card"},
        )
        lines.append(json.loads(JsonLogFormatter().format(record)))
        return Response(status_code=200)

    asyncio.run(dispatch(_request(INTAKE_PATH, headers={"X-Request-ID": "req-9"}), call_next))

    assert len(lines) == 1
    assert lines[0]["message"] == "Document 1 of 2 merged"
    assert lines[0]["correlation_id"] == "req-9"
    assert lines[0]["session_id"] == "s1"
    assert lines[0]["document_type"] == "PAN Card"


def test_upload_limit_error_uses_error_envelope() -> None:
    app = _app()
    upload = UploadFile(filename="big.png", file=BytesIO(b"x" * 32))

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(read_limited(upload, max_bytes=16))
    response = _handle(app, HTTPException, exc_info.value)

    assert response.status_code == 413
    assert _body(response) == {
        "error_code": "REQUEST_TOO_LARGE",
        "message": "Uploaded file exceeds configured limit (16 bytes).",
    }


@pytest.mark.parametrize(
    ("error", "status_code", "error_code"),
    [
        (MergeAbort(index=1, total=2, cause=ExtractionError("blurry")), 502, "PROFILE_INTAKE_FAILED"),
        (IntakeBusy("Another document batch is still being processed."), 409, "INTAKE_BUSY"),
        (CaptureBusy("Form analysis already in progress."), 409, "CAPTURE_BUSY"),
        (SessionNotFound("Session not found: s1"), 404, "SESSION_NOT_FOUND"),
        (VoiceInputUnavailable("Voice input is not configured."), 501, "VOICE_INPUT_UNAVAILABLE"),
    ],
)
def test_domain_errors_become_error_envelopes(
    error: DocumentAssistError, status_code: int, error_code: str
) -> None:
    response = _handle(_app(), DocumentAssistError, error)

    assert response.status_code == status_code
    assert _body(response) == {"error_code": error_code, "message": str(error)}
