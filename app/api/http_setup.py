"""HTTP middleware and exception handler wiring for FastAPI apps."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.contracts import ApiErrorResponse
from app.api.errors import ApiErrorCode, domain_error_status, to_error_payload
from app.core.config import AppConfig
from app.core.errors import DocumentAssistError
from app.core.logging import set_correlation_id


def _error_response(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiErrorResponse(error_code=error_code, message=message).model_dump(),
    )


def register_http_middleware(app: FastAPI, *, config: AppConfig, logger: Any) -> None:
    """Attach request size limits, correlation ids and security headers."""

    @app.middleware("http")
    async def request_size_limit_middleware(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                parsed_length = int(content_length)
            except ValueError:
                parsed_length = 0
            if parsed_length > config.security.request_max_bytes:
                return _error_response(
                    413,
                    ApiErrorCode.REQUEST_TOO_LARGE,
                    "Request size exceeds configured limit "
                    f"({config.security.request_max_bytes} bytes).",
                )
        return await call_next(request)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        correlation_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        set_correlation_id(correlation_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        logger.info(
            "request_completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
            },
        )
        return response


def register_exception_handlers(app: FastAPI, *, logger: Any) -> None:
    """Translate HTTP, validation and domain errors into the error envelope."""

    @app.exception_handler(HTTPException)
    async def handle_http_exception(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        payload = to_error_payload(exc.detail, exc.status_code)
        logger.warning(
            "http_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
            },
        )
        return _error_response(exc.status_code, payload["error_code"], payload["message"])

    @app.exception_handler(DocumentAssistError)
    async def handle_domain_exception(
        request: Request, exc: DocumentAssistError
    ) -> JSONResponse:
        status_code, error_code = domain_error_status(exc)
        logger.warning(
            "domain_exception: %s",
            exc,
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
            },
        )
        return _error_response(status_code, error_code, str(exc) or error_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning(
            "validation_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": 422,
            },
        )
        return _error_response(422, ApiErrorCode.VALIDATION_ERROR, str(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "unexpected_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": 500,
            },
        )
        return _error_response(
            500, ApiErrorCode.INTERNAL_SERVER_ERROR, str(exc) or "Internal server error"
        )
