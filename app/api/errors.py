"""API error envelope and domain-error translation."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException

from app.core.errors import (
    CameraUnavailable,
    CaptureBusy,
    CaptureStateError,
    DocumentAssistError,
    ExtractionError,
    IntakeBusy,
    MappingError,
    MergeAbort,
    SessionNotFound,
    TemplateNotFound,
    VoiceInputUnavailable,
)


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    PROFILE_INTAKE_FAILED = "PROFILE_INTAKE_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    FORM_MAPPING_FAILED = "FORM_MAPPING_FAILED"
    INTAKE_BUSY = "INTAKE_BUSY"
    CAPTURE_BUSY = "CAPTURE_BUSY"
    CAPTURE_STATE_INVALID = "CAPTURE_STATE_INVALID"
    VOICE_INPUT_UNAVAILABLE = "VOICE_INPUT_UNAVAILABLE"
    CAMERA_UNAVAILABLE = "CAMERA_UNAVAILABLE"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


# Ordered: subclasses before their bases.
DOMAIN_ERROR_STATUS: list[tuple[type[DocumentAssistError], int, ApiErrorCode]] = [
    (MergeAbort, 502, ApiErrorCode.PROFILE_INTAKE_FAILED),
    (ExtractionError, 502, ApiErrorCode.EXTRACTION_FAILED),
    (MappingError, 502, ApiErrorCode.FORM_MAPPING_FAILED),
    (IntakeBusy, 409, ApiErrorCode.INTAKE_BUSY),
    (CaptureBusy, 409, ApiErrorCode.CAPTURE_BUSY),
    (CaptureStateError, 409, ApiErrorCode.CAPTURE_STATE_INVALID),
    (SessionNotFound, 404, ApiErrorCode.SESSION_NOT_FOUND),
    (TemplateNotFound, 404, ApiErrorCode.TEMPLATE_NOT_FOUND),
    (VoiceInputUnavailable, 501, ApiErrorCode.VOICE_INPUT_UNAVAILABLE),
    (CameraUnavailable, 503, ApiErrorCode.CAMERA_UNAVAILABLE),
]


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )


def domain_error_status(exc: DocumentAssistError) -> tuple[int, ApiErrorCode]:
    """Map a domain error to its HTTP status and error code."""
    for error_cls, status_code, error_code in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status_code, error_code
    return 500, ApiErrorCode.INTERNAL_SERVER_ERROR


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }
