from __future__ import annotations

from app.api.errors import ApiError, ApiErrorCode, domain_error_status, to_error_payload
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


def test_to_error_payload_preserves_structured_detail() -> None:
    payload = to_error_payload(
        {"error_code": "SESSION_NOT_FOUND", "message": "Missing"},
        404,
    )

    assert payload == {"error_code": "SESSION_NOT_FOUND", "message": "Missing"}


def test_to_error_payload_normalizes_plain_string() -> None:
    payload = to_error_payload("boom", 500)

    assert payload == {"error_code": "HTTP_500", "message": "boom"}


def test_api_error_carries_envelope_detail() -> None:
    error = ApiError(
        status_code=422,
        error_code=ApiErrorCode.VALIDATION_ERROR,
        message="bad",
    )

    assert error.status_code == 422
    assert error.detail == {"error_code": "VALIDATION_ERROR", "message": "bad"}


def test_domain_errors_map_to_stable_status_and_code() -> None:
    abort = MergeAbort(index=0, total=2, cause=ExtractionError("x"))

    assert domain_error_status(abort) == (502, ApiErrorCode.PROFILE_INTAKE_FAILED)
    assert domain_error_status(ExtractionError("x")) == (502, ApiErrorCode.EXTRACTION_FAILED)
    assert domain_error_status(MappingError("x")) == (502, ApiErrorCode.FORM_MAPPING_FAILED)
    assert domain_error_status(CaptureBusy("x")) == (409, ApiErrorCode.CAPTURE_BUSY)
    assert domain_error_status(IntakeBusy("x")) == (409, ApiErrorCode.INTAKE_BUSY)
    assert domain_error_status(CaptureStateError("x")) == (
        409,
        ApiErrorCode.CAPTURE_STATE_INVALID,
    )
    assert domain_error_status(SessionNotFound("x")) == (404, ApiErrorCode.SESSION_NOT_FOUND)
    assert domain_error_status(TemplateNotFound("x")) == (404, ApiErrorCode.TEMPLATE_NOT_FOUND)
    assert domain_error_status(VoiceInputUnavailable("x")) == (
        501,
        ApiErrorCode.VOICE_INPUT_UNAVAILABLE,
    )
    assert domain_error_status(CameraUnavailable("x")) == (503, ApiErrorCode.CAMERA_UNAVAILABLE)
    assert domain_error_status(DocumentAssistError("x")) == (
        500,
        ApiErrorCode.INTERNAL_SERVER_ERROR,
    )
