"""Upload validation shared by routes that accept images."""

from __future__ import annotations

from fastapi import UploadFile

from app.api.errors import ApiError, ApiErrorCode
from app.extraction.images import ALLOWED_SUFFIXES, ImagePayload, allowed_suffix, load_image


async def read_image_upload(file: UploadFile, *, max_bytes: int) -> ImagePayload:
    """Validate filename, size and content, then decode into an image payload."""
    if not file.filename:
        raise ApiError(
            status_code=400,
            error_code=ApiErrorCode.VALIDATION_ERROR,
            message="Filename is required.",
        )
    if not allowed_suffix(file.filename):
        raise ApiError(
            status_code=422,
            error_code=ApiErrorCode.VALIDATION_ERROR,
            message=(
                f"Unsupported file type: {file.filename}. "
                f"Allowed: {', '.join(sorted(ALLOWED_SUFFIXES))}."
            ),
        )
    file_bytes = await read_limited(file, max_bytes=max_bytes)
    try:
        return load_image(file_bytes)
    except ValueError as exc:
        raise ApiError(
            status_code=422,
            error_code=ApiErrorCode.VALIDATION_ERROR,
            message=f"{file.filename}: {exc}",
        ) from exc


async def read_limited(file: UploadFile, *, max_bytes: int) -> bytes:
    file_bytes = await file.read()
    if len(file_bytes) > max_bytes:
        raise ApiError(
            status_code=413,
            error_code=ApiErrorCode.REQUEST_TOO_LARGE,
            message=f"Uploaded file exceeds configured limit ({max_bytes} bytes).",
        )
    return file_bytes
