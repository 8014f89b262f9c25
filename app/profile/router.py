"""FastAPI router for profile intake and save endpoints."""

from __future__ import annotations

from fastapi import APIRouter, File, Form, UploadFile
from pydantic import BaseModel, ConfigDict

from app.api.contracts import (
    ApiErrorResponse,
    DocumentRecordModel,
    IntakeResponse,
    PendingDocumentsResponse,
    ProfileResponse,
    UserProfileModel,
)
from app.api.errors import ApiError, ApiErrorCode
from app.api.uploads import read_image_upload
from app.profile.intake_service import ProfileService
from app.profile.merge import AUTO_DETECT
from app.session.context import SessionContext
from app.session.registry import SessionRegistry

INTAKE_FILES_PARAM = File(...)
DOCUMENT_TYPE_PARAM = Form(default=AUTO_DETECT)


class ProfileSaveRequest(BaseModel):
    """Edited profile to commit; omit it to commit the intake draft as-is."""

    model_config = ConfigDict(extra="forbid")

    profile: UserProfileModel | None = None


def _profile_response(context: SessionContext) -> ProfileResponse:
    return ProfileResponse(
        profile=UserProfileModel.from_domain(context.profile),
        draft=UserProfileModel.from_domain(context.draft) if context.draft else None,
        pending_documents=[
            DocumentRecordModel.from_domain(item) for item in context.pending_documents
        ],
    )


class ProfileRouter:
    """Router factory wrapper for profile endpoints."""

    def __init__(
        self,
        service: ProfileService,
        registry: SessionRegistry,
        *,
        upload_max_bytes: int,
        max_files: int,
    ) -> None:
        self._service = service
        self._registry = registry
        self._upload_max_bytes = upload_max_bytes
        self._max_files = max_files

    def build(self) -> APIRouter:
        """Create configured API router."""
        router = APIRouter(tags=["profile"])

        @router.get(
            "/api/sessions/{session_id}/profile",
            response_model=ProfileResponse,
            responses={404: {"model": ApiErrorResponse}},
        )
        def get_profile(session_id: str) -> ProfileResponse:
            """Committed profile plus the draft under review."""
            return _profile_response(self._registry.get(session_id))

        @router.put(
            "/api/sessions/{session_id}/profile",
            response_model=ProfileResponse,
            responses={
                404: {"model": ApiErrorResponse},
                422: {"model": ApiErrorResponse},
            },
        )
        def save_profile(session_id: str, req: ProfileSaveRequest) -> ProfileResponse:
            """Replace the profile wholesale and commit pending documents."""
            context = self._registry.get(session_id)
            edited = req.profile.to_domain() if req.profile is not None else None
            self._service.save_profile(context, edited)
            return _profile_response(context)

        @router.post(
            "/api/sessions/{session_id}/profile/intake",
            response_model=IntakeResponse,
            responses={
                400: {"model": ApiErrorResponse},
                404: {"model": ApiErrorResponse},
                409: {"model": ApiErrorResponse},
                413: {"model": ApiErrorResponse},
                422: {"model": ApiErrorResponse},
                502: {"model": ApiErrorResponse},
            },
        )
        async def intake_documents(
            session_id: str,
            files: list[UploadFile] = INTAKE_FILES_PARAM,
            document_type: str = DOCUMENT_TYPE_PARAM,
        ) -> IntakeResponse:
            """Extract a batch of identity documents into the draft profile."""
            context = self._registry.get(session_id)
            if not files:
                raise ApiError(
                    status_code=422,
                    error_code=ApiErrorCode.VALIDATION_ERROR,
                    message="At least one document image is required.",
                )
            if len(files) > self._max_files:
                raise ApiError(
                    status_code=422,
                    error_code=ApiErrorCode.VALIDATION_ERROR,
                    message=f"At most {self._max_files} documents per batch.",
                )
            images = [
                await read_image_upload(item, max_bytes=self._upload_max_bytes)
                for item in files
            ]
            result = await self._service.intake(
                context,
                images,
                document_type=(document_type or "").strip() or AUTO_DETECT,
            )
            return IntakeResponse(
                draft=UserProfileModel.from_domain(result.draft),
                new_documents=[
                    DocumentRecordModel.from_domain(item) for item in result.new_documents
                ],
                pending_documents=[
                    DocumentRecordModel.from_domain(item)
                    for item in result.pending_documents
                ],
                summaries=result.summaries,
                message=result.message,
            )

        @router.delete(
            "/api/sessions/{session_id}/profile/pending/{index}",
            response_model=PendingDocumentsResponse,
            responses={404: {"model": ApiErrorResponse}},
        )
        def remove_pending_document(session_id: str, index: int) -> PendingDocumentsResponse:
            context = self._registry.get(session_id)
            pending = self._service.remove_pending_document(context, index)
            return PendingDocumentsResponse(
                pending_documents=[DocumentRecordModel.from_domain(item) for item in pending]
            )

        return router


def create_profile_router(
    service: ProfileService,
    registry: SessionRegistry,
    *,
    upload_max_bytes: int,
    max_files: int,
) -> APIRouter:
    """Create profile router using provided application service."""
    return ProfileRouter(
        service=service,
        registry=registry,
        upload_max_bytes=upload_max_bytes,
        max_files=max_files,
    ).build()
