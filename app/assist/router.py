"""FastAPI router for explain / ask / translate helpers."""

from __future__ import annotations

from fastapi import APIRouter, File, Form, UploadFile

from app.api.contracts import ApiErrorResponse, AssistResponse, SpokenQuestionResponse
from app.api.errors import ApiError, ApiErrorCode
from app.api.uploads import read_image_upload, read_limited
from app.assist.service import AssistService
from app.extraction.images import ImagePayload
from app.extraction.protocols import Language
from app.forms.service import FormsService
from app.session.context import SessionContext
from app.session.registry import SessionRegistry

OPTIONAL_IMAGE_PARAM = File(default=None)
AUDIO_PARAM = File(...)
LANGUAGE_PARAM = Form(default=Language.EN)
QUESTION_PARAM = Form(...)

_ASSIST_RESPONSES = {
    404: {"model": ApiErrorResponse},
    409: {"model": ApiErrorResponse},
    413: {"model": ApiErrorResponse},
    422: {"model": ApiErrorResponse},
}


class AssistRouter:
    """Router factory wrapper for natural-language helper endpoints.

    Each endpoint works on an uploaded image when one is sent and falls back
    to the image of the session's current scan otherwise.
    """

    def __init__(
        self,
        service: AssistService,
        forms_service: FormsService,
        registry: SessionRegistry,
        *,
        upload_max_bytes: int,
    ) -> None:
        self._service = service
        self._forms_service = forms_service
        self._registry = registry
        self._upload_max_bytes = upload_max_bytes

    async def _image(self, context: SessionContext, file: UploadFile | None) -> ImagePayload:
        if file is not None and file.filename:
            return await read_image_upload(file, max_bytes=self._upload_max_bytes)
        return self._forms_service.current_image(context)

    def build(self) -> APIRouter:
        """Create configured API router."""
        router = APIRouter(tags=["assist"])

        @router.post(
            "/api/sessions/{session_id}/assist/explain",
            response_model=AssistResponse,
            responses=_ASSIST_RESPONSES,
        )
        async def explain_form(
            session_id: str,
            language: Language = LANGUAGE_PARAM,
            file: UploadFile | None = OPTIONAL_IMAGE_PARAM,
        ) -> AssistResponse:
            """Short plain-language summary of what the form is for."""
            context = self._registry.get(session_id)
            image = await self._image(context, file)
            return AssistResponse(text=await self._service.explain(image, language))

        @router.post(
            "/api/sessions/{session_id}/assist/ask",
            response_model=AssistResponse,
            responses=_ASSIST_RESPONSES,
        )
        async def ask_about_form(
            session_id: str,
            question: str = QUESTION_PARAM,
            language: Language = LANGUAGE_PARAM,
            file: UploadFile | None = OPTIONAL_IMAGE_PARAM,
        ) -> AssistResponse:
            context = self._registry.get(session_id)
            if not question.strip():
                raise ApiError(
                    status_code=422,
                    error_code=ApiErrorCode.VALIDATION_ERROR,
                    message="question is required.",
                )
            image = await self._image(context, file)
            answer = await self._service.ask(image, question.strip(), language)
            return AssistResponse(text=answer)

        @router.post(
            "/api/sessions/{session_id}/assist/ask-voice",
            response_model=SpokenQuestionResponse,
            responses={**_ASSIST_RESPONSES, 501: {"model": ApiErrorResponse}},
        )
        async def ask_spoken_question(
            session_id: str,
            audio: UploadFile = AUDIO_PARAM,
            language: Language = LANGUAGE_PARAM,
            file: UploadFile | None = OPTIONAL_IMAGE_PARAM,
        ) -> SpokenQuestionResponse:
            """Transcribe a recorded question and answer it."""
            context = self._registry.get(session_id)
            image = await self._image(context, file)
            audio_bytes = await read_limited(audio, max_bytes=self._upload_max_bytes)
            question, answer = await self._service.ask_spoken(
                image,
                audio_bytes,
                audio.content_type or "audio/webm",
                language,
            )
            return SpokenQuestionResponse(question=question, answer=answer)

        @router.post(
            "/api/sessions/{session_id}/assist/translate",
            response_model=AssistResponse,
            responses=_ASSIST_RESPONSES,
        )
        async def translate_form(
            session_id: str,
            language: Language = LANGUAGE_PARAM,
            file: UploadFile | None = OPTIONAL_IMAGE_PARAM,
        ) -> AssistResponse:
            """Markdown translation of all visible text."""
            context = self._registry.get(session_id)
            image = await self._image(context, file)
            return AssistResponse(text=await self._service.translate(image, language))

        return router


def create_assist_router(
    service: AssistService,
    forms_service: FormsService,
    registry: SessionRegistry,
    *,
    upload_max_bytes: int,
) -> APIRouter:
    """Create assist router using provided application services."""
    return AssistRouter(
        service=service,
        forms_service=forms_service,
        registry=registry,
        upload_max_bytes=upload_max_bytes,
    ).build()
