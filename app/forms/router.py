"""FastAPI router for form scan, guided fill and template endpoints."""

from __future__ import annotations

from fastapi import APIRouter, File, Form, UploadFile

from app.api.contracts import (
    ApiErrorResponse,
    DeleteTemplateResponse,
    FormRecordResponse,
    HistoryResponse,
    ScanStateResponse,
    TemplateResponse,
    TemplateSaveRequest,
    TemplatesListResponse,
)
from app.api.uploads import read_image_upload
from app.forms.capture import CaptureState
from app.forms.service import FormsService
from app.session.context import SessionContext
from app.session.registry import SessionRegistry

FORM_IMAGE_PARAM = File(...)
TEMPLATE_ID_PARAM = Form(default="")

_NAVIGATION_RESPONSES = {
    404: {"model": ApiErrorResponse},
    409: {"model": ApiErrorResponse},
}


def scan_state(context: SessionContext) -> ScanStateResponse:
    """Render the capture state of a session for the client."""
    capture = context.capture
    if capture is None:
        return ScanStateResponse.idle()
    template_id = capture.template.id if capture.template is not None else ""
    if capture.state != CaptureState.RESULT_READY:
        return ScanStateResponse(state=str(capture.state), template_id=template_id)
    return ScanStateResponse.from_navigator(
        str(capture.state), capture.navigator, template_id
    )


class FormsRouter:
    """Router factory wrapper for the capture and guided-fill flow."""

    def __init__(
        self,
        service: FormsService,
        registry: SessionRegistry,
        *,
        upload_max_bytes: int,
    ) -> None:
        self._service = service
        self._registry = registry
        self._upload_max_bytes = upload_max_bytes

    def build(self) -> APIRouter:
        """Create configured API router."""
        router = APIRouter(tags=["forms"])

        @router.post(
            "/api/sessions/{session_id}/scan",
            response_model=ScanStateResponse,
            responses={
                400: {"model": ApiErrorResponse},
                404: {"model": ApiErrorResponse},
                409: {"model": ApiErrorResponse},
                413: {"model": ApiErrorResponse},
                422: {"model": ApiErrorResponse},
                502: {"model": ApiErrorResponse},
            },
        )
        async def capture_form(
            session_id: str,
            file: UploadFile = FORM_IMAGE_PARAM,
            template_id: str = TEMPLATE_ID_PARAM,
        ) -> ScanStateResponse:
            """Analyze a blank form, or re-bind a saved template onto it."""
            context = self._registry.get(session_id)
            image = await read_image_upload(file, max_bytes=self._upload_max_bytes)
            await self._service.capture(
                context, image, template_id=(template_id or "").strip()
            )
            return scan_state(context)

        @router.get(
            "/api/sessions/{session_id}/scan",
            response_model=ScanStateResponse,
            responses={404: {"model": ApiErrorResponse}},
        )
        def get_scan(session_id: str) -> ScanStateResponse:
            return scan_state(self._registry.get(session_id))

        @router.post(
            "/api/sessions/{session_id}/scan/next",
            response_model=ScanStateResponse,
            responses=_NAVIGATION_RESPONSES,
        )
        def next_field(session_id: str) -> ScanStateResponse:
            context = self._registry.get(session_id)
            self._service.next_field(context)
            return scan_state(context)

        @router.post(
            "/api/sessions/{session_id}/scan/previous",
            response_model=ScanStateResponse,
            responses=_NAVIGATION_RESPONSES,
        )
        def previous_field(session_id: str) -> ScanStateResponse:
            context = self._registry.get(session_id)
            self._service.previous_field(context)
            return scan_state(context)

        @router.post(
            "/api/sessions/{session_id}/scan/toggle-mode",
            response_model=ScanStateResponse,
            responses=_NAVIGATION_RESPONSES,
        )
        def toggle_mode(session_id: str) -> ScanStateResponse:
            """Switch between guided and show-all rendering."""
            context = self._registry.get(session_id)
            self._service.toggle_mode(context)
            return scan_state(context)

        @router.post(
            "/api/sessions/{session_id}/scan/retake",
            response_model=ScanStateResponse,
            responses=_NAVIGATION_RESPONSES,
        )
        def retake(session_id: str) -> ScanStateResponse:
            """Discard the current result and return to capture."""
            context = self._registry.get(session_id)
            self._service.retake(context)
            return scan_state(context)

        @router.post(
            "/api/sessions/{session_id}/scan/complete",
            response_model=FormRecordResponse,
            responses=_NAVIGATION_RESPONSES,
        )
        def complete(session_id: str) -> FormRecordResponse:
            """Finish the current form and record it in history."""
            context = self._registry.get(session_id)
            return FormRecordResponse.from_domain(self._service.complete(context))

        @router.post(
            "/api/sessions/{session_id}/templates",
            response_model=TemplateResponse,
            responses=_NAVIGATION_RESPONSES,
        )
        def save_template(session_id: str, req: TemplateSaveRequest) -> TemplateResponse:
            """Store the current overlays as a reusable template."""
            context = self._registry.get(session_id)
            template = self._service.save_template(context, req.name)
            return TemplateResponse.from_domain(template)

        @router.get(
            "/api/sessions/{session_id}/templates",
            response_model=TemplatesListResponse,
            responses={404: {"model": ApiErrorResponse}},
        )
        def list_templates(session_id: str) -> TemplatesListResponse:
            context = self._registry.get(session_id)
            return TemplatesListResponse(
                items=[
                    TemplateResponse.from_domain(item)
                    for item in self._service.list_templates(context)
                ]
            )

        @router.delete(
            "/api/sessions/{session_id}/templates/{template_id}",
            response_model=DeleteTemplateResponse,
            responses={404: {"model": ApiErrorResponse}},
        )
        def delete_template(session_id: str, template_id: str) -> DeleteTemplateResponse:
            context = self._registry.get(session_id)
            self._service.delete_template(context, template_id)
            return DeleteTemplateResponse(template_id=template_id, deleted=True)

        @router.get(
            "/api/sessions/{session_id}/history",
            response_model=HistoryResponse,
            responses={404: {"model": ApiErrorResponse}},
        )
        def history(session_id: str) -> HistoryResponse:
            """Completed forms, most recent first."""
            context = self._registry.get(session_id)
            return HistoryResponse(
                items=[
                    FormRecordResponse.from_domain(item)
                    for item in self._service.history(context)
                ]
            )

        return router


def create_forms_router(
    service: FormsService,
    registry: SessionRegistry,
    *,
    upload_max_bytes: int,
) -> APIRouter:
    """Create forms router using provided application service."""
    return FormsRouter(
        service=service,
        registry=registry,
        upload_max_bytes=upload_max_bytes,
    ).build()
