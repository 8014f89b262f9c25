"""Application service for scan, guided-fill and template flows."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from app.core.errors import CaptureStateError
from app.extraction.images import ImagePayload
from app.extraction.protocols import FormMapperProtocol
from app.forms.capture import CaptureSession, CaptureState
from app.forms.navigator import GuidedFillNavigator
from app.forms.overlay import ScanResult
from app.forms.templates import FormTemplate
from app.session.context import FormRecord, SessionContext

LOGGER = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FormsService:
    """Drives one capture session per user session."""

    def __init__(
        self,
        *,
        mapper: FormMapperProtocol,
        now_iso: Callable[[], str] = _now_iso,
    ) -> None:
        self._mapper = mapper
        self._now_iso = now_iso

    async def capture(
        self,
        context: SessionContext,
        image: ImagePayload,
        *,
        template_id: str = "",
    ) -> ScanResult:
        """Capture a form, re-binding a stored template when one is given."""
        template = context.templates.get(template_id) if template_id else None
        capture = context.capture
        if capture is not None and capture.state == CaptureState.IDLE:
            capture.select_template(template)
        elif capture is None:
            capture = CaptureSession(
                mapper=self._mapper,
                template=template,
                on_resume=lambda: LOGGER.info(
                    "Capture surface resumed",
                    extra={"session_id": context.session_id},
                ),
                session_id=context.session_id,
            )
            context.capture = capture
        return await capture.capture(image, context.profile)

    def active_capture(self, context: SessionContext) -> CaptureSession:
        if context.capture is None:
            raise CaptureStateError("No form has been captured in this session.")
        return context.capture

    def current_image(self, context: SessionContext) -> ImagePayload:
        """Image of the scan currently on screen."""
        result = self.active_capture(context).result
        if result is None:
            raise CaptureStateError("No scan result is ready.")
        return result.image

    def navigator(self, context: SessionContext) -> GuidedFillNavigator:
        return self.active_capture(context).navigator

    def next_field(self, context: SessionContext) -> GuidedFillNavigator:
        navigator = self.navigator(context)
        navigator.next()
        return navigator

    def previous_field(self, context: SessionContext) -> GuidedFillNavigator:
        navigator = self.navigator(context)
        navigator.previous()
        return navigator

    def toggle_mode(self, context: SessionContext) -> GuidedFillNavigator:
        navigator = self.navigator(context)
        navigator.toggle_mode()
        return navigator

    def retake(self, context: SessionContext) -> CaptureSession:
        capture = self.active_capture(context)
        capture.retake()
        return capture

    def complete(self, context: SessionContext) -> FormRecord:
        """Close the current scan and add it to the completed-form history."""
        self.navigator(context)
        record = FormRecord(id=uuid.uuid4().hex, date=self._now_iso())
        context.record_completed_form(record)
        context.capture = None
        LOGGER.info("Form completed", extra={"session_id": context.session_id})
        return record

    def save_template(self, context: SessionContext, name: str) -> FormTemplate:
        capture = self.active_capture(context)
        if capture.state != CaptureState.RESULT_READY or capture.result is None:
            raise CaptureStateError("No scan result to save as a template.")
        return context.templates.save(name, capture.result.overlays)

    def list_templates(self, context: SessionContext) -> list[FormTemplate]:
        return context.templates.list_templates()

    def delete_template(self, context: SessionContext, template_id: str) -> None:
        context.templates.delete(template_id)

    def history(self, context: SessionContext) -> list[FormRecord]:
        return list(context.history)
