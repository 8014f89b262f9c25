"""Capture orchestration: idle -> analyzing -> result-ready."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Callable

from app.core.errors import CaptureBusy, CaptureStateError, MappingError
from app.extraction.images import ImagePayload
from app.extraction.protocols import FormMapperProtocol
from app.forms.navigator import GuidedFillNavigator
from app.forms.overlay import ScanResult
from app.forms.templates import FormTemplate, rebind
from app.profile.models import UserProfile

LOGGER = logging.getLogger(__name__)


class CaptureState(StrEnum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    RESULT_READY = "result_ready"


class CaptureSession:
    """Governs when the mapper may be called and when the navigator is valid.

    At most one mapping request is outstanding: ``capture`` is rejected while
    analyzing. With a template selected, overlays are re-bound locally and the
    mapper is not called at all.
    """

    def __init__(
        self,
        *,
        mapper: FormMapperProtocol,
        template: FormTemplate | None = None,
        on_resume: Callable[[], None] | None = None,
        session_id: str = "",
    ) -> None:
        self._mapper = mapper
        self._on_resume = on_resume
        self._session_id = session_id
        self.template = template
        self.state = CaptureState.IDLE
        self.result: ScanResult | None = None
        self._navigator: GuidedFillNavigator | None = None

    @property
    def navigator(self) -> GuidedFillNavigator:
        if self.state != CaptureState.RESULT_READY or self._navigator is None:
            raise CaptureStateError("No scan result is ready.")
        return self._navigator

    def select_template(self, template: FormTemplate | None) -> None:
        if self.state != CaptureState.IDLE:
            raise CaptureStateError("Template can only be changed before capture.")
        self.template = template

    async def capture(self, image: ImagePayload, profile: UserProfile) -> ScanResult:
        if self.state == CaptureState.ANALYZING:
            raise CaptureBusy("Form analysis is already in progress.")
        if self.state == CaptureState.RESULT_READY:
            raise CaptureStateError("Retake before capturing a new form.")

        if self.template is not None:
            return self._ready(ScanResult.create(image, rebind(self.template, profile)))

        self.state = CaptureState.ANALYZING
        self._log("Form analysis started")
        try:
            overlays = await self._mapper.map_form_fields(image, profile)
        except Exception as exc:
            self.state = CaptureState.IDLE
            self._log("Form analysis failed: %s", exc, level=logging.WARNING)
            if self._on_resume is not None:
                self._on_resume()
            if isinstance(exc, MappingError):
                raise
            raise MappingError(str(exc) or "Form analysis failed.") from exc
        return self._ready(ScanResult.create(image, overlays))

    def retake(self) -> None:
        if self.state != CaptureState.RESULT_READY:
            raise CaptureStateError("Nothing to retake.")
        self.navigator.reset()
        self._navigator = None
        self.result = None
        self.state = CaptureState.IDLE
        if self._on_resume is not None:
            self._on_resume()

    def _ready(self, scan: ScanResult) -> ScanResult:
        self.result = scan
        self._navigator = GuidedFillNavigator(scan)
        self.state = CaptureState.RESULT_READY
        self._log("Scan result ready with %s fields", len(scan.overlays))
        return scan

    def _log(self, message: str, *args: object, level: int = logging.INFO) -> None:
        LOGGER.log(
            level,
            message,
            *args,
            extra={"session_id": self._session_id, "scan_state": str(self.state)},
        )
