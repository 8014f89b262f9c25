"""Domain error taxonomy shared by profile intake and form-fill flows."""

from __future__ import annotations


class DocumentAssistError(Exception):
    """Base class for all domain errors raised by the core."""


class ExtractionError(DocumentAssistError):
    """Identity document could not be read or the extraction service failed."""


class MappingError(DocumentAssistError):
    """Blank form could not be analyzed into field overlays."""


class AssistantError(DocumentAssistError):
    """Best-effort natural-language collaborator failed."""


class MergeAbort(DocumentAssistError):
    """Whole intake batch was rolled back after an extraction failure."""

    def __init__(self, *, index: int, total: int, cause: Exception) -> None:
        super().__init__(
            f"Failed to extract data from document {index + 1} of {total}. "
            "No changes were applied; please try again."
        )
        self.index = index
        self.total = total
        self.cause = cause


class VoiceInputUnavailable(DocumentAssistError):
    """Speech transcription capability is not configured."""


class IntakeBusy(DocumentAssistError):
    """Another intake batch is still being processed for the session."""


class CameraUnavailable(DocumentAssistError):
    """Camera permission denied, device busy or insecure context.

    Raised by the surrounding application only; the core never captures images.
    """


class CaptureBusy(DocumentAssistError):
    """A mapping request is already outstanding for the active scan."""


class CaptureStateError(DocumentAssistError):
    """Operation is not valid in the current capture state."""


class TemplateNotFound(DocumentAssistError):
    """Requested form template does not exist in the session store."""


class SessionNotFound(DocumentAssistError):
    """Requested session id is unknown."""
