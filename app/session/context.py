"""Explicit per-user session state.

The session owns the committed profile, the in-progress intake draft, the
template store, the completed-form history and the active capture session.
Everything is held in memory; durable persistence belongs to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from app.forms.templates import TemplateStore
from app.profile.models import DocumentRecord, UserProfile

if TYPE_CHECKING:
    from app.forms.capture import CaptureSession


@dataclass(frozen=True)
class FormRecord:
    """Completed-form history entry."""

    id: str
    date: str
    status: str = "completed"


@dataclass
class SessionContext:
    session_id: str
    profile: UserProfile = field(default_factory=UserProfile)
    draft: UserProfile | None = None
    pending_documents: list[DocumentRecord] = field(default_factory=list)
    templates: TemplateStore = field(default_factory=TemplateStore)
    history: list[FormRecord] = field(default_factory=list)
    capture: CaptureSession | None = None
    intake_in_progress: bool = False

    def working_profile(self) -> UserProfile:
        """Draft under review if any, else the committed profile."""
        return self.draft if self.draft is not None else self.profile

    def stage_intake(
        self, draft: UserProfile, documents: list[DocumentRecord]
    ) -> None:
        self.draft = draft
        self.pending_documents = [*self.pending_documents, *documents]

    def commit_profile(self, profile: UserProfile) -> None:
        self.profile = profile
        self.draft = None
        self.pending_documents = []

    def record_completed_form(self, record: FormRecord) -> None:
        self.history.insert(0, record)
