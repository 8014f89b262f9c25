"""Contracts of the document-understanding collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from app.extraction.images import ImagePayload
from app.forms.overlay import FieldOverlay
from app.profile.models import PartialProfile, UserProfile


class Language(StrEnum):
    """Supported response languages."""

    EN = "en"
    HI = "hi"
    BN = "bn"


LANGUAGE_NAMES: dict[Language, str] = {
    Language.EN: "English",
    Language.HI: "Hindi",
    Language.BN: "Bengali",
}


@dataclass(frozen=True)
class ExtractedDocument:
    """Extraction output for one identity document image."""

    partial_profile: PartialProfile
    document_type: str


class ProfileExtractorProtocol(Protocol):
    async def extract_profile(self, image: ImagePayload) -> ExtractedDocument:
        """Extract a partial profile; raise ``ExtractionError`` on any failure."""


class FormMapperProtocol(Protocol):
    async def map_form_fields(
        self, form_image: ImagePayload, profile: UserProfile
    ) -> list[FieldOverlay]:
        """Detect fillable fields; raise ``MappingError`` on any failure."""


class FormAssistantProtocol(Protocol):
    async def explain(self, image: ImagePayload, language: Language) -> str:
        """Briefly explain what the form is for."""

    async def ask(
        self, image: ImagePayload, question: str, language: Language
    ) -> str:
        """Answer a question about the form."""

    async def translate(self, image: ImagePayload, language: Language) -> str:
        """Translate the visible form text to Markdown."""


class TranscriberProtocol(Protocol):
    async def transcribe(
        self, audio: bytes, mime_type: str, language: Language
    ) -> str:
        """Turn a spoken question into text."""
