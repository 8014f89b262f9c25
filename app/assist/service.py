"""Best-effort natural-language helpers around a captured form."""

from __future__ import annotations

import logging

from app.core.errors import VoiceInputUnavailable
from app.extraction.images import ImagePayload
from app.extraction.protocols import (
    FormAssistantProtocol,
    Language,
    TranscriberProtocol,
)

LOGGER = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Could not complete the request."


class AssistService:
    """Explain/ask/translate wrappers that never fail the session."""

    def __init__(
        self,
        *,
        assistant: FormAssistantProtocol,
        transcriber: TranscriberProtocol | None = None,
    ) -> None:
        self._assistant = assistant
        self._transcriber = transcriber

    @property
    def voice_available(self) -> bool:
        return self._transcriber is not None

    async def explain(self, image: ImagePayload, language: Language) -> str:
        try:
            return await self._assistant.explain(image, language)
        except Exception:
            LOGGER.exception("Form explanation failed")
            return FALLBACK_MESSAGE

    async def ask(self, image: ImagePayload, question: str, language: Language) -> str:
        try:
            return await self._assistant.ask(image, question, language)
        except Exception:
            LOGGER.exception("Form question failed")
            return FALLBACK_MESSAGE

    async def translate(self, image: ImagePayload, language: Language) -> str:
        try:
            return await self._assistant.translate(image, language)
        except Exception:
            LOGGER.exception("Form translation failed")
            return FALLBACK_MESSAGE

    async def ask_spoken(
        self,
        image: ImagePayload,
        audio: bytes,
        mime_type: str,
        language: Language,
    ) -> tuple[str, str]:
        """Transcribe a spoken question and answer it; returns (question, answer)."""
        if self._transcriber is None:
            raise VoiceInputUnavailable("Voice input is not available.")
        try:
            question = await self._transcriber.transcribe(audio, mime_type, language)
        except Exception:
            LOGGER.exception("Speech transcription failed")
            return "", FALLBACK_MESSAGE
        if not question.strip():
            return "", FALLBACK_MESSAGE
        return question, await self.ask(image, question, language)
