from __future__ import annotations

import asyncio

import pytest

from app.assist.service import FALLBACK_MESSAGE, AssistService
from app.core.errors import VoiceInputUnavailable
from app.extraction.images import ImagePayload
from app.extraction.protocols import Language
from tests.fakes import FakeAssistant, FakeTranscriber
from tests.mock_user import PNG_BYTES

IMAGE = ImagePayload(data=PNG_BYTES, mime_type="image/png")


def test_assistant_answers_pass_through() -> None:
    service = AssistService(assistant=FakeAssistant())

    assert asyncio.run(service.explain(IMAGE, Language.HI)) == "explain:hi"
    assert asyncio.run(service.ask(IMAGE, "Where do I sign?", Language.EN)) == (
        "answer:Where do I sign?"
    )
    assert asyncio.run(service.translate(IMAGE, Language.BN)) == "# translated:bn"


def test_assistant_failures_return_fallback_text() -> None:
    service = AssistService(assistant=FakeAssistant(fail=True))

    assert asyncio.run(service.explain(IMAGE, Language.EN)) == FALLBACK_MESSAGE
    assert asyncio.run(service.ask(IMAGE, "?", Language.EN)) == FALLBACK_MESSAGE
    assert asyncio.run(service.translate(IMAGE, Language.EN)) == FALLBACK_MESSAGE


def test_spoken_question_requires_transcriber() -> None:
    service = AssistService(assistant=FakeAssistant())

    assert service.voice_available is False
    with pytest.raises(VoiceInputUnavailable):
        asyncio.run(service.ask_spoken(IMAGE, b"audio", "audio/webm", Language.EN))


def test_spoken_question_is_transcribed_then_answered() -> None:
    assistant = FakeAssistant()
    service = AssistService(assistant=assistant, transcriber=FakeTranscriber("Which date?"))

    question, answer = asyncio.run(
        service.ask_spoken(IMAGE, b"audio", "audio/webm", Language.HI)
    )

    assert service.voice_available is True
    assert question == "Which date?"
    assert answer == "answer:Which date?"
    assert assistant.questions == ["Which date?"]


def test_empty_transcription_returns_fallback_without_asking() -> None:
    assistant = FakeAssistant()
    service = AssistService(assistant=assistant, transcriber=FakeTranscriber("   "))

    assert asyncio.run(
        service.ask_spoken(IMAGE, b"audio", "audio/webm", Language.EN)
    ) == ("", FALLBACK_MESSAGE)
    assert assistant.questions == []
