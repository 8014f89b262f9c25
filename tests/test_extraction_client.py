from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any, cast

import pytest

from app.core.errors import AssistantError, ExtractionError, MappingError
from app.extraction.client import GeminiDocumentClient
from app.extraction.images import ImagePayload
from app.extraction.protocols import Language
from tests.mock_user import MOCK_PROFILE, PNG_BYTES

IMAGE = ImagePayload(data=PNG_BYTES, mime_type="image/png")


class _FakeModels:
    def __init__(self, responses: list[str | Exception]) -> None:
        self._responses = responses
        self.requests: list[dict[str, Any]] = []

    async def generate_content(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(text=response)


def _client(*responses: str | Exception) -> tuple[GeminiDocumentClient, _FakeModels]:
    models = _FakeModels(list(responses))
    client = GeminiDocumentClient(api_key="", model_name="gemini-test")
    client.client = cast(Any, SimpleNamespace(aio=SimpleNamespace(models=models)))
    return client, models


def test_missing_api_key_makes_client_unavailable() -> None:
    client = GeminiDocumentClient(api_key=None)

    assert client.available is False
    with pytest.raises(ExtractionError):
        asyncio.run(client.extract_profile(IMAGE))
    with pytest.raises(MappingError):
        asyncio.run(client.map_form_fields(IMAGE, MOCK_PROFILE))


def test_extract_profile_parses_structured_response() -> None:
    client, models = _client(
        json.dumps(
            {
                "documentType": "PAN Card",
                "fullName": "ASHA VERMA",
                "panNumber": "ABCDE1234F",
                "extraFields": [{"label": "Signature", "value": "present"}],
            }
        )
    )

    extracted = asyncio.run(client.extract_profile(IMAGE))

    assert extracted.document_type == "PAN Card"
    assert extracted.partial_profile.full_name == "ASHA VERMA"
    assert extracted.partial_profile.extra_fields[0].label == "Signature"
    assert models.requests[0]["model"] == "gemini-test"
    assert models.requests[0]["config"].response_mime_type == "application/json"


def test_extract_profile_defaults_missing_document_type() -> None:
    client, _ = _client(json.dumps({"fullName": "X"}))

    assert asyncio.run(client.extract_profile(IMAGE)).document_type == "Document"


@pytest.mark.parametrize(
    "response",
    ["not json", "[]", "", RuntimeError("quota exceeded")],
)
def test_extract_profile_failures_raise_extraction_error(response: str | Exception) -> None:
    client, _ = _client(response)

    with pytest.raises(ExtractionError):
        asyncio.run(client.extract_profile(IMAGE))


def test_map_form_fields_returns_overlays_and_sends_profile() -> None:
    client, models = _client(
        json.dumps(
            [
                {
                    "fieldName": "Name",
                    "valueToFill": "ASHA VERMA",
                    "boundingBox": {"ymin": 100, "xmin": 50, "ymax": 140, "xmax": 600},
                }
            ]
        )
    )

    overlays = asyncio.run(client.map_form_fields(IMAGE, MOCK_PROFILE))

    assert overlays[0].field_name == "Name"
    assert overlays[0].bounding_box.xmax == 600
    assert "ABCDE1234F" in models.requests[0]["contents"][1]


def test_map_form_fields_rejects_out_of_scale_boxes() -> None:
    client, _ = _client(
        json.dumps(
            [
                {
                    "fieldName": "Name",
                    "valueToFill": "",
                    "boundingBox": {"ymin": 100, "xmin": 50, "ymax": 1400, "xmax": 600},
                }
            ]
        )
    )

    with pytest.raises(MappingError):
        asyncio.run(client.map_form_fields(IMAGE, MOCK_PROFILE))


def test_assistant_calls_use_language_name_in_prompt() -> None:
    client, models = _client("Answer", "Translated", "  where to sign?  ")

    assert asyncio.run(client.ask(IMAGE, "Where to sign?", Language.HI)) == "Answer"
    assert asyncio.run(client.translate(IMAGE, Language.BN)) == "Translated"
    assert asyncio.run(client.transcribe(b"audio", "audio/webm", Language.EN)) == (
        "where to sign?"
    )
    assert "Hindi" in models.requests[0]["contents"][1]
    assert "Bengali" in models.requests[1]["contents"][1]
    assert models.requests[0]["config"] is None


def test_assistant_errors_are_typed() -> None:
    client, _ = _client(RuntimeError("timeout"))

    with pytest.raises(AssistantError):
        asyncio.run(client.explain(IMAGE, Language.EN))
