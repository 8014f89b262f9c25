"""Gemini-backed document understanding client."""

from __future__ import annotations

import json
import logging
from typing import Any

from google import genai
from google.genai import types

from app.core.config import DEFAULT_MODEL
from app.core.errors import AssistantError, ExtractionError, MappingError
from app.extraction.images import ImagePayload
from app.extraction.protocols import LANGUAGE_NAMES, ExtractedDocument, Language
from app.forms.overlay import FieldOverlay, overlays_from_payload
from app.profile.merge import DEFAULT_DOCUMENT_TYPE
from app.profile.models import PartialProfile, UserProfile

LOGGER = logging.getLogger(__name__)

_STRING = types.Type.STRING


def _text_field(description: str) -> types.Schema:
    return types.Schema(type=_STRING, description=description)


PROFILE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "documentType": _text_field(
            "Type of identity document, e.g. 'Aadhar Card', 'PAN Card', "
            "'Driving License', 'Passport', 'Voter ID'. Use 'Document' if unknown."
        ),
        "fullName": _text_field("Full name of the person"),
        "dateOfBirth": _text_field("Date of birth in DD/MM/YYYY format"),
        "gender": _text_field("Gender as written (Male, Female, M, F)"),
        "guardianName": _text_field(
            "Father's, husband's or guardian's name (often labeled S/O, W/O, D/O)"
        ),
        "address": _text_field("Full address"),
        "phoneNumber": _text_field("Phone number if present"),
        "email": _text_field("Email address if present"),
        "aadharNumber": _text_field("12 digit Aadhar number (XXXX XXXX XXXX)"),
        "panNumber": _text_field("10 character PAN (e.g. ABCDE1234F)"),
        "drivingLicenseNumber": _text_field("Driving license number"),
        "passportNumber": _text_field("Passport number"),
        "voterIdNumber": _text_field("Voter ID / EPIC number"),
        "idNumber": _text_field("Any other unique id number if none of the above"),
        "extraFields": types.Schema(
            type=types.Type.ARRAY,
            description=(
                "Other labeled information on the card not covered above "
                "(Blood Group, District, State, Issue Date, Validity...)."
            ),
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "label": _text_field("Label of the field, e.g. 'Blood Group'"),
                    "value": _text_field("Value of the field"),
                },
            ),
        ),
    },
    required=["documentType"],
)

OVERLAYS_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "fieldName": _text_field(
                "Name of the field on the form, e.g. 'Name', 'Account No', 'PAN Number'"
            ),
            "valueToFill": _text_field(
                "Profile value to write here. Leave empty when nothing matches."
            ),
            "boundingBox": types.Schema(
                type=types.Type.OBJECT,
                description=(
                    "Box of the blank space where the value is written, "
                    "normalized 0-1000."
                ),
                properties={
                    "ymin": types.Schema(type=types.Type.NUMBER),
                    "xmin": types.Schema(type=types.Type.NUMBER),
                    "ymax": types.Schema(type=types.Type.NUMBER),
                    "xmax": types.Schema(type=types.Type.NUMBER),
                },
                required=["ymin", "xmin", "ymax", "xmax"],
            ),
        },
        required=["fieldName", "boundingBox", "valueToFill"],
    ),
)

EXTRACT_PROMPT = (
    "Extract personal information from this document and identify the document "
    "type. Extract standard fields like name, date of birth, gender and identity "
    "numbers. Put any other visible labeled fields such as 'Blood Group', "
    "'District' or 'Issue Date' into 'extraFields'."
)

MAPPING_PROMPT = """
Analyze this physical form image and identify the blank fields the user must fill.

User profile:
{profile}

For each field on the form:
1. Determine what information is asked.
2. Match it with the user profile: 'PAN' uses panNumber, 'Aadhar' uses
   aadharNumber, 'Gender' uses gender, "Father's Name" uses guardianName,
   details listed in extraFields use those values.
3. Return valueToFill exactly as it should be written.
4. Return the bounding box of the blank space where the user should write.

Coordinates must be on a scale of 0 to 1000.
"""

EXPLAIN_PROMPT = (
    "Analyze this image of a form. Explain briefly what this form is for and "
    "what key information is needed. Respond in {language}. Keep it simple and "
    "under 50 words."
)

ASK_PROMPT = (
    "Look at this form image. Answer the following question based on the "
    'form\'s visible content: "{question}". Respond in {language}. Keep the '
    "answer concise."
)

TRANSLATE_PROMPT = """
Translate all visible text of this form or document into {language}.
Format the output as Markdown: headers for titles, bold field labels, tables
for tabular data, and keep the structure of the document.
Do not add conversational filler.
"""

TRANSCRIBE_PROMPT = (
    "Transcribe this spoken question verbatim. The speaker uses {language}. "
    "Return only the transcription."
)


def _image_part(image: ImagePayload) -> types.Part:
    return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)


class GeminiDocumentClient:
    """Extraction, form mapping and assistant calls against the Gemini API."""

    def __init__(self, api_key: str | None, model_name: str = DEFAULT_MODEL) -> None:
        self.api_key = api_key or ""
        self.model_name = model_name or DEFAULT_MODEL
        self.client: genai.Client | None = None
        if self.api_key:
            self.client = genai.Client(api_key=self.api_key)
        else:
            LOGGER.warning(
                "GEMINI_API_KEY is not set. Document extraction and form mapping will be unavailable."
            )

    @property
    def available(self) -> bool:
        return self.client is not None

    async def _generate(
        self,
        contents: list[Any],
        *,
        schema: types.Schema | None,
        error_cls: type[Exception],
        label: str,
    ) -> str:
        if self.client is None:
            raise error_cls("Gemini client is unavailable. Set GEMINI_API_KEY.")
        config = None
        if schema is not None:
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        except Exception as exc:
            LOGGER.exception("Gemini request failed: %s", label)
            raise error_cls(f"{label} failed: {exc}") from exc
        text = response.text
        if not text:
            raise error_cls(f"{label} failed: empty response.")
        return text

    @staticmethod
    def _parse_json(text: str, error_cls: type[Exception], label: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise error_cls(f"{label} returned unparsable JSON.") from exc

    async def extract_profile(self, image: ImagePayload) -> ExtractedDocument:
        text = await self._generate(
            [_image_part(image), EXTRACT_PROMPT],
            schema=PROFILE_SCHEMA,
            error_cls=ExtractionError,
            label="Profile extraction",
        )
        payload = self._parse_json(text, ExtractionError, "Profile extraction")
        if not isinstance(payload, dict):
            raise ExtractionError("Profile extraction returned an unexpected shape.")
        document_type = str(payload.get("documentType") or "").strip()
        return ExtractedDocument(
            partial_profile=PartialProfile.from_payload(payload),
            document_type=document_type or DEFAULT_DOCUMENT_TYPE,
        )

    async def map_form_fields(
        self, form_image: ImagePayload, profile: UserProfile
    ) -> list[FieldOverlay]:
        prompt = MAPPING_PROMPT.format(
            profile=json.dumps(profile.to_payload(), ensure_ascii=False)
        )
        text = await self._generate(
            [_image_part(form_image), prompt],
            schema=OVERLAYS_SCHEMA,
            error_cls=MappingError,
            label="Form mapping",
        )
        payload = self._parse_json(text, MappingError, "Form mapping")
        try:
            return overlays_from_payload(payload)
        except ValueError as exc:
            raise MappingError(f"Form mapping returned invalid overlays: {exc}") from exc

    async def explain(self, image: ImagePayload, language: Language) -> str:
        prompt = EXPLAIN_PROMPT.format(language=LANGUAGE_NAMES[language])
        return await self._generate(
            [_image_part(image), prompt],
            schema=None,
            error_cls=AssistantError,
            label="Form explanation",
        )

    async def ask(self, image: ImagePayload, question: str, language: Language) -> str:
        prompt = ASK_PROMPT.format(question=question, language=LANGUAGE_NAMES[language])
        return await self._generate(
            [_image_part(image), prompt],
            schema=None,
            error_cls=AssistantError,
            label="Form question",
        )

    async def translate(self, image: ImagePayload, language: Language) -> str:
        prompt = TRANSLATE_PROMPT.format(language=LANGUAGE_NAMES[language])
        return await self._generate(
            [_image_part(image), prompt],
            schema=None,
            error_cls=AssistantError,
            label="Form translation",
        )

    async def transcribe(self, audio: bytes, mime_type: str, language: Language) -> str:
        prompt = TRANSCRIBE_PROMPT.format(language=LANGUAGE_NAMES[language])
        text = await self._generate(
            [types.Part.from_bytes(data=audio, mime_type=mime_type), prompt],
            schema=None,
            error_cls=AssistantError,
            label="Speech transcription",
        )
        return text.strip()
