"""Form templates: reusable field layouts re-bound to the live profile."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from app.core.errors import TemplateNotFound
from app.forms.overlay import FieldOverlay
from app.profile.models import UserProfile

LOGGER = logging.getLogger(__name__)

# Labels that name someone other than the profile owner ("Father's Name").
RELATION_MARKERS = (
    "father",
    "mother",
    "husband",
    "wife",
    "spouse",
    "guardian",
    "parent",
    "s/o",
    "w/o",
    "d/o",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FormTemplate:
    """Named, timestamped snapshot of a form's field layout."""

    id: str
    name: str
    created_at: str
    overlays: tuple[FieldOverlay, ...]


def _first_non_blank(*values: str | None) -> str:
    for value in values:
        if value and value.strip():
            return value
    return ""


def _names_someone_else(key: str) -> bool:
    return any(marker in key for marker in RELATION_MARKERS)


def resolve_template_value(
    field_name: str, stored_value: str, profile: UserProfile
) -> str:
    """Pick the profile value for a stored field label; first key match wins."""
    key = (field_name or "").lower()
    if "name" in key and not _names_someone_else(key):
        return profile.full_name or ""
    if "birth" in key or "dob" in key:
        return profile.date_of_birth or ""
    if "address" in key:
        return profile.address or ""
    if "phone" in key:
        return profile.phone_number or ""
    if "pan" in key or "id" in key or "aadhar" in key:
        return _first_non_blank(profile.id_number, profile.aadhar_number, profile.pan_number)
    if "email" in key:
        return profile.email or ""
    return stored_value


def rebind(template: FormTemplate, profile: UserProfile) -> list[FieldOverlay]:
    """Recompute ``value_to_fill`` per overlay; label and geometry are kept."""
    return [
        overlay.with_value(
            resolve_template_value(overlay.field_name, overlay.value_to_fill, profile)
        )
        for overlay in template.overlays
    ]


class TemplateStore:
    """In-memory ordered collection of a session's templates."""

    def __init__(self, now: Callable[[], datetime] = _now) -> None:
        self._now = now
        self._templates: list[FormTemplate] = []

    def __len__(self) -> int:
        return len(self._templates)

    def save(self, name: str, overlays: Iterable[FieldOverlay]) -> FormTemplate:
        created = self._now()
        template = FormTemplate(
            id=uuid.uuid4().hex,
            name=(name or "").strip() or f"Form Template {created.date().isoformat()}",
            created_at=created.isoformat(),
            overlays=tuple(overlays),
        )
        self._templates.append(template)
        LOGGER.info("Template saved: %s (%s fields)", template.name, len(template.overlays))
        return template

    def list_templates(self) -> list[FormTemplate]:
        return list(self._templates)

    def get(self, template_id: str) -> FormTemplate:
        for template in self._templates:
            if template.id == template_id:
                return template
        raise TemplateNotFound(f"Template not found: {template_id}")

    def delete(self, template_id: str) -> None:
        template = self.get(template_id)
        self._templates.remove(template)
