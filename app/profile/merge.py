"""Profile merge engine.

Folds partial extractions into a canonical profile with two rules:

* fixed slots are first-non-empty-wins: a value already present in the
  accumulated profile is never overwritten by a later document;
* extra attributes are appended only when no existing entry carries a
  case-insensitively equal label, so the first value seen is kept.

Extra attributes whose label names a fixed slot (``"PAN"``, ``"Date of
Birth"``...) are routed into that slot instead of the extra list, keeping the
two namespaces disjoint.

All functions are pure: inputs are frozen dataclasses and a new profile is
returned on every call.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Iterable, Sequence

from app.profile.models import (
    SCALAR_FIELDS,
    ExtraAttribute,
    PartialProfile,
    UserProfile,
)

LOGGER = logging.getLogger(__name__)

AUTO_DETECT = "Auto-Detect"
DEFAULT_DOCUMENT_TYPE = "Document"

SLOT_LABEL_ALIASES: dict[str, frozenset[str]] = {
    "full_name": frozenset({"name", "full name"}),
    "date_of_birth": frozenset({"dob", "d o b", "date of birth", "birth date"}),
    "gender": frozenset({"gender", "sex"}),
    "guardian_name": frozenset(
        {
            "fathers name",
            "father name",
            "husbands name",
            "husband name",
            "guardian name",
            "guardians name",
            "s/o",
            "w/o",
            "d/o",
        }
    ),
    "address": frozenset({"address", "full address"}),
    "phone_number": frozenset(
        {"phone", "phone number", "phone no", "mobile", "mobile number", "mobile no"}
    ),
    "email": frozenset({"email", "e mail", "email address", "email id"}),
    "aadhar_number": frozenset(
        {
            "aadhar",
            "aadhaar",
            "aadhar number",
            "aadhaar number",
            "aadhar no",
            "aadhaar no",
            "uid",
        }
    ),
    "pan_number": frozenset(
        {"pan", "pan number", "pan no", "permanent account number"}
    ),
    "passport_number": frozenset({"passport number", "passport no"}),
    "driving_license_number": frozenset(
        {
            "driving license number",
            "driving licence number",
            "driving license no",
            "driving licence no",
            "dl number",
            "dl no",
        }
    ),
    "voter_id_number": frozenset(
        {"voter id", "voter id number", "epic number", "epic no"}
    ),
    "id_number": frozenset({"id number", "id no"}),
}


def is_blank(value: Any) -> bool:
    """Return True for ``None`` or a string that is empty after trimming."""
    if value is None:
        return True
    return not str(value).strip()


def merge_scalar(existing: str | None, incoming: str | None) -> str | None:
    """First-non-empty-wins for a single slot."""
    if not is_blank(existing):
        return existing
    if not is_blank(incoming):
        return incoming
    return existing


def label_key(label: str) -> str:
    return (label or "").strip().lower()


def _alias_key(label: str) -> str:
    lowered = re.sub(r"['’]", "", (label or "").lower())
    return re.sub(r"[^a-z0-9/]+", " ", lowered).strip()


def slot_for_label(label: str) -> str | None:
    """Return the fixed slot a free-form label is equivalent to, if any."""
    key = _alias_key(label)
    if not key:
        return None
    for slot, aliases in SLOT_LABEL_ALIASES.items():
        if key in aliases:
            return slot
    return None


def merge_extra_attributes(
    existing: Sequence[ExtraAttribute], incoming: Iterable[ExtraAttribute]
) -> tuple[ExtraAttribute, ...]:
    """Append incoming attributes whose label is not already present."""
    merged = list(existing)
    seen = {label_key(item.label) for item in merged}
    for item in incoming:
        key = label_key(item.label)
        if key in seen:
            continue
        seen.add(key)
        merged.append(item)
    return tuple(merged)


def _route_slot_extras(
    changes: dict[str, Any], items: Iterable[ExtraAttribute]
) -> list[ExtraAttribute]:
    """Move slot-named extras into ``changes``; return the ones left over."""
    extras: list[ExtraAttribute] = []
    for item in items:
        slot = slot_for_label(item.label)
        if slot is None:
            extras.append(item)
            continue
        LOGGER.debug("Routing extra attribute %r into slot %s", item.label, slot)
        changes[slot] = merge_scalar(changes[slot], item.value)
    return extras


def fold(profile: UserProfile, partial: PartialProfile) -> UserProfile:
    """Apply one document's extraction onto the accumulated profile."""
    changes: dict[str, Any] = {
        name: merge_scalar(profile.get(name), getattr(partial, name))
        for name in SCALAR_FIELDS
    }
    extras = _route_slot_extras(changes, partial.extra_fields)
    changes["extra_fields"] = merge_extra_attributes(profile.extra_fields, extras)
    return replace(profile, **changes)


def normalize_profile(profile: UserProfile) -> UserProfile:
    """Restore the extra-attribute invariants on a profile supplied from outside.

    Extras naming a fixed slot fill it only when the slot is blank, and
    repeated labels keep their first value.
    """
    changes: dict[str, Any] = {name: profile.get(name) for name in SCALAR_FIELDS}
    extras = _route_slot_extras(changes, profile.extra_fields)
    changes["extra_fields"] = merge_extra_attributes((), extras)
    return replace(profile, **changes)


def merge(
    current: UserProfile | None, batch: Sequence[PartialProfile]
) -> UserProfile:
    """Fold a batch of partial profiles in upload order."""
    merged = current if current is not None else UserProfile()
    for partial in batch:
        merged = fold(merged, partial)
    return merged


def resolve_document_type(selected: str | None, detected: str | None) -> str:
    """Caller-selected type wins unless it is the auto-detect sentinel."""
    if not is_blank(selected) and (selected or "").strip() != AUTO_DETECT:
        return (selected or "").strip()
    if is_blank(detected):
        return DEFAULT_DOCUMENT_TYPE
    return (detected or "").strip()


def describe_extraction(document_type: str, partial: PartialProfile) -> str:
    """Human-readable summary of what one document contributed."""
    summary = f"{document_type}: Found {len(partial.found_fields())} main fields"
    if partial.extra_fields:
        summary += f" + {len(partial.extra_fields)} extra details"
    return summary
