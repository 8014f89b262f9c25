"""Identity profile data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Fixed identity slots in merge order. Keys map to collaborator payload names.
PROFILE_FIELD_KEYS: dict[str, str] = {
    "full_name": "fullName",
    "date_of_birth": "dateOfBirth",
    "gender": "gender",
    "guardian_name": "guardianName",
    "address": "address",
    "phone_number": "phoneNumber",
    "email": "email",
    "aadhar_number": "aadharNumber",
    "pan_number": "panNumber",
    "passport_number": "passportNumber",
    "driving_license_number": "drivingLicenseNumber",
    "voter_id_number": "voterIdNumber",
    "id_number": "idNumber",
}

SCALAR_FIELDS: tuple[str, ...] = tuple(PROFILE_FIELD_KEYS)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class ExtraAttribute:
    """Free-form label/value pair outside the fixed identity slots."""

    label: str
    value: str

    @classmethod
    def from_payload(cls, item: Any) -> ExtraAttribute | None:
        if not isinstance(item, dict):
            return None
        label = _text(item.get("label"))
        if label is None:
            return None
        return cls(label=label, value=_text(item.get("value")) or "")

    def to_payload(self) -> dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class DocumentRecord:
    """One processed identity document."""

    type: str
    date: str
    verified: bool = True

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.type, "date": self.date, "verified": self.verified}


@dataclass(frozen=True)
class PartialProfile:
    """Single extraction result; every field may be missing."""

    full_name: str | None = None
    date_of_birth: str | None = None
    gender: str | None = None
    guardian_name: str | None = None
    address: str | None = None
    phone_number: str | None = None
    email: str | None = None
    aadhar_number: str | None = None
    pan_number: str | None = None
    passport_number: str | None = None
    driving_license_number: str | None = None
    voter_id_number: str | None = None
    id_number: str | None = None
    extra_fields: tuple[ExtraAttribute, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PartialProfile:
        """Build from collaborator JSON (camelCase keys)."""
        values: dict[str, Any] = {
            name: _text(payload.get(key)) for name, key in PROFILE_FIELD_KEYS.items()
        }
        raw_extra = payload.get("extraFields")
        extras: list[ExtraAttribute] = []
        if isinstance(raw_extra, list):
            for item in raw_extra:
                attribute = ExtraAttribute.from_payload(item)
                if attribute is not None:
                    extras.append(attribute)
        return cls(**values, extra_fields=tuple(extras))

    def found_fields(self) -> list[str]:
        """Names of fixed slots carrying a non-blank value."""
        return [
            name
            for name in SCALAR_FIELDS
            if (getattr(self, name) or "").strip()
        ]


@dataclass(frozen=True)
class UserProfile:
    """Canonical identity record aggregated across documents."""

    full_name: str = ""
    date_of_birth: str = ""
    gender: str | None = None
    guardian_name: str | None = None
    address: str = ""
    phone_number: str = ""
    email: str = ""
    aadhar_number: str | None = None
    pan_number: str | None = None
    passport_number: str | None = None
    driving_license_number: str | None = None
    voter_id_number: str | None = None
    id_number: str | None = None
    extra_fields: tuple[ExtraAttribute, ...] = ()
    documents: tuple[DocumentRecord, ...] = field(default_factory=tuple)

    def get(self, name: str) -> str | None:
        return getattr(self, name)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to camelCase JSON as sent to the mapping collaborator."""
        payload: dict[str, Any] = {
            key: getattr(self, name)
            for name, key in PROFILE_FIELD_KEYS.items()
            if getattr(self, name) is not None
        }
        payload["extraFields"] = [item.to_payload() for item in self.extra_fields]
        payload["documents"] = [item.to_payload() for item in self.documents]
        return payload
