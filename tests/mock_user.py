from __future__ import annotations

from typing import Sequence

from app.forms.overlay import BoundingBox, FieldOverlay
from app.profile.models import DocumentRecord, ExtraAttribute, PartialProfile, UserProfile

MOCK_PROFILE = UserProfile(
    full_name="ASHA VERMA",
    date_of_birth="14/02/1991",
    gender="Female",
    guardian_name="RAMESH VERMA",
    address="12 MG Road, Pune 411001",
    phone_number="9800000000",
    email="asha@example.test",
    aadhar_number="1234 5678 9012",
    pan_number="ABCDE1234F",
    extra_fields=(ExtraAttribute(label="Blood Group", value="B+"),),
    documents=(DocumentRecord(type="Aadhar Card", date="2026-01-10"),),
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 24


def box(ymin: float = 100, xmin: float = 100, ymax: float = 150, xmax: float = 400) -> BoundingBox:
    return BoundingBox(ymin=ymin, xmin=xmin, ymax=ymax, xmax=xmax)


def overlay(field_name: str, value: str = "") -> FieldOverlay:
    return FieldOverlay(field_name=field_name, value_to_fill=value, bounding_box=box())


def partial(
    extras: Sequence[tuple[str, str]] = (),
    **values: str | None,
) -> PartialProfile:
    return PartialProfile(
        **values,
        extra_fields=tuple(ExtraAttribute(label=label, value=value) for label, value in extras),
    )
