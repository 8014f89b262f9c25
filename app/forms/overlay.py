"""Field overlay model in normalized form coordinates.

Coordinates use a fixed 0-1000 scale on both axes with the origin at the top
left. Conversion to pixels is left to whoever renders the overlays.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable

from app.extraction.images import ImagePayload

SCALE_MAX = 1000.0


@dataclass(frozen=True)
class BoundingBox:
    ymin: float
    xmin: float
    ymax: float
    xmax: float

    def __post_init__(self) -> None:
        for name in ("ymin", "xmin", "ymax", "xmax"):
            value = getattr(self, name)
            if not 0 <= value <= SCALE_MAX:
                raise ValueError(f"{name}={value} is outside the 0-1000 scale.")
        if self.xmin >= self.xmax:
            raise ValueError(f"xmin ({self.xmin}) must be lower than xmax ({self.xmax}).")
        if self.ymin >= self.ymax:
            raise ValueError(f"ymin ({self.ymin}) must be lower than ymax ({self.ymax}).")

    @classmethod
    def from_payload(cls, payload: Any) -> BoundingBox:
        if not isinstance(payload, dict):
            raise ValueError("boundingBox must be an object.")
        try:
            return cls(
                ymin=float(payload["ymin"]),
                xmin=float(payload["xmin"]),
                ymax=float(payload["ymax"]),
                xmax=float(payload["xmax"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"boundingBox is incomplete: {payload!r}") from exc

    def to_payload(self) -> dict[str, float]:
        return {"ymin": self.ymin, "xmin": self.xmin, "ymax": self.ymax, "xmax": self.xmax}


@dataclass(frozen=True)
class FieldOverlay:
    """One detected form field with the value to write into it."""

    field_name: str
    value_to_fill: str
    bounding_box: BoundingBox

    @property
    def is_empty(self) -> bool:
        """No confident value; rendered differently from a populated field."""
        return not (self.value_to_fill or "").strip()

    def with_value(self, value: str) -> FieldOverlay:
        return replace(self, value_to_fill=value)

    @classmethod
    def from_payload(cls, payload: Any) -> FieldOverlay:
        if not isinstance(payload, dict):
            raise ValueError("Field overlay must be an object.")
        value = payload.get("valueToFill")
        return cls(
            field_name=str(payload.get("fieldName") or "").strip(),
            value_to_fill="" if value is None else str(value),
            bounding_box=BoundingBox.from_payload(payload.get("boundingBox")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "fieldName": self.field_name,
            "valueToFill": self.value_to_fill,
            "boundingBox": self.bounding_box.to_payload(),
        }


def overlays_from_payload(items: Any) -> list[FieldOverlay]:
    """Parse the collaborator's overlay array; raise ``ValueError`` on bad items."""
    if not isinstance(items, list):
        raise ValueError("Expected a list of field overlays.")
    return [FieldOverlay.from_payload(item) for item in items]


@dataclass(frozen=True)
class ScanResult:
    """Captured form image paired with its ordered field overlays."""

    image: ImagePayload
    overlays: tuple[FieldOverlay, ...]

    @classmethod
    def create(cls, image: ImagePayload, overlays: Iterable[FieldOverlay]) -> ScanResult:
        return cls(image=image, overlays=tuple(overlays))
