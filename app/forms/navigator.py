"""Guided-fill cursor over the overlays of one scan."""

from __future__ import annotations

from dataclasses import dataclass

from app.forms.overlay import FieldOverlay, ScanResult


@dataclass(frozen=True)
class OverlayState:
    """Render-relevant state of a single overlay."""

    index: int
    overlay: FieldOverlay
    active: bool
    visible: bool
    show_value: bool
    empty: bool


class GuidedFillNavigator:
    """Stepwise cursor with a guided (one field) and a full-view mode.

    Starts at index 0 in guided mode. Navigation clamps at both ends and never
    raises.
    """

    def __init__(self, scan: ScanResult) -> None:
        self._overlays = scan.overlays
        self.current_index = 0
        self.guided = True

    def __len__(self) -> int:
        return len(self._overlays)

    @property
    def overlays(self) -> tuple[FieldOverlay, ...]:
        return self._overlays

    @property
    def _last_index(self) -> int:
        return max(len(self._overlays) - 1, 0)

    def next(self) -> int:
        self.current_index = min(self.current_index + 1, self._last_index)
        return self.current_index

    def previous(self) -> int:
        self.current_index = max(self.current_index - 1, 0)
        return self.current_index

    def toggle_mode(self) -> bool:
        self.guided = not self.guided
        return self.guided

    def reset(self) -> None:
        self.current_index = 0

    @property
    def has_previous(self) -> bool:
        return self.current_index > 0

    @property
    def has_next(self) -> bool:
        return self.current_index < self._last_index

    @property
    def current_overlay(self) -> FieldOverlay | None:
        if not self._overlays:
            return None
        return self._overlays[self.current_index]

    @property
    def step_label(self) -> str:
        if not self._overlays:
            return "Step 0 of 0"
        return f"Step {self.current_index + 1} of {len(self._overlays)}"

    def is_active(self, index: int) -> bool:
        return self.guided and bool(self._overlays) and index == self.current_index

    def is_visible(self, index: int) -> bool:
        if not 0 <= index < len(self._overlays):
            return False
        return not self.guided or index == self.current_index

    def visible_overlays(self) -> list[FieldOverlay]:
        return [item for idx, item in enumerate(self._overlays) if self.is_visible(idx)]

    def overlay_states(self) -> list[OverlayState]:
        return [
            OverlayState(
                index=idx,
                overlay=item,
                active=self.is_active(idx),
                visible=self.is_visible(idx),
                show_value=not self.guided or self.is_active(idx),
                empty=item.is_empty,
            )
            for idx, item in enumerate(self._overlays)
        ]
