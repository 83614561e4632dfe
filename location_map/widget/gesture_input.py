"""Gesture session bookkeeping on the GUI side of the map.

Raw pointer, pinch and wheel input is folded into numbered gesture sessions.
Pan and pinch share one session while both are held, so a two-finger gesture
that zooms and drags at the same time is a single baseline/commit cycle on the
controller. Session ids and timestamps are strictly increasing.
"""
from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable

PAN = "pan"
PINCH = "pinch"
WHEEL = "wheel"


@dataclass
class GestureCallbacks:
    began: Callable[[int], None]
    updated: Callable[[int, float, float, float, float], None]
    ended: Callable[[int], None]


class GestureInput:
    def __init__(
        self,
        callbacks: GestureCallbacks,
        *,
        drag_threshold: int = 4,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._callbacks = callbacks
        self._drag_threshold = drag_threshold
        self._clock = clock
        self._last_timestamp = 0.0
        self._session_id = 0
        self._sources: set[str] = set()
        self._factor = 1.0
        self._pinch_base = 1.0
        self._dx = 0.0
        self._dy = 0.0
        self._pan_base = (0.0, 0.0)
        self._press_pos: tuple[float, float] | None = None
        self._dragged = False

    @property
    def active(self) -> bool:
        return bool(self._sources)

    @property
    def session_id(self) -> int | None:
        return self._session_id if self._sources else None

    def _next_timestamp(self) -> float:
        now = self._clock() * 1000.0
        if now <= self._last_timestamp:
            now = self._last_timestamp + 0.001
        self._last_timestamp = now
        return now

    def _activate(self, source: str) -> None:
        if not self._sources:
            self._session_id += 1
            self._factor = 1.0
            self._dx = 0.0
            self._dy = 0.0
            self._callbacks.began(self._session_id)
        self._sources.add(source)

    def _deactivate(self, source: str) -> None:
        if source not in self._sources:
            return
        self._sources.discard(source)
        if not self._sources:
            self._callbacks.ended(self._session_id)

    def _emit_update(self) -> None:
        self._callbacks.updated(
            self._session_id, self._next_timestamp(), self._factor, self._dx, self._dy
        )

    # ------------------------------------------------------------------
    # Pointer drag
    # ------------------------------------------------------------------
    def press(self, x: float, y: float) -> None:
        self._press_pos = (x, y)
        self._dragged = False

    def move(self, x: float, y: float) -> bool:
        if self._press_pos is None:
            return False
        px, py = self._press_pos
        if not self._dragged:
            if abs(x - px) + abs(y - py) <= self._drag_threshold:
                return False
            self._dragged = True
            self._activate(PAN)
            self._pan_base = (self._dx - px, self._dy - py)
        self._dx = self._pan_base[0] + x
        self._dy = self._pan_base[1] + y
        self._emit_update()
        return True

    def release(self, x: float, y: float) -> bool:
        """End a press; returns True when it was a click without drag."""
        if self._press_pos is None:
            return False
        clicked = not self._dragged
        if self._dragged:
            self.move(x, y)
            self._deactivate(PAN)
        self._press_pos = None
        self._dragged = False
        return clicked

    # ------------------------------------------------------------------
    # Pinch
    # ------------------------------------------------------------------
    def pinch_started(self) -> None:
        self._activate(PINCH)
        self._pinch_base = self._factor

    def pinch_changed(self, total_scale_factor: float) -> None:
        if PINCH not in self._sources:
            self.pinch_started()
        self._factor = self._pinch_base * total_scale_factor
        self._emit_update()

    def pinch_finished(self) -> None:
        self._deactivate(PINCH)

    # ------------------------------------------------------------------
    # Wheel
    # ------------------------------------------------------------------
    def wheel(self, step_factor: float) -> None:
        """Apply one wheel notch as a pinch step."""
        standalone = not self._sources
        if standalone:
            self._activate(WHEEL)
        self._factor *= step_factor
        self._emit_update()
        if standalone:
            self._deactivate(WHEEL)

    def cancel_all(self) -> None:
        self._press_pos = None
        self._dragged = False
        if self._sources:
            self._sources.clear()
            self._callbacks.ended(self._session_id)
