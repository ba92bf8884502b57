"""The goal board: one object owning the queue, timers, clock and input handling."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from clock import ClockReading, ClockTicker
from models import Card, simple_card
from photo_store import PhotoStore
from presentation import SnapshotRenderer
from refresh import RefreshController
from rotation import RotationController

_LOGGER = logging.getLogger(__name__)

SPACE_KEYS = frozenset({" ", "Space", "Spacebar"})
NEXT_KEYS = frozenset({"ArrowRight"})
PREVIOUS_KEYS = frozenset({"ArrowLeft"})


class GoalBoard:
    """Wires card source, photo store, rotation, refresh and clock together.

    All methods are expected to run on *loop*'s thread; blocking reads
    (HTTP, photo file) go through ``loop.run_in_executor``.
    """

    def __init__(
        self,
        loop,
        *,
        photo_store: PhotoStore,
        card_source=None,
        goals: Sequence[str] = (),
        tick_period: float = 10.0,
        poll_period: float = 300.0,
        hold_duration: float = 2.0,
        auto_refresh_default: bool = False,
        clock_tz=None,
        sample_interval: float = 0.03,
        complete_linger: float = 0.7,
        clock_interval: float = 1.0,
        renderer: Optional[SnapshotRenderer] = None,
    ):
        self._loop = loop
        self.card_source = card_source
        self.photo_store = photo_store
        self.auto_refresh_default = auto_refresh_default
        self.renderer = renderer or SnapshotRenderer()
        self.clock_reading: Optional[ClockReading] = None

        fallback: Sequence[Card] = [simple_card(goal) for goal in goals]
        fetch_cards = self._fetch_cards if card_source is not None else None

        self.rotation = RotationController(loop, self.renderer.render, tick_period)
        self.refresh = RefreshController(
            loop,
            self.rotation,
            load_photos=self._load_photos,
            fetch_cards=fetch_cards,
            fallback_cards=fallback,
            poll_period=poll_period,
            hold_duration=hold_duration,
            sample_interval=sample_interval,
            complete_linger=complete_linger,
        )
        self.clock = None
        if clock_tz is not None:
            self.clock = ClockTicker(loop, self._on_clock, clock_tz, interval=clock_interval)

    def _fetch_cards(self):
        return self._loop.run_in_executor(None, self.card_source.fetch)

    def _load_photos(self):
        return self._loop.run_in_executor(None, self.photo_store.list)

    def _on_clock(self, reading: ClockReading) -> None:
        self.clock_reading = reading

    async def start(self) -> None:
        """Initial load, then rotation, auto-refresh and the clock."""

        if self.clock is not None:
            self.clock.start()
        await self.refresh.refresh_now()
        self.rotation.start()
        self.refresh.set_auto_refresh(self.auto_refresh_default)
        _LOGGER.info(
            "🖥️  Board ready: %d item(s), source=%s.",
            len(self.rotation.queue),
            self.card_source if self.card_source is not None else "goals",
        )

    def close(self) -> None:
        self.refresh.close()
        self.rotation.stop()
        if self.clock is not None:
            self.clock.stop()

    # ─── Input ────────────────────────────────────────────────────────────

    def handle_key_down(self, key: str) -> bool:
        """React to a key press; returns True when the key is one we use."""

        if key in SPACE_KEYS:
            self.refresh.gesture.press()
            return True
        if key in NEXT_KEYS:
            self.rotation.advance(1)
            return True
        if key in PREVIOUS_KEYS:
            self.rotation.advance(-1)
            return True
        return False

    def handle_key_up(self, key: str) -> bool:
        if key in SPACE_KEYS:
            outcome = self.refresh.gesture.release()
            if outcome is not None:
                _LOGGER.debug("Refresh key released: %s press", outcome)
            return True
        return False

    def handle_focus_lost(self) -> None:
        """Window blur or page hidden: abandon any hold in progress."""

        self.refresh.gesture.cancel()

    # ─── State for the page ───────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        gesture = self.refresh.gesture
        reading = self.clock_reading
        return {
            "item": self.renderer.payload,
            "position": self.rotation.cursor if self.rotation.queue else None,
            "count": len(self.rotation.queue),
            "rotating": self.rotation.is_rotating,
            "auto_refresh": self.refresh.enabled,
            "remote": self.refresh.has_remote_source,
            "last_error": self.refresh.last_error,
            "hold": {
                "visible": gesture.visible,
                "progress": round(gesture.progress(), 3),
                "remaining": round(gesture.remaining(), 1),
                "triggered": gesture.triggered,
            },
            "clock": (
                {
                    "date": reading.date_line,
                    "hijri": reading.hijri_line,
                    "time": reading.time_line,
                }
                if reading is not None
                else None
            ),
        }
