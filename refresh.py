"""Card refresh control: manual refresh, periodic polling and the hold-to-toggle key."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Set

from models import Card, Photo
from rotation import RotationController, rebuild

_LOGGER = logging.getLogger(__name__)

CardFetcher = Callable[[], Awaitable[Sequence[Card]]]
PhotoLoader = Callable[[], Awaitable[Sequence[Photo]]]

SHORT_PRESS = "short"
LONG_PRESS = "long"


class LongPressGesture:
    """Tell a short tap from a press held past *hold_duration*.

    The long-press callback fires once, while the key is still held. A
    release before that fires the short-press callback instead. ``cancel()``
    (focus lost, page hidden) resets without firing either.
    """

    def __init__(
        self,
        loop,
        hold_duration: float,
        on_short_press: Callable[[], Any],
        on_long_press: Callable[[], Any],
        sample_interval: float = 0.03,
        complete_linger: float = 0.7,
    ):
        if hold_duration <= 0:
            raise ValueError("hold_duration must be positive")
        self._loop = loop
        self.hold_duration = hold_duration
        self._on_short_press = on_short_press
        self._on_long_press = on_long_press
        self.sample_interval = sample_interval
        self.complete_linger = complete_linger

        self.pressed = False
        self.pressed_at: Optional[float] = None
        self.triggered = False
        self.visible = False
        self._sample_timer = None
        self._linger_timer = None

    def elapsed(self) -> float:
        if self.pressed_at is None:
            return 0.0
        return max(0.0, self._loop.time() - self.pressed_at)

    def progress(self) -> float:
        """Fraction of the hold completed, for the progress indicator."""

        if self.triggered:
            return 1.0
        if not self.pressed:
            return 0.0
        return min(1.0, self.elapsed() / self.hold_duration)

    def remaining(self) -> float:
        if not self.pressed:
            return self.hold_duration
        if self.triggered:
            return 0.0
        return max(0.0, self.hold_duration - self.elapsed())

    def press(self) -> bool:
        """Start a hold; repeated key-down while held is ignored."""

        if self.pressed:
            return False
        self._cancel_timers()
        self.pressed = True
        self.triggered = False
        self.visible = True
        self.pressed_at = self._loop.time()
        self._schedule_sample()
        return True

    def release(self) -> Optional[str]:
        """End the hold and return which action it amounted to, if any."""

        if not self.pressed:
            return None

        outcome = None
        if not self.triggered:
            if self.elapsed() >= self.hold_duration:
                self._complete()
                outcome = LONG_PRESS
            else:
                outcome = SHORT_PRESS
        self._reset()

        if outcome == SHORT_PRESS:
            self._fire(self._on_short_press, "short press")
        return outcome

    def cancel(self) -> None:
        self._reset()

    def _schedule_sample(self) -> None:
        self._sample_timer = self._loop.call_later(self.sample_interval, self._sample)

    def _sample(self) -> None:
        self._sample_timer = None
        if not self.pressed or self.triggered:
            return
        if self.elapsed() >= self.hold_duration:
            self._complete()
        else:
            self._schedule_sample()

    def _complete(self) -> None:
        self.triggered = True
        if self._sample_timer is not None:
            self._sample_timer.cancel()
            self._sample_timer = None
        self._linger_timer = self._loop.call_later(self.complete_linger, self._hide)
        self._fire(self._on_long_press, "long press")

    def _hide(self) -> None:
        # Still pressed and triggered: further key repeats stay ignored.
        self._linger_timer = None
        self.visible = False

    def _cancel_timers(self) -> None:
        for name in ("_sample_timer", "_linger_timer"):
            timer = getattr(self, name)
            if timer is not None:
                timer.cancel()
                setattr(self, name, None)

    def _reset(self) -> None:
        self._cancel_timers()
        self.pressed = False
        self.pressed_at = None
        self.triggered = False
        self.visible = False

    @staticmethod
    def _fire(callback: Callable[[], Any], label: str) -> None:
        try:
            callback()
        except Exception:
            _LOGGER.exception("%s handler failed", label.capitalize())


class RefreshController:
    """Refreshes the card list and rebuilds the rotation queue.

    *fetch_cards* is ``None`` when no remote board is configured; the
    *fallback_cards* (text goals) are then the card list. Each refresh takes
    a generation number and a result older than one already applied is
    dropped.
    """

    def __init__(
        self,
        loop,
        rotation: RotationController,
        load_photos: PhotoLoader,
        fetch_cards: Optional[CardFetcher] = None,
        fallback_cards: Sequence[Card] = (),
        poll_period: float = 300.0,
        hold_duration: float = 2.0,
        sample_interval: float = 0.03,
        complete_linger: float = 0.7,
    ):
        if poll_period <= 0:
            raise ValueError("poll_period must be positive")
        self._loop = loop
        self._rotation = rotation
        self._load_photos = load_photos
        self._fetch_cards = fetch_cards
        self.poll_period = poll_period

        self.enabled = False
        self._poll_timer = None
        self._cards: List[Card] = [] if fetch_cards is not None else list(fallback_cards)
        self._photos: List[Photo] = []
        self._generation = 0
        self._applied_generation = 0
        self._tasks: Set[Any] = set()
        self.last_error: Optional[str] = None

        self.gesture = LongPressGesture(
            loop,
            hold_duration,
            on_short_press=self.request_refresh,
            on_long_press=self.toggle_auto_refresh,
            sample_interval=sample_interval,
            complete_linger=complete_linger,
        )

    @property
    def has_remote_source(self) -> bool:
        return self._fetch_cards is not None

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    @property
    def photos(self) -> List[Photo]:
        return list(self._photos)

    async def refresh_now(self) -> bool:
        """Fetch cards and photos, rebuild the queue; True when applied.

        Never raises: a failed card fetch keeps the current cards, queue
        and cursor as they are.
        """

        self._generation += 1
        generation = self._generation

        if self._fetch_cards is not None:
            _LOGGER.info("🔄 Refreshing board cards…")
            try:
                cards = list(await self._fetch_cards())
            except Exception as exc:
                if generation < self._applied_generation:
                    _LOGGER.debug("Ignoring failure of superseded refresh #%d: %s", generation, exc)
                    return False
                self.last_error = str(exc)
                _LOGGER.warning(
                    "⚠️ Card refresh failed; keeping %d card(s): %s", len(self._cards), exc
                )
                return False
        else:
            cards = list(self._cards)

        try:
            photos = list(await self._load_photos())
        except Exception as exc:
            _LOGGER.warning("⚠️ Photo store unavailable; showing no photos: %s", exc)
            photos = []

        if generation < self._applied_generation:
            _LOGGER.debug(
                "Discarding refresh #%d; #%d already applied.",
                generation,
                self._applied_generation,
            )
            return False

        previous = len(self._cards)
        self._applied_generation = generation
        self._cards = cards
        self._photos = photos
        self.last_error = None
        self._rotation.replace_queue(rebuild(self._cards, self._photos))
        _LOGGER.info(
            "Refreshed: %d card(s) loaded (previously %d), %d photo(s).",
            len(cards),
            previous,
            len(photos),
        )
        return True

    def request_refresh(self):
        """Schedule :meth:`refresh_now` on the loop and return the task."""

        task = self._loop.create_task(self.refresh_now())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def set_auto_refresh(self, enabled: bool) -> None:
        self._cancel_poll()
        self.enabled = bool(enabled)

        if not self.enabled:
            _LOGGER.info("Auto-refresh is disabled (manual refresh via Spacebar).")
            return
        if self._fetch_cards is None:
            _LOGGER.info("Auto-refresh enabled, but no remote board is configured to poll.")
            return

        self._arm_poll()
        _LOGGER.info(
            "Auto-refresh enabled: board cards will refresh every %g minutes.",
            self.poll_period / 60,
        )

    def toggle_auto_refresh(self) -> bool:
        self.set_auto_refresh(not self.enabled)
        return self.enabled

    def close(self) -> None:
        self._cancel_poll()
        self.gesture.cancel()

    def _arm_poll(self) -> None:
        self._poll_timer = self._loop.call_later(self.poll_period, self._on_poll)

    def _cancel_poll(self) -> None:
        timer, self._poll_timer = self._poll_timer, None
        if timer is not None:
            timer.cancel()

    def _on_poll(self) -> None:
        self._poll_timer = None
        if not self.enabled:
            return
        self._arm_poll()
        self.request_refresh()
