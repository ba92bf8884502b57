"""Display queue construction and the auto-advance rotation controller."""
from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Optional, Sequence, Tuple

from models import Card, Photo, QueueItem

_LOGGER = logging.getLogger(__name__)

RenderCallback = Callable[[Optional[QueueItem]], Any]


# ─── Queue ────────────────────────────────────────────────────────────────────

def rebuild(cards: Sequence[Card], photos: Sequence[Photo]) -> Tuple[QueueItem, ...]:
    """Interleave cards and photos: card0, photo0, card1, photo1, …

    Once the shorter list runs out the rest of the longer list follows in its
    original order. Always returns a new tuple.
    """

    merged = []
    for index in range(max(len(cards), len(photos))):
        if index < len(cards):
            merged.append(cards[index])
        if index < len(photos):
            merged.append(photos[index])
    return tuple(merged)


def clamp_cursor(cursor: int, queue_length: int) -> int:
    """Return *cursor* if it addresses the queue, otherwise 0."""

    if 0 <= cursor < queue_length:
        return cursor
    return 0


def current_item(queue: Sequence[QueueItem], cursor: int) -> Optional[QueueItem]:
    if not queue:
        return None
    return queue[clamp_cursor(cursor, len(queue))]


def is_empty(queue: Sequence[QueueItem]) -> bool:
    return len(queue) == 0


# ─── Rotation controller ──────────────────────────────────────────────────────

class RotationState(enum.Enum):
    IDLE = "idle"
    ROTATING = "rotating"


class RotationController:
    """Owns the cursor and the auto-advance timer.

    *loop* only needs ``call_later(delay, callback)`` returning a handle with
    ``cancel()``; an asyncio event loop fits. *render* receives the current
    item (or ``None`` for an empty queue) whenever the cursor or queue moves.
    """

    def __init__(self, loop, render: RenderCallback, tick_period: float):
        if tick_period <= 0:
            raise ValueError("tick_period must be positive")
        self._loop = loop
        self._render = render
        self.tick_period = tick_period
        self._queue: Tuple[QueueItem, ...] = ()
        self._cursor = 0
        self._timer = None
        self._wanted = False
        self.state = RotationState.IDLE

    @property
    def queue(self) -> Tuple[QueueItem, ...]:
        return self._queue

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> Optional[QueueItem]:
        return current_item(self._queue, self._cursor)

    @property
    def is_rotating(self) -> bool:
        return self.state is RotationState.ROTATING

    def start(
        self,
        queue: Optional[Sequence[QueueItem]] = None,
        tick_period: Optional[float] = None,
    ) -> RotationState:
        """Begin auto-advancing; a queue of one item or less stays idle."""

        if queue is not None:
            self._queue = tuple(queue)
            self._cursor = clamp_cursor(self._cursor, len(self._queue))
        if tick_period is not None:
            if tick_period <= 0:
                raise ValueError("tick_period must be positive")
            self.tick_period = tick_period

        self._wanted = True
        self._cancel_timer()
        if len(self._queue) <= 1:
            self.state = RotationState.IDLE
            _LOGGER.info("⏸️  Rotation idle (%d item(s) queued).", len(self._queue))
            return self.state

        self.state = RotationState.ROTATING
        self._arm()
        _LOGGER.info(
            "▶️  Rotating %d item(s) every %ss.", len(self._queue), self.tick_period
        )
        return self.state

    def stop(self) -> None:
        self._wanted = False
        self._cancel_timer()
        self.state = RotationState.IDLE

    def advance(self, direction: int) -> bool:
        """Step the cursor by +1 or -1; returns False when there is nowhere to go."""

        if direction not in (1, -1):
            raise ValueError("direction must be +1 or -1")
        length = len(self._queue)
        if length <= 1:
            return False

        self._cursor = (self._cursor + direction + length) % length
        if self.state is RotationState.ROTATING:
            # Manual moves restart the full tick period.
            self._cancel_timer()
            self._arm()
        self._render_current()
        return True

    def replace_queue(self, queue: Sequence[QueueItem]) -> None:
        """Swap in a rebuilt queue, re-clamp the cursor and render.

        The timer phase is kept unless rotation has to start or stop because
        the queue crossed the single-item threshold.
        """

        previous_length = len(self._queue)
        self._queue = tuple(queue)
        self._cursor = clamp_cursor(self._cursor, len(self._queue))
        _LOGGER.debug(
            "Queue rebuilt: %d → %d item(s), cursor %d",
            previous_length,
            len(self._queue),
            self._cursor,
        )
        self._render_current()

        if len(self._queue) <= 1:
            if self.state is RotationState.ROTATING:
                self._cancel_timer()
                self.state = RotationState.IDLE
                _LOGGER.info("⏸️  Rotation idle; queue shrank to %d item(s).", len(self._queue))
        elif self._wanted and self.state is RotationState.IDLE:
            self.state = RotationState.ROTATING
            self._arm()
            _LOGGER.info("▶️  Rotation resumed with %d item(s).", len(self._queue))

    def _arm(self) -> None:
        self._timer = self._loop.call_later(self.tick_period, self._on_tick)

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _on_tick(self) -> None:
        self._timer = None
        if self.state is not RotationState.ROTATING:
            return
        length = len(self._queue)
        if length <= 1:
            self.state = RotationState.IDLE
            return

        self._cursor = (self._cursor + 1) % length
        self._arm()
        self._render_current()

    def _render_current(self) -> None:
        try:
            self._render(self.current)
        except Exception:
            _LOGGER.exception("Render failed for queue position %d", self._cursor)
