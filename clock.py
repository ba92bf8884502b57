"""Date/time readout with the Hijri calendar date, refreshed every second."""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

_LOGGER = logging.getLogger(__name__)

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
HIJRI_MONTH_NAMES = (
    "Muharram",
    "Safar",
    "Rabi al-Awwal",
    "Rabi al-Thani",
    "Jumada al-Awwal",
    "Jumada al-Thani",
    "Rajab",
    "Sha'ban",
    "Ramadan",
    "Shawwal",
    "Dhu al-Qadah",
    "Dhu al-Hijjah",
)


@dataclass(frozen=True)
class HijriDate:
    day: int
    month: int
    month_name: str
    year: int


@dataclass(frozen=True)
class ClockReading:
    date_line: str
    hijri_line: str
    time_line: str


def hijri_date(date: datetime.date) -> HijriDate:
    """Convert a Gregorian date to the tabular Islamic calendar."""

    a = (14 - date.month) // 12
    y = date.year + 4800 - a
    m = date.month + 12 * a - 3
    jd = (
        date.day
        + (153 * m + 2) // 5
        + 365 * y
        + y // 4
        - y // 100
        + y // 400
        - 32045
    )

    l = jd - 1948440 + 10632
    n = (l - 1) // 10631
    l = l - 10631 * n + 354
    j = ((10985 - l) // 5316) * ((50 * l) // 17719) + (l // 5670) * ((43 * l) // 15238)
    l = l - ((30 - j) // 15) * ((17719 * j) // 50) - (j // 16) * ((15238 * j) // 43) + 29

    month = (24 * l) // 709
    day = l - (709 * month) // 24
    year = 30 * n + j - 30
    return HijriDate(day=day, month=month, month_name=HIJRI_MONTH_NAMES[month - 1], year=year)


def clock_reading(now: datetime.datetime) -> ClockReading:
    hijri = hijri_date(now.date())
    return ClockReading(
        date_line=f"{DAY_NAMES[now.weekday()]}, {MONTH_NAMES[now.month - 1]} {now.day}, {now.year}",
        hijri_line=f"{hijri.day} {hijri.month_name} {hijri.year} H",
        time_line=now.strftime("%H:%M:%S"),
    )


class ClockTicker:
    """Calls *on_tick* with a fresh :class:`ClockReading` every *interval* seconds."""

    def __init__(
        self,
        loop,
        on_tick: Callable[[ClockReading], Any],
        tz: datetime.tzinfo,
        interval: float = 1.0,
        now: Optional[Callable[[datetime.tzinfo], datetime.datetime]] = None,
    ):
        self._loop = loop
        self._on_tick = on_tick
        self._tz = tz
        self.interval = interval
        self._now = now or (lambda tz: datetime.datetime.now(tz))
        self._timer = None
        self.last_reading: Optional[ClockReading] = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        self.stop()
        self._tick()

    def stop(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _tick(self) -> None:
        self._timer = self._loop.call_later(self.interval, self._tick)
        self.last_reading = clock_reading(self._now(self._tz))
        try:
            self._on_tick(self.last_reading)
        except Exception:
            _LOGGER.exception("Clock update failed")
