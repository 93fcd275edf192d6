from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger("cardiologger.clock")


@dataclass(frozen=True)
class WeekStamp:
    """Calendar year, ISO week number and ISO weekday (Monday is 1)."""

    year: int
    week: int
    weekday: int

    @classmethod
    def from_datetime(cls, moment: dt.datetime) -> WeekStamp:
        iso = moment.isocalendar()
        # The totals API keys on calendar year, not ISO week-year.
        return cls(year=moment.year, week=iso.week, weekday=iso.weekday)

    def day_params(self) -> dict[str, int]:
        return {"year": self.year, "week": self.week, "day": self.weekday}

    def week_params(self) -> dict[str, int]:
        return {"year": self.year, "week": self.week}


class Clock:
    def __init__(
        self,
        default_timezone: str = "UTC",
        *,
        utcnow: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.default_timezone = default_timezone
        self._utcnow = utcnow or (lambda: dt.datetime.now(dt.UTC))

    def _zone(self, name: str | None) -> ZoneInfo:
        candidate = name or self.default_timezone
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("unknown timezone %r, using %s", candidate, self.default_timezone)
        try:
            return ZoneInfo(self.default_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo("UTC")

    def now(self, timezone: str | None = None) -> dt.datetime:
        return self._utcnow().astimezone(self._zone(timezone))

    def stamp(self, timezone: str | None = None) -> WeekStamp:
        return WeekStamp.from_datetime(self.now(timezone))
