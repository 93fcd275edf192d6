from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from .errors import ApiResponseError, MalformedUserError


@dataclass(frozen=True)
class Credentials:
    api_key: str | None = None
    user_id: str | None = None

    @property
    def complete(self) -> bool:
        return bool(self.api_key) and bool(self.user_id)


@dataclass(frozen=True)
class User:
    id: str
    timezone: str | None = None
    fields: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> User:
        raw_id = payload.get("id")
        if isinstance(raw_id, bool) or not isinstance(raw_id, (str, int)):
            raise MalformedUserError(f"user payload has no usable id: {raw_id!r}")
        user_id = str(raw_id)
        if not user_id:
            raise MalformedUserError("user payload has an empty id")
        timezone = payload.get("timezone")
        if not isinstance(timezone, str) or not timezone:
            timezone = None
        return cls(id=user_id, timezone=timezone, fields=dict(payload))


def _number(payload: dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ApiResponseError(f"totals payload missing numeric {key!r}", error=value)
    if not math.isfinite(value):
        raise ApiResponseError(f"totals payload has non-finite {key!r}", error=value)
    return float(value)


@dataclass(frozen=True)
class Totals:
    points: float = 0.0
    active_seconds: float = 0.0

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Totals:
        return cls(
            points=_number(payload, "points"),
            active_seconds=_number(payload, "active_seconds"),
        )

    @property
    def points_display(self) -> int:
        return math.floor(self.points)

    @property
    def active_minutes(self) -> int:
        return math.floor(self.active_seconds / 60.0)


@dataclass(frozen=True)
class TotalsView:
    day_points: int
    day_minutes: int
    week_points: int
    week_minutes: int


@dataclass(frozen=True)
class SyncState:
    connected: bool = False
    day: Totals = field(default_factory=Totals)
    week: Totals = field(default_factory=Totals)

    def view(self) -> TotalsView:
        return TotalsView(
            day_points=self.day.points_display,
            day_minutes=self.day.active_minutes,
            week_points=self.week.points_display,
            week_minutes=self.week.active_minutes,
        )


@dataclass(frozen=True)
class LoggedOut:
    pass


@dataclass(frozen=True)
class Authenticating:
    user_id: str


@dataclass(frozen=True)
class LoggedIn:
    user: User


SessionStatus = LoggedOut | Authenticating | LoggedIn
