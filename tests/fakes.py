from __future__ import annotations

import asyncio
import datetime as dt
from collections.abc import Callable
from pathlib import Path
from typing import Any

from cardiologger.clock import Clock
from cardiologger.credentials import CredentialStore
from cardiologger.errors import ApiResponseError, MissingApiKeyError
from cardiologger.models import TotalsView, User
from cardiologger.session import SessionController

FIXED_NOW = dt.datetime(2024, 3, 13, 12, 0, tzinfo=dt.UTC)

Route = dict[str, Any] | Exception | Callable[[dict[str, Any] | None], Any]


class FakeGateway:
    """In-process stand-in for ApiGateway keyed by endpoint."""

    def __init__(self, store: CredentialStore, routes: dict[str, Route] | None = None) -> None:
        self.store = store
        self.routes: dict[str, Route] = dict(routes or {})
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.entered: dict[str, asyncio.Event] = {}

    def gate(self, endpoint: str) -> tuple[asyncio.Event, asyncio.Event]:
        self.gates[endpoint] = asyncio.Event()
        self.entered[endpoint] = asyncio.Event()
        return self.gates[endpoint], self.entered[endpoint]

    def count(self, endpoint: str) -> int:
        return sum(1 for _method, called, _params in self.calls if called == endpoint)

    async def call(
        self, endpoint: str, method: str = "GET", params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        if not self.store.get().api_key:
            raise MissingApiKeyError("no API key stored")
        self.calls.append((method, endpoint, dict(params) if params else None))
        if endpoint in self.entered:
            self.entered[endpoint].set()
        gate = self.gates.get(endpoint)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        route = self.routes.get(endpoint, {})
        if callable(route):
            route = route(params)
        if isinstance(route, Exception):
            raise route
        if route.get("error"):
            raise ApiResponseError(str(route["error"]), status=200, error=route["error"])
        return route


class RecordingRenderer:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def show_logging_in(self, logging_in: bool) -> None:
        self.events.append(("logging_in", logging_in))

    def show_session(self, user: User | None) -> None:
        self.events.append(("session", user.id if user else None))

    def show_connection(self, connected: bool) -> None:
        self.events.append(("connection", connected))

    def show_totals(self, view: TotalsView) -> None:
        self.events.append(("totals", view))

    def of(self, kind: str) -> list[Any]:
        return [value for event, value in self.events if event == kind]


def totals_route(day: dict[str, Any], week: dict[str, Any] | Exception) -> Route:
    def _route(params: dict[str, Any] | None) -> Any:
        if params and "day" in params:
            return day
        return week

    return _route


def default_routes(user_id: str = "u1") -> dict[str, Route]:
    return {
        f"/users/{user_id}": {"id": user_id, "timezone": "UTC"},
        f"/connected/{user_id}": {"connected": True},
        f"/user-cardio-totals/{user_id}": totals_route(
            {"points": 12.7, "active_seconds": 125},
            {"points": 40.2, "active_seconds": 600},
        ),
    }


def make_session(
    tmp_path: Path,
    routes: dict[str, Route] | None = None,
    *,
    interval_s: float = 60.0,
) -> tuple[SessionController, FakeGateway, RecordingRenderer]:
    store = CredentialStore(tmp_path / "credentials.json")
    gateway = FakeGateway(store, default_routes() if routes is None else routes)
    renderer = RecordingRenderer()
    clock = Clock("UTC", utcnow=lambda: FIXED_NOW)
    session = SessionController(store, gateway, renderer, clock, interval_s=interval_s)
    return session, gateway, renderer
