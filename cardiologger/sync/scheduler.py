from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from ..api.gateway import endpoint
from ..clock import Clock
from ..errors import CardiologgerError, MissingApiKeyError
from ..models import SyncState, Totals
from ..render import Renderer

if TYPE_CHECKING:
    from ..session import SessionController

logger = logging.getLogger("cardiologger.sync")

DEFAULT_INTERVAL_S = 5.0


class Gateway(Protocol):
    async def call(
        self, endpoint: str, method: str = "GET", params: dict[str, Any] | None = None
    ) -> dict[str, Any]: ...


class SyncScheduler:
    """Periodic refresh of connection status and cardio totals.

    At most one cycle runs at a time; triggers that arrive while a cycle is in
    flight are dropped. A cycle's result is only applied if the session that
    started it is still the current one.
    """

    def __init__(
        self,
        session: SessionController,
        gateway: Gateway,
        renderer: Renderer,
        clock: Clock,
        *,
        interval_s: float = DEFAULT_INTERVAL_S,
    ) -> None:
        self._session = session
        self._gateway = gateway
        self._renderer = renderer
        self._clock = clock
        self.interval_s = interval_s
        self.state = SyncState()
        self._in_flight = False
        self._timer: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[SyncState | None]] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def start(self) -> SyncState | None:
        self.stop()
        self._timer = asyncio.create_task(self._tick_loop(), name="cardiologger-sync-timer")
        return await self.run_cycle_logged()

    def stop(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    async def drain(self) -> None:
        """Stop the timer and wait for cycles that are already running."""

        self.stop()
        if self._cycles:
            await asyncio.gather(*list(self._cycles), return_exceptions=True)

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_s)
            self._spawn_cycle()

    def _spawn_cycle(self) -> None:
        task = asyncio.create_task(self.run_cycle_logged(), name="cardiologger-sync-cycle")
        self._cycles.add(task)
        task.add_done_callback(self._on_cycle_done)

    def _on_cycle_done(self, task: asyncio.Task[SyncState | None]) -> None:
        self._cycles.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("sync cycle crashed", exc_info=exc)

    async def run_cycle_logged(self) -> SyncState | None:
        try:
            return await self.run_cycle()
        except CardiologgerError as exc:
            logger.warning("sync cycle failed: %s", exc, exc_info=exc)
            return None

    async def run_cycle(self) -> SyncState | None:
        user = self._session.user
        if self._in_flight or user is None:
            return None
        epoch = self._session.epoch
        self._in_flight = True
        try:
            payload = await self._gateway.call(endpoint("connected", user.id), "GET")
            connected = bool(payload.get("connected"))
            if not self._session.is_current(epoch):
                return None
            self._renderer.show_connection(connected)

            stamp = self._clock.stamp(user.timezone)
            totals_endpoint = endpoint("user-cardio-totals", user.id)
            day_payload = await self._gateway.call(totals_endpoint, "GET", stamp.day_params())
            week_payload = await self._gateway.call(totals_endpoint, "GET", stamp.week_params())
            state = SyncState(
                connected=connected,
                day=Totals.from_payload(day_payload),
                week=Totals.from_payload(week_payload),
            )
            if not self._session.is_current(epoch):
                logger.debug("discarding stale sync result for user %s", user.id)
                return None
            self.state = state
            self._renderer.show_totals(state.view())
            return state
        except MissingApiKeyError:
            if self._session.is_current(epoch):
                logger.warning("API key vanished during sync, logging out")
                self._session.logout()
            raise
        finally:
            self._in_flight = False
