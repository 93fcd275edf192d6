from __future__ import annotations

import logging
from collections.abc import Mapping

from .api import ApiGateway, endpoint
from .clock import Clock
from .config import CardiologgerConfig
from .credentials import CredentialStore
from .errors import CardiologgerError, MissingApiKeyError
from .models import Authenticating, LoggedIn, LoggedOut, SessionStatus, SyncState, User
from .render import Renderer
from .sync.scheduler import DEFAULT_INTERVAL_S, Gateway, SyncScheduler

logger = logging.getLogger("cardiologger.session")


class SessionController:
    """Credential lifecycle and the LoggedOut/Authenticating/LoggedIn state machine.

    Every transition bumps ``epoch``; async work started under an older epoch
    must not apply its result.
    """

    def __init__(
        self,
        store: CredentialStore,
        gateway: Gateway,
        renderer: Renderer,
        clock: Clock,
        *,
        interval_s: float = DEFAULT_INTERVAL_S,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.renderer = renderer
        self.status: SessionStatus = LoggedOut()
        self._epoch = 0
        self.scheduler = SyncScheduler(self, gateway, renderer, clock, interval_s=interval_s)

    @classmethod
    def create(cls, config: CardiologgerConfig, renderer: Renderer) -> SessionController:
        store = CredentialStore(config.credentials_path)
        gateway = ApiGateway(config.api_host, store, timeout_s=config.request_timeout_s)
        clock = Clock(config.default_timezone)
        return cls(store, gateway, renderer, clock, interval_s=config.sync_interval_s)

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def user(self) -> User | None:
        if isinstance(self.status, LoggedIn):
            return self.status.user
        return None

    @property
    def logged_in(self) -> bool:
        user = self.user
        return user is not None and bool(user.id)

    @property
    def sync_state(self) -> SyncState:
        return self.scheduler.state

    def is_current(self, epoch: int) -> bool:
        return epoch == self._epoch and self.logged_in

    def _transition(self, status: SessionStatus) -> int:
        # Leaving LoggedIn always drops the timer along with the user.
        self.scheduler.stop()
        self._epoch += 1
        self.status = status
        return self._epoch

    async def bootstrap(self) -> bool:
        creds = self.store.get()
        if not creds.complete:
            self.logout()
            return False

        assert creds.user_id is not None
        epoch = self._transition(Authenticating(creds.user_id))
        self.renderer.show_logging_in(True)
        try:
            payload = await self.gateway.call(endpoint("users", creds.user_id), "GET")
            user = User.from_payload(payload)
        except CardiologgerError as exc:
            if epoch != self._epoch:
                return False
            logger.warning("login failed for user %s: %s", creds.user_id, exc, exc_info=exc)
            self.logout()
            return False

        if epoch != self._epoch:
            logger.debug("discarding superseded login for user %s", user.id)
            return False
        self.status = LoggedIn(user)
        self.renderer.show_logging_in(False)
        self.renderer.show_session(user)
        logger.info("logged in as %s", user.id)
        await self.scheduler.start()
        return True

    async def login(self, api_key: str, user_id: str) -> bool:
        self.store.save(api_key, user_id)
        return await self.bootstrap()

    async def submit_login_form(self, form: Mapping[str, str | None]) -> bool:
        return await self.login(form.get("key") or "", form.get("user") or "")

    def logout(self) -> None:
        self.store.clear()
        self._transition(LoggedOut())
        self.renderer.show_logging_in(False)
        self.renderer.show_session(None)

    async def connect(self) -> SyncState | None:
        user = self.user
        if user is None:
            raise RuntimeError("connect requires a logged in session")
        try:
            await self.gateway.call(endpoint("connect", user.id), "POST")
        except MissingApiKeyError:
            logger.warning("API key vanished before connect, logging out")
            self.logout()
            raise
        return await self.scheduler.run_cycle_logged()

    async def dispose(self) -> None:
        await self.scheduler.drain()
