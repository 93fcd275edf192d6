from __future__ import annotations

from pathlib import Path

import pytest
from fakes import FakeGateway, default_routes
from typer.testing import CliRunner

from cardiologger import __version__
from cardiologger.clock import Clock
from cardiologger.commands import session_cmds
from cardiologger.config import CardiologgerConfig
from cardiologger.credentials import CredentialStore
from cardiologger.cli import app
from cardiologger.render import ConsoleRenderer
from cardiologger.session import SessionController

runner = CliRunner()


@pytest.fixture
def fake_routes(monkeypatch: pytest.MonkeyPatch) -> dict:
    routes = default_routes()

    def _session(config: CardiologgerConfig, console=None) -> SessionController:
        store = CredentialStore(config.credentials_path)
        gateway = FakeGateway(store, routes)
        return SessionController(
            store,
            gateway,
            ConsoleRenderer(console),
            Clock(config.default_timezone),
            interval_s=config.sync_interval_s,
        )

    monkeypatch.setattr(session_cmds, "session_from_config", _session)
    return routes


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("login", "logout", "status", "connect", "watch"):
        assert command in result.stdout


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_login_stores_credentials_and_shows_totals(fake_routes: dict, tmp_path: Path) -> None:
    result = runner.invoke(app, ["login", "--key", "k1", "--user", "u1"])

    assert result.exit_code == 0, result.stdout
    assert "Logged in" in result.stdout
    assert "Connected" in result.stdout
    assert "This week" in result.stdout
    assert CredentialStore(tmp_path / "credentials.json").get().user_id == "u1"


def test_login_failure_clears_credentials(fake_routes: dict, tmp_path: Path) -> None:
    fake_routes["/users/u1"] = {"error": "bad key"}

    result = runner.invoke(app, ["login", "--key", "k1", "--user", "u1"])

    assert result.exit_code == 1
    assert "Login failed" in result.stdout
    assert not (tmp_path / "credentials.json").exists()


def test_status_without_credentials_exits_nonzero(fake_routes: dict) -> None:
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 1
    assert "Logged out" in result.stdout


def test_connect_reports_connected_after_post(fake_routes: dict, tmp_path: Path) -> None:
    CredentialStore(tmp_path / "credentials.json").save("k1", "u1")
    fake_routes["/connected/u1"] = {"connected": False}

    def _connect(params):
        fake_routes["/connected/u1"] = {"connected": True}
        return {}

    fake_routes["/connect/u1"] = _connect

    result = runner.invoke(app, ["connect"])

    assert result.exit_code == 0, result.stdout
    assert "Disconnected" in result.stdout
    lines = [line.strip() for line in result.stdout.splitlines()]
    assert "Connected" in lines


def test_logout_removes_credentials(tmp_path: Path) -> None:
    store = CredentialStore(tmp_path / "credentials.json")
    store.save("k1", "u1")

    result = runner.invoke(app, ["logout"])

    assert result.exit_code == 0
    assert "Logged out" in result.stdout
    assert not store.path.exists()


def test_watch_rejects_non_positive_interval() -> None:
    result = runner.invoke(app, ["watch", "--interval-ms", "0"])

    assert result.exit_code == 2
