from __future__ import annotations

import logging
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_cardiologger_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CARDIOLOGGER_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("CARDIOLOGGER_CREDENTIALS", str(tmp_path / "credentials.json"))
    monkeypatch.setenv("CARDIOLOGGER_LOG", "")
    for name in (
        "CARDIOLOGGER_API_HOST",
        "CARDIOLOGGER_SYNC_INTERVAL_MS",
        "CARDIOLOGGER_DEFAULT_TIMEZONE",
        "CARDIOLOGGER_REQUEST_TIMEOUT_S",
        "CARDIOLOGGER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_cardiologger_logging():
    yield
    logger = logging.getLogger("cardiologger")
    for handler in list(logger.handlers):
        if getattr(handler, "_cardiologger_handler", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
