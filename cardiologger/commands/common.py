from __future__ import annotations

from rich.console import Console

from cardiologger.config import CardiologgerConfig, load_config
from cardiologger.logs import configure_logging
from cardiologger.render import ConsoleRenderer
from cardiologger.session import SessionController


def load_cli_config(*, verbose: bool = False) -> CardiologgerConfig:
    config = load_config()
    configure_logging("DEBUG" if verbose else config.log_level, config.log_path)
    return config


def session_from_config(
    config: CardiologgerConfig, console: Console | None = None
) -> SessionController:
    return SessionController.create(config, ConsoleRenderer(console))
