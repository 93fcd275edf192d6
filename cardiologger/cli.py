from __future__ import annotations

import typer
from rich import print

from . import __version__
from .commands.common import load_cli_config
from .commands.session_cmds import (
    connect_cmd,
    login_cmd,
    logout_cmd,
    status_cmd,
    watch_cmd,
)

app = typer.Typer(help="cardiologger: cardio activity totals in your terminal")


def _verbose(ctx: typer.Context) -> bool:
    return bool((ctx.obj or {}).get("verbose"))


@app.callback()
def _main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    ctx.obj = {"verbose": verbose}


@app.command("login")
def login(
    ctx: typer.Context,
    key: str = typer.Option(..., prompt="API key", hide_input=True, help="API key"),
    user: str = typer.Option(..., prompt="User id", help="User id"),
) -> None:
    """Log in and show current totals."""

    login_cmd(load_cli_config(verbose=_verbose(ctx)), key=key, user=user)


@app.command("logout")
def logout(ctx: typer.Context) -> None:
    """Clear stored credentials."""

    logout_cmd(load_cli_config(verbose=_verbose(ctx)))


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Show connection status and totals once."""

    status_cmd(load_cli_config(verbose=_verbose(ctx)))


@app.command("connect")
def connect(ctx: typer.Context) -> None:
    """Connect the tracker account for the logged in user."""

    connect_cmd(load_cli_config(verbose=_verbose(ctx)))


@app.command("watch")
def watch(
    ctx: typer.Context,
    interval_ms: int = typer.Option(None, help="Refresh period in milliseconds"),
) -> None:
    """Refresh totals periodically until interrupted."""

    config = load_cli_config(verbose=_verbose(ctx))
    if interval_ms is not None:
        if interval_ms <= 0:
            print("[red]--interval-ms must be positive[/red]")
            raise typer.Exit(code=2)
        config.sync_interval_ms = interval_ms
    watch_cmd(config)


@app.command("version")
def version() -> None:
    """Print version."""

    print(__version__)


def main() -> None:
    app()
