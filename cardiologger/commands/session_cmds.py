from __future__ import annotations

import asyncio

import typer
from rich import print

from cardiologger.config import CardiologgerConfig
from cardiologger.errors import CardiologgerError
from cardiologger.session import SessionController

from .common import session_from_config


def login_cmd(config: CardiologgerConfig, *, key: str, user: str) -> None:
    """Store credentials and validate them against the API."""

    async def _run() -> bool:
        session = session_from_config(config)
        try:
            return await session.submit_login_form({"key": key, "user": user})
        finally:
            await session.dispose()

    if not asyncio.run(_run()):
        print("[red]Login failed; stored credentials were cleared[/red]")
        raise typer.Exit(code=1)


def logout_cmd(config: CardiologgerConfig) -> None:
    """Forget stored credentials."""

    session_from_config(config).logout()


async def _bootstrap_or_exit(session: SessionController) -> None:
    if not await session.bootstrap():
        raise typer.Exit(code=1)


def status_cmd(config: CardiologgerConfig) -> None:
    """Re-login from stored credentials and show one refresh."""

    async def _run() -> None:
        session = session_from_config(config)
        try:
            await _bootstrap_or_exit(session)
        finally:
            await session.dispose()

    asyncio.run(_run())


def connect_cmd(config: CardiologgerConfig) -> None:
    """Link the account, then show the refreshed status."""

    async def _run() -> None:
        session = session_from_config(config)
        try:
            await _bootstrap_or_exit(session)
            try:
                await session.connect()
            except CardiologgerError as exc:
                print(f"[red]Connect failed: {exc}[/red]")
                raise typer.Exit(code=1) from exc
        finally:
            await session.dispose()

    asyncio.run(_run())


def watch_cmd(config: CardiologgerConfig) -> None:
    """Keep refreshing until interrupted or the session is lost."""

    async def _run() -> None:
        session = session_from_config(config)
        try:
            await _bootstrap_or_exit(session)
            while session.logged_in:
                await asyncio.sleep(session.scheduler.interval_s)
        finally:
            await session.dispose()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        print("Stopped")
        return
    print("[yellow]Session ended[/yellow]")
    raise typer.Exit(code=1)
