from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.table import Table

from .models import TotalsView, User


class Renderer(Protocol):
    def show_logging_in(self, logging_in: bool) -> None: ...

    def show_session(self, user: User | None) -> None: ...

    def show_connection(self, connected: bool) -> None: ...

    def show_totals(self, view: TotalsView) -> None: ...


class ConsoleRenderer:
    """Terminal view of the session: login prompt, connection badge, totals."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_logging_in(self, logging_in: bool) -> None:
        if logging_in:
            self.console.print("[dim]Logging in...[/dim]")

    def show_session(self, user: User | None) -> None:
        if user is None:
            self.console.print(
                "[yellow]Logged out.[/yellow] Run [bold]cardiologger login[/bold] to sign in."
            )
            return
        zone = user.timezone or "default timezone"
        self.console.print(f"[green]Logged in[/green] as [bold]{user.id}[/bold] ({zone})")

    def show_connection(self, connected: bool) -> None:
        if connected:
            self.console.print("[green]Connected[/green]")
        else:
            self.console.print(
                "[red]Disconnected[/red] - run [bold]cardiologger connect[/bold] to link your account"
            )

    def show_totals(self, view: TotalsView) -> None:
        table = Table(title="Cardio totals")
        table.add_column("Period")
        table.add_column("Points", justify="right")
        table.add_column("Active minutes", justify="right")
        table.add_row("Today", str(view.day_points), str(view.day_minutes))
        table.add_row("This week", str(view.week_points), str(view.week_minutes))
        self.console.print(table)
