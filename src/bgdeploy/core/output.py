"""Operator-facing output using Rich."""

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

error_console = Console(stderr=True)


class OutputFormatter:
    """Writes command results for the operator.

    ``color`` is True or False to force colour on or off, or None to let Rich
    detect the terminal. Quiet mode drops everything except errors.
    """

    def __init__(self, color: bool | None = None, quiet: bool = False):
        self.quiet = quiet
        self._console = Console(force_terminal=color, no_color=color is False)

    def print(self, message: str, style: str | None = None) -> None:
        if not self.quiet:
            self._console.print(message, style=style)

    def print_error(self, message: str) -> None:
        error_console.print(f"[red]Error:[/red] {message}")

    def print_success(self, message: str) -> None:
        self.print(f"[green]✓[/green] {message}")

    def print_info(self, message: str) -> None:
        self.print(f"[blue]ℹ[/blue] {message}")

    def print_data(self, data: dict[str, Any], title: str | None = None) -> None:
        """Print a single record as a key/value table."""
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Field", style="dim")
        table.add_column("Value")
        for key, value in data.items():
            table.add_row(str(key), str(value))
        self._console.print(table)

    def print_logs(self, app_name: str, logs: bytes) -> None:
        """Show platform logs fetched after a failed push."""
        if self.quiet:
            return
        # Text, not markup: cf log lines carry [APP/PROC/WEB/0] tags
        text = Text(logs.decode("utf-8", errors="replace"))
        self._console.print(Panel(text, title=f"Logs for {app_name}", border_style="red"))

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question. Quiet mode answers with ``default``."""
        if self.quiet:
            return default

        suffix = " [Y/n]" if default else " [y/N]"
        self._console.print(f"{message}{suffix}", end=" ", markup=False)

        try:
            response = input().strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if not response:
            return default
        return response in ("y", "yes")


def format_duration(seconds: float) -> str:
    """Format a deployment duration as seconds or minutes."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{seconds / 60:.1f}m"
