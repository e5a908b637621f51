# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Interactive confirmation and banner output."""

from __future__ import annotations

from rich.console import Console

BANNER = "Homer CLI"


class ConsolePrompt:
    """Asks yes/no questions on the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def confirm(self, message: str) -> bool:
        """Ask ``message`` and return True only for an explicit yes."""
        try:
            response = self.console.input(f"[bold]?[/bold] {message} [y/N] ")
        except EOFError:
            return False
        return response.strip().lower() in ("y", "yes")


def print_banner(console: Console | None = None) -> None:
    """Print the banner shown when homer runs without a command."""
    console = console or Console()
    console.rule(f"[bold bright_green]{BANNER}[/bold bright_green]", style="bright_green")
