"""User-facing output.

The release orchestrator talks to the user only through a :class:`Reporter`
passed in at construction time. Each call is one line of text; styling is up
to the reporter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.console import Console


class Reporter(Protocol):
    """Receives one-line messages for the user."""

    def message(self, text: str) -> None: ...

    def warning(self, text: str) -> None: ...


class ConsoleReporter:
    """Writes messages to rich consoles; warnings go to ``err_console``."""

    def __init__(self, console: Console, err_console: Console, *, silent: bool = False) -> None:
        self.console = console
        self.err_console = err_console
        self.silent = silent

    def message(self, text: str) -> None:
        if not self.silent:
            self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def warning(self, text: str) -> None:
        if not self.silent:
            self.err_console.print(
                text, markup=False, highlight=False, soft_wrap=True, style="yellow"
            )


class RecordingReporter:
    """Keeps messages in memory."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.warnings: list[str] = []

    def message(self, text: str) -> None:
        self.messages.append(text)

    def warning(self, text: str) -> None:
        self.warnings.append(text)
