"""Console output used as the plugin logger.

The host pipeline hands the plugin a logger; here that logger is any object
satisfying ``ConsoleProtocol``. Production uses ``RichConsole``, tests use
``MockConsole`` and inspect what would have been printed.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Message kinds."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    DEBUG = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Logger interface shared by verify and publish.

    Uploads run on worker threads, so implementations must tolerate
    concurrent calls.
    """

    def log(self, message: str) -> None:
        """Print a regular progress message."""
        ...

    def success(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def debug(self, message: str) -> None:
        """Print a diagnostic message; may be dropped when not verbose."""
        ...


class RichConsole:
    """Console implementation using Rich."""

    def __init__(self, *, verbose: bool = False, stderr: bool = False) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console(stderr=stderr)
        self.verbose = verbose

    def _emit(self, prefix: str, message: str, style: str = "") -> None:
        from rich.markup import escape

        text = f"{prefix}{escape(message)}"
        if style:
            self._console.print(text, style=style)
        else:
            self._console.print(text)

    def log(self, message: str) -> None:
        self._emit("", message)

    def success(self, message: str) -> None:
        self._emit("[green]OK[/green] ", message)

    def warning(self, message: str) -> None:
        self._emit("[yellow]warning:[/yellow] ", message)

    def error(self, message: str) -> None:
        self._emit("[red bold]error:[/red bold] ", message)

    def debug(self, message: str) -> None:
        if self.verbose:
            self._emit("debug: ", message, style="dim")


@dataclass
class OutputRecord:
    """A single captured message."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _record(self, message: str, style: Style) -> None:
        with self._lock:
            self.outputs.append(OutputRecord(message, style))

    def log(self, message: str) -> None:
        self._record(message, Style.DEFAULT)

    def success(self, message: str) -> None:
        self._record(f"OK {message}", Style.SUCCESS)

    def warning(self, message: str) -> None:
        self._record(f"warning: {message}", Style.WARNING)

    def error(self, message: str) -> None:
        self._record(f"error: {message}", Style.ERROR)

    def debug(self, message: str) -> None:
        self._record(message, Style.DEBUG)

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
