"""Operator-facing output for the staticcache CLI.

Data the operator may pipe (config dumps, policy tables, artifact listings)
goes to stdout; status lines and errors go to stderr. On a colour terminal
data is rendered with Rich, otherwise as tab-separated text or JSON.
``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all turn colour off.

:func:`~staticcache.app.main_callback` installs one :class:`OutputManager`
with :func:`set_output`; commands call the module-level helpers. The cache
library itself never prints and logs through :mod:`logging` instead.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How stdout data is rendered. ``AUTO`` means ``RICH`` on a colour TTY, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Render command results and status messages for one CLI invocation.

    Args:
        format: Requested format for stdout data.
        no_color: Strip colour and markup from everything printed.
        quiet: Drop ``info`` and ``success`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        if format == OutputFormat.AUTO:
            rich_ok = sys.stdout.isatty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    def format_response(self, data: Any) -> None:
        """Write a dict or list result to stdout."""
        if self._format == OutputFormat.PLAIN:
            items = data.items() if isinstance(data, dict) else None
            if items is not None:
                for key, value in items:
                    _emit(f"{key}\t{value}")
            elif isinstance(data, list):
                for item in data:
                    _emit(str(item))
            else:
                _emit(str(data))
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            _emit(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write *rows* to stdout as a Rich table, JSON records, or TSV lines."""
        if self._format == OutputFormat.JSON:
            _emit(json.dumps([dict(zip(headers, row)) for row in rows], indent=2))
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                _emit("\t".join(line))
            return

        table = Table(title=title, header_style="bold cyan")
        for name in headers:
            table.add_column(name)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._status(message, None)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._status(message, "green")

    def error(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._status(f"Error: {message}", "bold red")

    def _status(self, message: str, style: Optional[str]) -> None:
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(message, style=style, markup=False, highlight=False)


def _emit(line: str) -> None:
    print(line, file=sys.stdout, flush=True)


def _color_disabled_by_env() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def _current() -> OutputManager:
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* for the module-level helpers."""
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    _current().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    _current().print_table(headers, rows, title)


def info(message: str) -> None:
    _current().info(message)


def success(message: str) -> None:
    _current().success(message)


def error(message: str) -> None:
    _current().error(message)
