"""Terminal output for the fetchcache CLI.

Fetched bodies and result metadata are the only things written to stdout,
so ``fetchcache get URL > page.html`` captures exactly the content.
Progress notes, warnings and errors go to stderr.

Metadata is rendered as JSON (``--json``), as ``key<TAB>value`` lines when
stdout is piped, or as a Rich table on an interactive terminal. Colour is
off when ``NO_COLOR`` is set, when ``TERM=dumb``, or with ``--no-color``.

One :class:`OutputManager` is installed per CLI invocation by
:func:`~fetchcache.app.main_callback`; commands fetch it with
:func:`get_output`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from rich.console import Console
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from fetchcache.client.response import FetchResult


class OutputFormat(str, Enum):
    """How metadata is rendered. ``AUTO`` picks ``RICH`` or ``PLAIN`` from the terminal."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Writes fetch results to stdout and diagnostics to stderr.

    Args:
        format: Metadata format; ``AUTO`` resolves on construction.
        no_color: Disable colour on both streams.
        quiet: Drop ``info`` and ``success`` notes.
        verbose: Show ``debug`` notes.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def show_metadata(self, data: Mapping[str, Any]) -> None:
        """Render a flat mapping such as :meth:`FetchResult.summary`."""
        if self._format == OutputFormat.JSON:
            self.print_line(json.dumps(dict(data), indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            for key, value in data.items():
                self.print_line(f"{key}\t{value}")
        else:
            table = Table(show_header=False, box=None)
            table.add_column(style="bold cyan")
            table.add_column()
            for key, value in data.items():
                table.add_row(str(key), Text(str(value)))
            self._stdout.print(table)

    def show_body(
        self, result: FetchResult, destination: Optional[Union[str, Path]] = None
    ) -> None:
        """Emit the body of a successful *result*.

        Text results are written as UTF-8, byte results verbatim. With a
        *destination* the body goes to that file instead of stdout.
        """
        is_text = result.body_text is not None
        if destination is not None:
            data = result.body_text.encode("utf-8") if is_text else result.body_bytes
            Path(destination).write_bytes(data or b"")
        elif is_text:
            if self._format == OutputFormat.RICH:
                self._stdout.print(result.body_text, markup=False, highlight=False)
            else:
                self.print_line(result.body_text)
        else:
            _write_binary_stdout(result.body_bytes or b"")

    def print_line(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._note(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._note(message, style="green")

    def warning(self, message: str) -> None:
        self._note(message, label="Warning: ", label_style="yellow")

    def error(self, message: str) -> None:
        """Report a failure. Shown even with ``--quiet``."""
        self._note(message, label="Error: ", label_style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._note(f"[debug] {message}", style="dim")

    def _note(
        self, message: str, label: str = "", style: str = "", label_style: str = ""
    ) -> None:
        # Messages carry URLs and server text, so they are never parsed as markup.
        if self._no_color:
            print(f"{label}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(Text.assemble((label, label_style), (message, style)))


def _write_binary_stdout(data: bytes) -> None:
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        sys.stdout.write(data.decode("utf-8", errors="replace"))
        sys.stdout.flush()
        return
    buffer.write(data)
    buffer.flush()


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _color_disabled_by_env() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` turns colour off."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None
