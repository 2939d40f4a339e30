"""Buffered Rich consoles and the svcmap colour theme.

Renderers never write to the terminal directly: they print into a
console backed by ``StringIO`` and hand the text back to the command,
which decides where it goes. Rich drops colour codes by itself when the
output is not a terminal (pipes, CliRunner).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFAULT_WIDTH = 120

# Span durations (ms) above which the timing tree escalates its colour.
SLOW_SPAN_MS = 1000.0
LAGGING_SPAN_MS = 100.0

SVCMAP_THEME = Theme(
    {
        "svcmap.ok": "bold green",
        "svcmap.error": "bold red",
        "svcmap.op": "bold cyan",
        "svcmap.key": "dim",
        "svcmap.service": "bold blue",
        "svcmap.env": "magenta",
        "svcmap.operation": "bold",
        "svcmap.timing.slow": "bold red",
        "svcmap.timing.lagging": "yellow",
        "svcmap.timing.fast": "dim",
    }
)


def timing_style(duration_ms: float) -> str:
    """Theme style for a span that took *duration_ms*."""
    if duration_ms > SLOW_SPAN_MS:
        return "svcmap.timing.slow"
    if duration_ms > LAGGING_SPAN_MS:
        return "svcmap.timing.lagging"
    return "svcmap.timing.fast"


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A Console writing to an in-memory buffer with the svcmap theme."""
    return Console(
        file=StringIO(),
        theme=SVCMAP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or DEFAULT_WIDTH,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console()")
    return buffer.getvalue()
