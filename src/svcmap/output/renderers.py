"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from svcmap.output.console import create_console, get_output, timing_style

if TYPE_CHECKING:
    from rich.console import Console

    from svcmap.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.data.get("service") and result.op in ("resolve", "hover", "dependencies"):
        return str(result.data["service"])

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(_extract_name(item) for item in items if _extract_name(item))

    return f"OK: {result.op}"


_FIELD_STYLES = {
    "service": "svcmap.service",
    "environment": "svcmap.env",
    "operation_name": "svcmap.operation",
}


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_name(item: Any) -> str:
    """Extract a display name from a dict item (operation or service rows)."""
    if isinstance(item, dict):
        for key in ("name", "service"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="svcmap.ok")
    op = Text(f"  {result.op}", style="svcmap.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    line = Text(f"  {key}: ", style="svcmap.key")
    line.append(str(value), style=_FIELD_STYLES.get(key, ""))
    console.print(line)


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    line = Text(prefix)
    line.append(f"{duration:>8.2f}ms", style=timing_style(duration))
    line.append(f"  {name}")

    extras = [f"{ak}={av}" for ak, av in span_data.get("annotations", {}).items()]
    if extras:
        line.append(f"  ({', '.join(extras)})")
    if span_data.get("error"):
        line.append(f"  failed: {span_data['error']}", style="svcmap.error")

    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="svcmap.error")
    op = Text(f"  {result.op}", style="svcmap.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="svcmap.key"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))
    if verbose:
        _render_meta(console, result)


# ── Resolution renderers ──────────────────────────────────────────────


def _render_resolution(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Resolved service summary followed by the markdown dependency table."""
    d = result.data
    _status_line(console, result)
    for key in ("operation_name", "service", "environment", "candidates"):
        if key in d:
            _field(console, key, d[key])
    if "range" in d:
        start, end = d["range"]["start"], d["range"]["end"]
        span = f"{start['line']}:{start['character']}-{end['line']}:{end['character']}"
        _field(console, "range", span)
    if d.get("markdown"):
        console.print()
        console.print(Text(d["markdown"]), soft_wrap=True)
    if verbose:
        _render_meta(console, result)


def _render_services(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "count", result.data.get("count", 0))

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Environment", style="svcmap.env")
    table.add_column("Service", style="svcmap.service")
    for item in result.data.get("items", []):
        table.add_row(str(item.get("environment", "")), str(item.get("service", "")))
    if result.data.get("items"):
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_operations(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "service", result.data.get("service", ""))
    _field(console, "count", result.data.get("count", 0))

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="svcmap.operation")
    table.add_column("Type")
    for item in result.data.get("items", []):
        table.add_row(str(item.get("name", "")), str(item.get("type", "")))
    if result.data.get("items"):
        console.print(table)
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "resolve": _render_resolution,
    "hover": _render_resolution,
    "dependencies": _render_resolution,
    "list_services": _render_services,
    "list_operations": _render_operations,
}
