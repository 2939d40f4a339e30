"""Dependency table renderer — markdown for one service's dependency record.

The table pairs ``calls`` and ``called_by`` purely by position: row *i*
holds the i-th entry of each list, with an empty cell where one list is
shorter. The rows say nothing about which caller reaches which callee.

The trailing deep link covers the day before render time. Pass *clock*
to pin "now" (tests do).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from itertools import zip_longest
from typing import TYPE_CHECKING
from urllib.parse import urlencode

if TYPE_CHECKING:
    from svcmap.domain.types import ServiceDependencies

NO_CALLS_PLACEHOLDER = "Doesn't call any service"
NO_CALLERS_PLACEHOLDER = "Not called by any service"
DEFAULT_APP_HOST = "app.datadoghq.com"
MAP_WINDOW = timedelta(days=1)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def service_map_link(
    service_name: str,
    environment: str,
    *,
    clock: Callable[[], datetime] = _utc_now,
    app_host: str = DEFAULT_APP_HOST,
) -> str:
    """Deep link to the provider's service map for the last day."""
    end = clock()
    start = end - MAP_WINDOW
    query = urlencode(
        {
            "env": environment,
            "start": _epoch_ms(start),
            "end": _epoch_ms(end),
            "service": service_name,
        }
    )
    return f"https://{app_host}/apm/map?{query}"


def _cell(text: str) -> str:
    """Escape a service name so it stays inside one table cell."""
    return " ".join(text.replace("|", r"\|").split())


def table_rows(dependencies: ServiceDependencies) -> list[tuple[str, str]]:
    """The (calls, called by) rows of the table, placeholders included."""
    calls = list(dependencies.calls) or [NO_CALLS_PLACEHOLDER]
    called_by = list(dependencies.called_by) or [NO_CALLERS_PLACEHOLDER]
    return list(zip_longest(calls, called_by, fillvalue=""))


def render_dependency_table(
    dependencies: ServiceDependencies,
    service_name: str,
    environment: str,
    *,
    clock: Callable[[], datetime] = _utc_now,
    app_host: str = DEFAULT_APP_HOST,
) -> str:
    """Render *dependencies* as a markdown table followed by a service map link."""
    lines = [
        f"#### Datadog service: {service_name}",
        "---",
        "",
        "| Calls | Called by |",
        "| --- | ----------- |",
    ]
    lines.extend(
        f"| {_cell(call)} | {_cell(caller)} |" for call, caller in table_rows(dependencies)
    )

    link = service_map_link(service_name, environment, clock=clock, app_host=app_host)
    lines.extend(["", f"[View full service map on datadog]({link})"])
    return "\n".join(lines)
