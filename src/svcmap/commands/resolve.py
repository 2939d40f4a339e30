"""Command: resolve an operation name to its owning service."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from svcmap.commands._base import SvcmapCommand
from svcmap.services.resolution import ResolutionService

if TYPE_CHECKING:
    from svcmap.commands._context import AppContext


@click.command(
    cls=SvcmapCommand,
    examples=[
        ("svcmap resolve checkout", "owning service and dependency table"),
        ("svcmap resolve web.request --env staging", "search another environment"),
        ("svcmap --json resolve checkout", "machine-readable result"),
        ("svcmap -q resolve checkout", "service name only"),
    ],
)
@click.argument("operation_name")
@click.option(
    "--env", "environment", default=None, help="Provider environment (default: [datadog] env)."
)
@click.pass_obj
def resolve(app: AppContext, operation_name: str, environment: str | None) -> None:
    """Find the service reporting OPERATION_NAME and show its dependencies."""
    app.emit(
        app.run(
            lambda session: ResolutionService(session).resolve(
                operation_name, environment=environment
            )
        )
    )
