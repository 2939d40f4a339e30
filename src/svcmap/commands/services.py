"""Command group: browse the provider's service directory."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from svcmap.commands._base import SvcmapGroup
from svcmap.services.directory import DirectoryService

if TYPE_CHECKING:
    from svcmap.commands._context import AppContext

_SERVICES_EXAMPLES = [
    ("svcmap services list", "every environment"),
    ("svcmap services list --env prod", "one environment"),
    ("svcmap services operations checkout-api", "operations reported by a service"),
    ("svcmap services deps checkout-api --env staging", "dependency table"),
]


@click.group(cls=SvcmapGroup, examples=_SERVICES_EXAMPLES)
@click.pass_obj
def services(app: AppContext) -> None:
    """Browse services, operations, and dependencies."""


@services.command(
    name="list",
    examples=[
        ("svcmap services list", ""),
        ("svcmap services list --env prod", ""),
        ("svcmap -q services list --env prod", "bare service names"),
    ],
)
@click.option("--env", "environment", default=None, help="Only this environment (default: all).")
@click.pass_obj
def list_cmd(app: AppContext, environment: str | None) -> None:
    """List services by environment."""
    app.emit(
        app.run(lambda session: DirectoryService(session).list_services(environment=environment))
    )


@services.command(
    examples=[
        ("svcmap services operations checkout-api", ""),
        ("svcmap --json services operations checkout-api", "full operation records"),
    ]
)
@click.argument("service")
@click.pass_obj
def operations(app: AppContext, service: str) -> None:
    """List the operations reported for SERVICE."""
    app.emit(app.run(lambda session: DirectoryService(session).list_operations(service)))


@services.command(
    examples=[
        ("svcmap services deps checkout-api", "default environment"),
        ("svcmap services deps checkout-api --env staging", ""),
    ]
)
@click.argument("service")
@click.option(
    "--env", "environment", default=None, help="Provider environment (default: [datadog] env)."
)
@click.pass_obj
def deps(app: AppContext, service: str, environment: str | None) -> None:
    """Show what SERVICE calls and what calls it."""
    app.emit(
        app.run(
            lambda session: DirectoryService(session).dependencies(
                service, environment=environment
            )
        )
    )
