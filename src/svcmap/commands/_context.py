"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Runs async service operations inside a provider
session and centralizes result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import click

from svcmap.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from svcmap.config.settings import SvcmapSettings
    from svcmap.infrastructure.provider import ProviderSession
    from svcmap.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  No provider session
    exists until a command runs, so ``--help`` and ``--version`` never
    open network clients.
    """

    def __init__(self, settings: SvcmapSettings) -> None:
        self.settings = settings

        # Configure structured logging
        from svcmap.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        # Enable telemetry context var when verbose
        if settings.verbose:
            from svcmap.services.telemetry import enable_telemetry

            enable_telemetry()

    def run(
        self, operation: Callable[[ProviderSession], Awaitable[ServiceResult]]
    ) -> ServiceResult:
        """Run *operation* in a fresh provider session on a new event loop.

        The session (and its HTTP client) is closed before returning.
        """
        from svcmap.infrastructure.provider import ProviderSession

        async def _invoke() -> ServiceResult:
            async with ProviderSession(self.settings) as session:
                return await operation(session)

        return asyncio.run(_invoke())

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
