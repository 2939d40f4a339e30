"""Subcommand modules for svcmap.

Provides register_commands() which uses deferred imports to keep
``svcmap --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group.

    1 group (has subcommands) + 2 standalone commands.
    """
    # --- Groups ---
    from svcmap.commands.services import services

    cli.add_command(services)

    # --- Standalone commands ---
    from svcmap.commands.hover import hover
    from svcmap.commands.resolve import resolve

    cli.add_command(resolve)
    cli.add_command(hover)
