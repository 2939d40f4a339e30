"""Command: resolve the operation name under a position in a source file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from svcmap.commands._base import SvcmapCommand
from svcmap.domain.extraction import OPERATION_NAME_PATTERNS, language_for_path
from svcmap.services.resolution import ResolutionService

if TYPE_CHECKING:
    from svcmap.commands._context import AppContext


@click.command(
    cls=SvcmapCommand,
    examples=[
        ("svcmap hover src/checkout.ts 41 22", "language from the extension"),
        ("svcmap hover app/tasks.py 10 18 --env staging", ""),
        ("svcmap hover handler.txt 3 15 --language javascript", "explicit language"),
    ],
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("line", type=click.IntRange(min=0))
@click.argument("character", type=click.IntRange(min=0))
@click.option(
    "--language",
    type=click.Choice(sorted(OPERATION_NAME_PATTERNS)),
    default=None,
    help="Source language (default: from the file extension).",
)
@click.option(
    "--env", "environment", default=None, help="Provider environment (default: [datadog] env)."
)
@click.pass_obj
def hover(
    app: AppContext,
    file: Path,
    line: int,
    character: int,
    language: str | None,
    environment: str | None,
) -> None:
    """Resolve the traced operation at LINE:CHARACTER (zero-based) in FILE."""
    language = language or language_for_path(str(file))
    if language is None:
        raise click.BadParameter(
            f"cannot infer the language of '{file.name}'; pass --language",
            param_hint="FILE",
        )
    text = file.read_text(encoding="utf-8")
    app.emit(
        app.run(
            lambda session: ResolutionService(session).hover(
                text, language, line, character, environment=environment
            )
        )
    )
