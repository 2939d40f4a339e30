"""Click base classes with an ``--examples`` flag.

Commands declare ``examples`` as ``(invocation, summary)`` pairs. Passing
``--examples`` prints them as an aligned block and exits, keeping
``--help`` short while worked invocations stay one flag away.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeAlias

import click

Example: TypeAlias = tuple[str, str]


def format_examples(examples: Sequence[Example]) -> str:
    """Render example pairs, aligning the summaries into one column."""
    width = max(len(invocation) for invocation, _ in examples)
    lines = []
    for invocation, summary in examples:
        line = f"  {invocation.ljust(width)}"
        lines.append(f"{line}  # {summary}" if summary else line.rstrip())
    return "\n".join(lines)


class _ExamplesMixin:
    """Appends an eager ``--examples`` option to the command's parameters."""

    examples: Sequence[Example]

    def get_params(self, ctx: click.Context) -> list[click.Parameter]:
        params: list[click.Parameter] = super().get_params(ctx)  # type: ignore[misc]
        if not self.examples:
            return params
        return [*params, self._examples_option()]

    def _examples_option(self) -> click.Option:
        def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if not value or ctx.resilient_parsing:
                return
            click.echo(f"Examples for '{ctx.command_path}':\n")
            click.echo(format_examples(self.examples))
            ctx.exit(0)

        return click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show,
            help="Show usage examples.",
        )


class SvcmapCommand(_ExamplesMixin, click.Command):
    """Click Command accepting ``examples=[(invocation, summary), ...]``."""

    def __init__(self, *args: Any, examples: Sequence[Example] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples


class SvcmapGroup(_ExamplesMixin, click.Group):
    """Click Group whose subcommands default to :class:`SvcmapCommand`."""

    command_class = SvcmapCommand

    def __init__(self, *args: Any, examples: Sequence[Example] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
