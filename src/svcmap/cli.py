"""Root CLI group for svcmap: global output flags, config, and command registration."""

from __future__ import annotations

import click

from svcmap import __version__
from svcmap.commands import register_commands
from svcmap.commands._context import AppContext
from svcmap.config.settings import SvcmapSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="svcmap")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Print service or operation names only.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and a timing tree per command.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Use this config file.")
@click.option(
    "--proxy",
    default=None,
    metavar="URL",
    help="Proxy prefixed to every provider URL; '' calls the provider directly.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    proxy: str | None,
) -> None:
    """svcmap — map traced operations to Datadog services and their dependencies.

    Credentials come from SVCMAP_DATADOG__API_KEY and
    SVCMAP_DATADOG__APPLICATION_KEY, or the [datadog] table of svcmap.toml.
    """
    ctx.obj = AppContext(
        SvcmapSettings.from_cli(
            config_path=config_path,
            proxy=proxy,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
