"""Root CLI group for covctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from covctl import __version__
from covctl.commands import register_commands
from covctl.commands._context import AppContext
from covctl.config.settings import CovSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="covctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: directory of covctl.toml, else CWD).",
)
@click.option("--sync", is_flag=True, help="Dispatch plugin events synchronously.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    root: Path | None,
    sync: bool,
) -> None:
    """covctl — coverage tool settings and workspace coordination."""
    settings = CovSettings.from_cli(
        config_path=config_path,
        root=root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        sync=sync,
    )
    ctx.obj = AppContext(settings)
    ctx.call_on_close(ctx.obj.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
