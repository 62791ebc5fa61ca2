"""Command group: test-runner backend selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from covctl.commands._base import CovGroup

if TYPE_CHECKING:
    from covctl.commands._context import AppContext


@click.group(
    cls=CovGroup,
    examples="""\
  covctl runner list
  covctl runner use unittest""",
)
def runner() -> None:
    """List and switch test-runner backends."""


@runner.command("list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List registered runners; the active one is marked."""
    app.emit(app.service.list_runners())


@runner.command()
@click.argument("name")
@click.pass_obj
def use(app: AppContext, name: str) -> None:
    """Make NAME the active runner."""
    app.emit(app.service.use_runner(name))
