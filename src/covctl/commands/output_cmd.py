"""Command group: per-project build/test output."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from covctl.commands._base import CovGroup

if TYPE_CHECKING:
    from covctl.commands._context import AppContext


@click.group(
    cls=CovGroup,
    examples="""\
  covctl output sizes
  covctl output clean mypkg
  covctl output open build""",
)
def output() -> None:
    """Inspect and clean project output directories."""


@output.command()
@click.pass_obj
def sizes(app: AppContext) -> None:
    """Show output size per project."""
    app.emit(app.run(app.service.output_sizes()))


@output.command()
@click.argument("project")
@click.pass_obj
def clean(app: AppContext, project: str) -> None:
    """Delete PROJECT's output directories, then re-measure."""
    app.emit(app.run(app.service.clean(project)))


@output.command("open")
@click.argument("path")
@click.pass_obj
def open_cmd(app: AppContext, path: str) -> None:
    """Reveal PATH in the system file manager."""
    app.emit(app.service.open_path(path))
