"""Command: open a file in the default editor."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from covctl.commands._base import CovCommand

if TYPE_CHECKING:
    from covctl.commands._context import AppContext


@click.command(cls=CovCommand, examples="  covctl navigate tests/unit.testsettings")
@click.argument("path")
@click.pass_obj
def navigate(app: AppContext, path: str) -> None:
    """Open PATH with its associated application."""
    app.emit(app.service.navigate(path))
