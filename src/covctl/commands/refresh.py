"""Command: re-derive test settings files and output sizes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from covctl.commands._base import CovCommand

if TYPE_CHECKING:
    from covctl.commands._context import AppContext


@click.command(cls=CovCommand, examples="  covctl refresh\n  covctl --json refresh")
@click.pass_obj
def refresh(app: AppContext) -> None:
    """Refresh test settings files and project output sizes."""
    app.emit(app.run(app.service.refresh()))
