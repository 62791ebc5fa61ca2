"""Command: package information."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from covctl.commands._base import CovCommand

if TYPE_CHECKING:
    from covctl.commands._context import AppContext


@click.command(
    cls=CovCommand,
    examples="""\
  covctl about
  covctl about --license
  covctl about --website""",
)
@click.option("--license", "license_text", is_flag=True, help="Include the license text.")
@click.option("--release-notes", is_flag=True, help="Include the release notes.")
@click.option("--website", is_flag=True, help="Open the project website.")
@click.pass_obj
def about(app: AppContext, license_text: bool, release_notes: bool, website: bool) -> None:
    """Show name, version, and website."""
    if website:
        app.emit(app.service.open_web_site())
        return
    app.emit(app.service.about(license_text=license_text, release_notes=release_notes))
