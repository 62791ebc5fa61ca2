"""Command group: persisted settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from covctl.commands._base import CovGroup

if TYPE_CHECKING:
    from covctl.commands._context import AppContext


@click.group(
    cls=CovGroup,
    examples="""\
  covctl settings show
  covctl settings set filters "not slow"
  covctl settings set show_branch_coverage false
  covctl settings reset exclude_files
  covctl settings files
  covctl settings clear-test-settings""",
)
def settings() -> None:
    """View and change persisted coverage settings."""


@settings.command()
@click.pass_obj
def show(app: AppContext) -> None:
    """Show every setting and the available test runners."""
    app.emit(app.service.show())


@settings.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def set_cmd(app: AppContext, key: str, value: str) -> None:
    """Set KEY to VALUE and persist it."""
    app.emit(app.service.set_value(key, value))


@settings.command()
@click.argument("key")
@click.pass_obj
def reset(app: AppContext, key: str) -> None:
    """Restore KEY to its configured default."""
    app.emit(app.service.reset(key))


@settings.command()
@click.pass_obj
def files(app: AppContext) -> None:
    """List discoverable test settings files in the workspace."""
    app.emit(app.run(app.service.test_settings_files()))


@settings.command("clear-test-settings")
@click.pass_obj
def clear_test_settings(app: AppContext) -> None:
    """Clear the selected test settings file."""
    app.emit(app.service.clear_test_settings())
