"""Subcommand modules for covctl.

register_commands() imports command modules lazily so ``covctl --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root group."""
    # --- Groups ---
    from covctl.commands.output_cmd import output
    from covctl.commands.runner import runner
    from covctl.commands.settings_cmd import settings

    cli.add_command(settings)
    cli.add_command(runner)
    cli.add_command(output)

    # --- Standalone commands ---
    from covctl.commands.about import about
    from covctl.commands.navigate import navigate
    from covctl.commands.refresh import refresh

    cli.add_command(refresh)
    cli.add_command(navigate)
    cli.add_command(about)
