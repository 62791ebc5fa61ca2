"""AppContext — shared Click context for all commands.

Created once by the root group. The CoverageSession (database, plugins,
coordinator) is built on first use so ``--help`` and ``--version`` never
touch the workspace state.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

import click

from covctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from covctl.config.settings import CovSettings
    from covctl.services.result import ServiceResult
    from covctl.services.runtime import CoverageSession
    from covctl.services.settings import SettingsService


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: CovSettings) -> None:
        self.settings = settings
        self._session: CoverageSession | None = None

        from covctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def session(self) -> CoverageSession:
        """The coverage session (created lazily on first access)."""
        if self._session is None:
            from covctl.services.runtime import CoverageSession

            self._session = CoverageSession(self.settings)
        return self._session

    @property
    def service(self) -> SettingsService:
        from covctl.services.settings import SettingsService

        return SettingsService(self.session)

    def run(self, coro: Coroutine[Any, Any, ServiceResult]) -> ServiceResult:
        """Drive an async service call to completion."""
        return asyncio.run(coro)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr outside JSON mode.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
