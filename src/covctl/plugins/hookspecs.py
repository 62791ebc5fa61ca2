"""Pluggy hook specifications for covctl.

One setup-time hook lets plugins contribute test-runner backends; the
rest are lifecycle notifications dispatched through the EventBus.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from covctl.config.models import RunnerConfig
    from covctl.domain.contracts import TestRunner

hookspec = pluggy.HookspecMarker("covctl")


class CovctlHookSpec:
    """Hook specifications for the covctl plugin system."""

    @hookspec
    def register_test_runners(self, config: RunnerConfig) -> list[TestRunner] | None:
        """Return test-runner backends to add to the runner multiplexer."""

    @hookspec
    def post_setting_changed(self, key: str, value: Any) -> None:
        """Called after a persisted setting changes."""

    @hookspec
    def post_clean(self, project: str, bytes_freed: int) -> None:
        """Called after a project's output has been cleaned."""

    @hookspec
    def post_refresh(self, test_settings_files: list[str], projects: list[str]) -> None:
        """Called after a full refresh completes."""
