"""SettingsCoordinator — the settings view-model of a coverage tool.

Composes the persisted :class:`PropertyStore`, the test-runner
multiplexer, and the derived list of discoverable test settings files,
and keeps them current as the workspace host reports lifecycle events.

Refresh protocol:

- Host ``build_finished`` / ``solution_opened`` -> :meth:`refresh`, which
  schedules the work on the running loop and returns at once. The host
  never waits on a refresh.
- A refresh re-derives the settings-file list and re-queries per-project
  output sizes. The two steps are independent and run concurrently.
- Per-project queries fan out over a snapshot of the project list taken
  before the first await. A failing project is reported on
  :attr:`project_query_failed` and never stops its siblings.
- Overlapping refreshes are not coalesced; the last write to each piece
  of state wins.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Any

from covctl.config.models import CoverageConfig, DisplayConfig, RunnerConfig, WorkspaceConfig
from covctl.domain.collections import ObservableEnumeration, compare_ignore_case
from covctl.domain.commands import DelegateCommand
from covctl.domain.errors import CollaboratorUnavailable, PerProjectQueryFailure, PersistenceError
from covctl.domain.hierarchy import OutputDescriptor, TestProject, TestSolution
from covctl.domain.manifest import PackageManifest, load_manifest
from covctl.domain.observable import ObservableObject, Signal
from covctl.domain.tasks import create_logged_task

if TYPE_CHECKING:
    from covctl.config.settings import CovSettings
    from covctl.domain.contracts import MultiplexerAdmin, OutputCleaner, WorkspaceHost
    from covctl.plugins.event_bus import EventBus
    from covctl.services.properties import PropertyStore

logger = logging.getLogger(__name__)

RUNNER_KEY = "selected_test_runner"

BOUND_SETTINGS = (
    "exclude_attributes",
    "exclude_files",
    "exclude_directories",
    "filters",
    "selected_test_settings",
    "show_line_coverage",
    "show_branch_coverage",
    "show_exceptions",
    "show_partial_coverage",
)


def default_values(settings: CovSettings | None = None) -> dict[str, Any]:
    """Defaults for every persisted coordinator setting, from configuration."""
    coverage = settings.coverage if settings else CoverageConfig()
    display = settings.display if settings else DisplayConfig()
    runner = settings.runner if settings else RunnerConfig()
    return {
        "exclude_attributes": coverage.exclude_attributes,
        "exclude_files": coverage.exclude_files,
        "exclude_directories": coverage.exclude_directories,
        "filters": coverage.filters,
        "selected_test_settings": coverage.test_settings,
        "show_line_coverage": display.show_line_coverage,
        "show_branch_coverage": display.show_branch_coverage,
        "show_exceptions": display.show_exceptions,
        "show_partial_coverage": display.show_partial_coverage,
        RUNNER_KEY: runner.default,
    }


class _BoundSetting:
    """Coordinator attribute read from and written to the property store."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.key = name

    def __get__(self, obj: SettingsCoordinator | None, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return obj.properties.get(self.key)

    def __set__(self, obj: SettingsCoordinator, value: Any) -> None:
        obj.properties.set(self.key, value)


class SettingsCoordinator(ObservableObject):
    """Observable settings state plus the commands that act on it.

    Parameters:
        host: Workspace host; None when running without an editor.
        output_cleaner: Measures and cleans project outputs; may be None.
        runners: Administrative face of the test-runner multiplexer.
        properties: Persisted settings. Missing keys are defined with
            code defaults.
        workspace: Workspace config (settings-file pattern).
        manifest: Package manifest; loaded from metadata when omitted.
        event_bus: Optional plugin event bus for lifecycle notifications.
    """

    exclude_attributes = _BoundSetting()
    exclude_files = _BoundSetting()
    exclude_directories = _BoundSetting()
    filters = _BoundSetting()
    selected_test_settings = _BoundSetting()
    show_line_coverage = _BoundSetting()
    show_branch_coverage = _BoundSetting()
    show_exceptions = _BoundSetting()
    show_partial_coverage = _BoundSetting()

    def __init__(
        self,
        host: WorkspaceHost | None,
        output_cleaner: OutputCleaner | None,
        runners: MultiplexerAdmin,
        properties: PropertyStore,
        *,
        workspace: WorkspaceConfig | None = None,
        manifest: PackageManifest | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        super().__init__()
        self._host = host
        self._output_cleaner = output_cleaner
        self._runners = runners
        self.properties = properties
        self._event_bus = event_bus
        self._manifest = manifest
        self._test_solution: TestSolution | None = None
        self._pending: set[asyncio.Task[Any]] = set()
        self.project_query_failed = Signal("project_query_failed")

        workspace = workspace or WorkspaceConfig()
        self._test_settings_pattern = re.compile(workspace.test_settings_pattern, re.IGNORECASE)

        defined = set(properties.keys())
        for key, default in default_values().items():
            if key not in defined:
                properties.define(key, default)
        for key in (*BOUND_SETTINGS, RUNNER_KEY):
            properties.subscribe(key, self._on_setting_changed)

        self._restore_runner()
        runners.changed.connect(self._on_runner_changed)

        self._test_settings_files = ObservableEnumeration(
            self._find_test_settings_files, compare_ignore_case
        )
        self._test_settings_files.changed.connect(self._on_test_settings_files_changed)

        self.clean_test_output_command = DelegateCommand(
            self.clean_output,
            self._can_clean,
            name="clean_test_output",
            pending=self._pending,
        )
        self.clear_test_settings_command = DelegateCommand(
            self.clear_test_settings,
            lambda _: self.selected_test_settings is not None,
            source=self,
            triggers=("selected_test_settings",),
            name="clear_test_settings",
        )
        self.open_path_command = DelegateCommand(
            self.open_path,
            lambda path: self._host is not None and bool(path),
            name="open_path",
        )
        self.navigate_to_file_command = DelegateCommand(
            self.navigate_to_file,
            lambda path: self._host is not None and bool(path),
            name="navigate_to_file",
        )
        self.open_web_site_command = DelegateCommand(
            self.open_web_site,
            lambda _: self._host is not None,
            name="open_web_site",
        )
        self.refresh_command = DelegateCommand(lambda _: self.refresh(), name="refresh")

        if host is not None:
            host.build_finished.connect(self._on_host_event)
            host.solution_opened.connect(self._on_host_event)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def manifest(self) -> PackageManifest:
        if self._manifest is None:
            self._manifest = load_manifest()
        return self._manifest

    @property
    def test_solution(self) -> TestSolution | None:
        return self._test_solution

    @test_solution.setter
    def test_solution(self, value: TestSolution | None) -> None:
        self._test_solution = value
        self.notify_property_changed("test_solution")

    @property
    def test_settings_files(self) -> ObservableEnumeration[str]:
        return self._test_settings_files

    @property
    def test_runners(self) -> tuple[str, ...]:
        return self._runners.implementations

    @property
    def selected_test_runner(self) -> str | None:
        return self._runners.active_name

    @selected_test_runner.setter
    def selected_test_runner(self, name: str) -> None:
        """Switch backends, then persist the choice.

        Unknown names raise UnknownImplementationError before anything
        changes. If persisting fails the previous backend is re-selected.
        """
        previous = self._runners.active_name
        self._runners.set_active(name)
        try:
            self.properties.set(RUNNER_KEY, name)
        except PersistenceError:
            if previous is not None:
                self._runners.set_active(previous)
            raise

    def snapshot(self) -> dict[str, Any]:
        """Current value of every bound property, for display."""
        data: dict[str, Any] = {key: self.properties.get(key) for key in BOUND_SETTINGS}
        data[RUNNER_KEY] = self.selected_test_runner
        return data

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def clear_test_settings(self, _parameter: Any = None) -> None:
        self.selected_test_settings = None

    def open_path(self, path: str) -> None:
        self._require_host().open_path_in_explorer(str(path))

    def navigate_to_file(self, path: str) -> None:
        self._require_host().navigate_to_file(str(path))

    def open_web_site(self, _parameter: Any = None) -> None:
        self._require_host().open_url(self.manifest.website)

    async def clean_output(self, target: OutputDescriptor) -> int:
        """Clean *target*, then refresh sizes so they reflect the clean.

        The size refresh starts only after the cleaner acknowledges, and
        this coroutine completes only after the refresh does.
        """
        if self._output_cleaner is None:
            msg = "No output cleaner is configured"
            raise CollaboratorUnavailable(msg)
        freed = await self._output_cleaner.clean_output(target)
        self._dispatch_event("post_clean", {"project": target.project, "bytes_freed": freed})
        await self.refresh_project_sizes()
        return freed

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh(self) -> asyncio.Task[list[PerProjectQueryFailure]]:
        """Schedule a full refresh in the background and return its task.

        Raises RuntimeError when no event loop is running.
        """
        asyncio.get_running_loop()
        return create_logged_task(self.refresh_all(), context="refresh", pending=self._pending)

    async def refresh_all(self) -> list[PerProjectQueryFailure]:
        """Re-derive settings files and project sizes concurrently."""
        files, failures = await asyncio.gather(
            self.refresh_test_settings_files(),
            self.refresh_project_sizes(),
        )
        projects = [p.name for p in self._test_solution.projects] if self._test_solution else []
        self._dispatch_event(
            "post_refresh",
            {"test_settings_files": list(files), "projects": projects},
        )
        return failures

    async def refresh_test_settings_files(self) -> tuple[str, ...]:
        return await self._test_settings_files.refresh_async()

    async def refresh_project_sizes(self) -> list[PerProjectQueryFailure]:
        """Query every project's output and store it on the project.

        No-op without a loaded solution or an output cleaner. Returns the
        failures; never raises for a single project's failure.
        """
        solution = self._test_solution
        cleaner = self._output_cleaner
        if solution is None or cleaner is None:
            logger.debug("Skipping project size refresh: no solution or cleaner")
            return []

        projects = [child for child in tuple(solution.children) if isinstance(child, TestProject)]
        results = await asyncio.gather(*(self._refresh_project(cleaner, p) for p in projects))
        return [failure for failure in results if failure is not None]

    async def _refresh_project(
        self, cleaner: OutputCleaner, project: TestProject
    ) -> PerProjectQueryFailure | None:
        try:
            output = await cleaner.get_output_files(project)
        except Exception as exc:
            failure = PerProjectQueryFailure(project.name, exc)
            logger.warning("%s", failure)
            self.project_query_failed.emit(failure)
            return failure
        project.output = output
        return None

    async def wait_idle(self) -> None:
        """Wait until every background refresh and command task is done."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """Detach from the host and the stores this coordinator observes."""
        if self._host is not None:
            self._host.build_finished.disconnect(self._on_host_event)
            self._host.solution_opened.disconnect(self._on_host_event)
        self._runners.changed.disconnect(self._on_runner_changed)
        for key in (*BOUND_SETTINGS, RUNNER_KEY):
            self.properties.unsubscribe(key, self._on_setting_changed)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _find_test_settings_files(self) -> list[str]:
        if self._host is None or self._host.solution is None:
            return []
        return self._host.find_files(self._test_settings_pattern)

    def _can_clean(self, target: Any) -> bool:
        return isinstance(target, OutputDescriptor) and self._output_cleaner is not None

    def _require_host(self) -> WorkspaceHost:
        if self._host is None:
            msg = "No workspace host is available"
            raise CollaboratorUnavailable(msg)
        return self._host

    def _restore_runner(self) -> None:
        wanted = self.properties.get(RUNNER_KEY)
        if wanted in self._runners.implementations:
            self._runners.set_active(wanted)
        elif wanted is not None:
            logger.warning(
                "Configured test runner %r is not registered; using %r",
                wanted,
                self._runners.active_name,
            )

    def _on_host_event(self, *_args: Any) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Host event outside an event loop; refresh skipped")
            return
        self.refresh()

    def _on_setting_changed(self, key: str, value: Any) -> None:
        if key != RUNNER_KEY:
            self.notify_property_changed(key)
        self._dispatch_event("post_setting_changed", {"key": key, "value": value})

    def _on_runner_changed(self, _name: str) -> None:
        self.notify_property_changed(RUNNER_KEY)

    def _on_test_settings_files_changed(self, _items: tuple[str, ...]) -> None:
        self.notify_property_changed("test_settings_files")

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Notify plugins. No-op without an event bus; failures only warn."""
        if self._event_bus is None:
            return
        try:
            self._event_bus.dispatch(hook_name, payload)
        except Exception:
            logger.warning("Event dispatch failed for %s", hook_name, exc_info=True)
