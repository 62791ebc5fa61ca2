"""SettingsService — CLI-facing operations over a CoverageSession.

Each method returns a :class:`ServiceResult`. Coroutine methods open the
workspace inside the running loop, which fires ``solution_opened`` and
therefore the coordinator's own event-driven refresh; they wait for the
coordinator to go idle before reading state.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from covctl.domain.errors import (
    CovctlError,
    PerProjectQueryFailure,
    PersistenceError,
    UnknownImplementationError,
)
from covctl.services.coordinator import BOUND_SETTINGS, RUNNER_KEY
from covctl.services.result import ServiceResult

if TYPE_CHECKING:
    from covctl.domain.hierarchy import TestProject
    from covctl.services.runtime import CoverageSession

logger = logging.getLogger(__name__)

_NONE_WORDS = frozenset({"", "none", "null"})


def _project_row(project: TestProject) -> dict[str, Any]:
    output = project.output
    return {
        "project": project.name,
        "path": str(project.path) if project.path else None,
        "total_size": output.total_size if output else None,
        "file_count": output.file_count if output else None,
        "directories": [d.path for d in output.directories] if output else [],
    }


class SettingsService:
    """Settings, runner, and output operations for the CLI."""

    def __init__(self, session: CoverageSession) -> None:
        self._session = session
        self._coordinator = session.coordinator

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def show(self) -> ServiceResult:
        return ServiceResult.success(
            "show_settings",
            {
                "root": str(self._session.settings.root),
                "settings": self._coordinator.snapshot(),
                "test_runners": list(self._coordinator.test_runners),
            },
        )

    def set_value(self, key: str, raw: str) -> ServiceResult:
        """Coerce *raw* to the setting's type and write it."""
        op = "set_setting"
        if key == RUNNER_KEY:
            return self.use_runner(raw, op=op)
        if key not in BOUND_SETTINGS:
            return ServiceResult.failure(
                op, "UNKNOWN_SETTING", f"Unknown setting: {key!r}", available=list(BOUND_SETTINGS)
            )

        default = self._coordinator.properties.setting(key).default
        try:
            value = self._coerce(key, default, raw)
        except ValidationError as exc:
            return ServiceResult.failure(
                op,
                "INVALID_VALUE",
                f"Invalid value for {key}: {raw!r}",
                errors=exc.errors(include_url=False),
            )

        try:
            setattr(self._coordinator, key, value)
        except PersistenceError as exc:
            return ServiceResult.from_exception(op, exc)
        return ServiceResult.success(op, {"key": key, "value": value})

    def reset(self, key: str) -> ServiceResult:
        op = "reset_setting"
        if key not in (*BOUND_SETTINGS, RUNNER_KEY):
            return ServiceResult.failure(op, "UNKNOWN_SETTING", f"Unknown setting: {key!r}")
        default = self._coordinator.properties.setting(key).default
        if key == RUNNER_KEY:
            return self.use_runner(default, op=op)
        try:
            self._coordinator.properties.reset(key)
        except PersistenceError as exc:
            return ServiceResult.from_exception(op, exc)
        return ServiceResult.success(op, {"key": key, "value": default})

    def clear_test_settings(self) -> ServiceResult:
        op = "clear_test_settings"
        command = self._coordinator.clear_test_settings_command
        if not command.can_execute():
            return ServiceResult.success(
                op, {"cleared": False}, ["No test settings file is selected"]
            )
        try:
            command.execute()
        except PersistenceError as exc:
            return ServiceResult.from_exception(op, exc)
        return ServiceResult.success(op, {"cleared": True})

    @staticmethod
    def _coerce(key: str, default: Any, raw: str) -> Any:
        if key == "selected_test_settings":
            return None if raw.strip().lower() in _NONE_WORDS else raw
        if isinstance(default, bool):
            return TypeAdapter(bool).validate_python(raw)
        return TypeAdapter(type(default)).validate_python(raw)

    # ------------------------------------------------------------------
    # Runners
    # ------------------------------------------------------------------

    def list_runners(self) -> ServiceResult:
        active = self._coordinator.selected_test_runner
        items = [
            {"name": name, "active": name == active} for name in self._coordinator.test_runners
        ]
        return ServiceResult.success(
            "list_runners", {"count": len(items), "items": items, "active": active}
        )

    def use_runner(self, name: str, *, op: str = "use_runner") -> ServiceResult:
        try:
            self._coordinator.selected_test_runner = name
        except (UnknownImplementationError, PersistenceError) as exc:
            return ServiceResult.from_exception(op, exc)
        return ServiceResult.success(op, {"key": RUNNER_KEY, "value": name})

    # ------------------------------------------------------------------
    # Workspace-backed operations
    # ------------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def _opened(self) -> AsyncIterator[list[PerProjectQueryFailure]]:
        """Open the workspace and collect project query failures until exit."""
        failures: list[PerProjectQueryFailure] = []
        signal = self._coordinator.project_query_failed
        signal.connect(failures.append)
        try:
            self._session.open()
            await self._coordinator.wait_idle()
            yield failures
        finally:
            signal.disconnect(failures.append)

    async def test_settings_files(self) -> ServiceResult:
        async with self._opened():
            items = list(self._coordinator.test_settings_files)
        return ServiceResult.success(
            "test_settings_files",
            {
                "count": len(items),
                "items": items,
                "selected": self._coordinator.selected_test_settings,
            },
        )

    async def output_sizes(self) -> ServiceResult:
        async with self._opened() as failures:
            solution = self._coordinator.test_solution
            items = [_project_row(p) for p in solution.projects] if solution else []
        return ServiceResult.success(
            "output_sizes",
            {"count": len(items), "items": items},
            [str(f) for f in failures],
        )

    async def refresh(self) -> ServiceResult:
        """Explicit refresh on top of the one opening the workspace triggers."""
        async with self._opened() as failures:
            failures.clear()
            self._coordinator.refresh_command.execute()
            await self._coordinator.wait_idle()
        solution = self._coordinator.test_solution
        return ServiceResult.success(
            "refresh",
            {
                "test_settings_files": list(self._coordinator.test_settings_files),
                "projects": [_project_row(p) for p in solution.projects] if solution else [],
            },
            [str(f) for f in failures],
        )

    async def clean(self, project_name: str) -> ServiceResult:
        op = "clean_output"
        async with self._opened() as failures:
            solution = self._coordinator.test_solution
            project = solution.find_project(project_name) if solution else None
            if project is None:
                msg = f"No project named {project_name!r}"
                return ServiceResult.failure(op, "NOT_FOUND", msg)
            if project.output is None:
                msg = f"No output information for {project_name!r}"
                return ServiceResult.failure(op, "NOT_FOUND", msg)

            command = self._coordinator.clean_test_output_command
            try:
                freed = await command.execute_async(project.output)
            except (CovctlError, OSError) as exc:
                code = exc.code if isinstance(exc, CovctlError) else "CLEAN_FAILED"
                return ServiceResult.failure(op, code, str(exc))
        return ServiceResult.success(
            op,
            {"bytes_freed": freed, **_project_row(project)},
            [str(f) for f in failures],
        )

    # ------------------------------------------------------------------
    # Host hand-off
    # ------------------------------------------------------------------

    def open_path(self, path: str) -> ServiceResult:
        self._coordinator.open_path_command.execute(path)
        return ServiceResult.success("open_path", {"path": path})

    def navigate(self, path: str) -> ServiceResult:
        self._coordinator.navigate_to_file_command.execute(path)
        return ServiceResult.success("navigate", {"path": path})

    def open_web_site(self) -> ServiceResult:
        self._coordinator.open_web_site_command.execute()
        return ServiceResult.success("open_web_site", {"url": self._coordinator.manifest.website})

    def about(self, *, license_text: bool = False, release_notes: bool = False) -> ServiceResult:
        manifest = self._coordinator.manifest
        data: dict[str, Any] = {
            "name": manifest.name,
            "version": manifest.version,
            "website": manifest.website,
        }
        if license_text:
            data["license"] = manifest.license
        if release_notes:
            data["release_notes"] = manifest.release_notes
        return ServiceResult.success("about", data)
