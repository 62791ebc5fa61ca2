"""Tests for CoverageSession wiring."""

from __future__ import annotations

from pathlib import Path

import pytest

from covctl.config.settings import CovSettings
from covctl.services.runtime import CoverageSession

_LOCAL_RUNNER_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("covctl")


class WardRunner:
    __test__ = False
    name = "ward"

    def run_tests(self, targets, *, filters="", settings_file=None):
        return 0


class WardPlugin:
    @hookimpl
    def register_test_runners(self, config):
        return [WardRunner()]
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("COVCTL_CONFIG", raising=False)


class TestCoverageSession:
    def test_builtin_runners(self, session: CoverageSession) -> None:
        assert session.runners.implementations == ("pytest", "unittest")
        assert (session.settings.state_dir / "covctl.db").is_file()

    def test_local_plugin_runner(self, workspace_root: Path) -> None:
        plugins = workspace_root / ".covctl" / "plugins"
        plugins.mkdir(parents=True)
        (plugins / "ward.py").write_text(_LOCAL_RUNNER_SRC)
        session = CoverageSession(CovSettings.from_cli(root=workspace_root, sync=True))
        try:
            assert session.runners.implementations == ("pytest", "unittest", "ward")
        finally:
            session.close()

    def test_builtins_can_be_disabled(self, workspace_root: Path) -> None:
        (workspace_root / "covctl.toml").write_text("[plugins]\nbuiltin_runners = false\n")
        session = CoverageSession(CovSettings.from_cli(root=workspace_root, sync=True))
        try:
            assert session.runners.implementations == ()
            assert session.coordinator.selected_test_runner is None
        finally:
            session.close()

    @pytest.mark.asyncio
    async def test_open_loads_hierarchy_then_refreshes(self, session: CoverageSession) -> None:
        session.open()
        solution = session.coordinator.test_solution
        assert solution is not None
        assert [p.name for p in solution.projects] == ["core"]
        await session.coordinator.wait_idle()
        assert solution.find_project("core").output.total_size == 100
        assert len(session.coordinator.test_settings_files) == 2
