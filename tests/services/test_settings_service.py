"""Tests for SettingsService over a real CoverageSession."""

from __future__ import annotations

from pathlib import Path

import pytest

from covctl.services.coordinator import RUNNER_KEY
from covctl.services.runtime import CoverageSession
from covctl.services.settings import SettingsService


class TestSettingsOperations:
    def test_show(self, session: CoverageSession) -> None:
        result = SettingsService(session).show()
        assert result.ok
        assert result.data["settings"][RUNNER_KEY] == "pytest"
        assert result.data["test_runners"] == ["pytest", "unittest"]

    def test_set_string(self, session: CoverageSession) -> None:
        result = SettingsService(session).set_value("filters", "not slow")
        assert result.ok
        assert session.coordinator.filters == "not slow"
        assert session.store.read("filters") == "not slow"

    def test_set_bool_coerces(self, session: CoverageSession) -> None:
        result = SettingsService(session).set_value("show_branch_coverage", "false")
        assert result.ok
        assert result.data["value"] is False
        assert session.coordinator.show_branch_coverage is False

    def test_set_bool_rejects_garbage(self, session: CoverageSession) -> None:
        result = SettingsService(session).set_value("show_exceptions", "perhaps")
        assert not result.ok
        assert result.error.code == "INVALID_VALUE"
        assert session.coordinator.show_exceptions is True

    def test_set_unknown_key(self, session: CoverageSession) -> None:
        result = SettingsService(session).set_value("colour", "red")
        assert not result.ok
        assert result.error.code == "UNKNOWN_SETTING"

    def test_set_test_settings_none_word(self, session: CoverageSession) -> None:
        service = SettingsService(session)
        service.set_value("selected_test_settings", "ci.testsettings")
        assert session.coordinator.selected_test_settings == "ci.testsettings"
        service.set_value("selected_test_settings", "none")
        assert session.coordinator.selected_test_settings is None

    def test_set_runner_key_routes_to_multiplexer(self, session: CoverageSession) -> None:
        result = SettingsService(session).set_value(RUNNER_KEY, "unittest")
        assert result.ok
        assert result.op == "set_setting"
        assert session.runners.active_name == "unittest"

    def test_reset(self, session: CoverageSession) -> None:
        service = SettingsService(session)
        service.set_value("exclude_files", "*_pb2.py")
        result = service.reset("exclude_files")
        assert result.ok
        assert session.coordinator.exclude_files == ""

    def test_reset_runner(self, session: CoverageSession) -> None:
        service = SettingsService(session)
        service.use_runner("unittest")
        assert service.reset(RUNNER_KEY).ok
        assert session.coordinator.selected_test_runner == "pytest"

    def test_clear_test_settings(self, session: CoverageSession) -> None:
        service = SettingsService(session)
        first = service.clear_test_settings()
        assert first.ok
        assert first.data == {"cleared": False}
        assert first.warnings
        service.set_value("selected_test_settings", "ci.testsettings")
        assert service.clear_test_settings().data == {"cleared": True}
        assert session.coordinator.selected_test_settings is None

    def test_settings_survive_a_new_session(
        self, session: CoverageSession, workspace_root: Path
    ) -> None:
        SettingsService(session).set_value("filters", "smoke")
        SettingsService(session).use_runner("unittest")
        fresh = CoverageSession(session.settings)
        try:
            assert fresh.coordinator.filters == "smoke"
            assert fresh.coordinator.selected_test_runner == "unittest"
        finally:
            fresh.close()


class TestRunnerOperations:
    def test_list(self, session: CoverageSession) -> None:
        result = SettingsService(session).list_runners()
        assert result.data["count"] == 2
        assert result.data["active"] == "pytest"
        assert result.data["items"][0] == {"name": "pytest", "active": True}

    def test_use_unknown(self, session: CoverageSession) -> None:
        result = SettingsService(session).use_runner("nose")
        assert not result.ok
        assert result.error.code == "UNKNOWN_RUNNER"
        assert session.coordinator.selected_test_runner == "pytest"


class TestWorkspaceOperations:
    @pytest.mark.asyncio
    async def test_settings_files(self, session: CoverageSession) -> None:
        result = await SettingsService(session).test_settings_files()
        assert result.ok
        names = [Path(p).name for p in result.data["items"]]
        assert names == ["ci.testsettings", "Local.TestSettings"]

    @pytest.mark.asyncio
    async def test_output_sizes(self, session: CoverageSession) -> None:
        result = await SettingsService(session).output_sizes()
        assert result.ok
        [row] = result.data["items"]
        assert row["project"] == "core"
        assert row["total_size"] == 100
        assert row["file_count"] == 1

    @pytest.mark.asyncio
    async def test_refresh(self, session: CoverageSession) -> None:
        result = await SettingsService(session).refresh()
        assert result.ok
        assert len(result.data["test_settings_files"]) == 2
        assert result.data["projects"][0]["total_size"] == 100

    @pytest.mark.asyncio
    async def test_clean(self, session: CoverageSession, workspace_root: Path) -> None:
        result = await SettingsService(session).clean("core")
        assert result.ok
        assert result.data["bytes_freed"] == 100
        assert result.data["total_size"] == 0
        assert not (workspace_root / "core" / "build").exists()

    @pytest.mark.asyncio
    async def test_failure_listener_released_after_each_operation(
        self, session: CoverageSession
    ) -> None:
        signal = session.coordinator.project_query_failed
        before = len(signal)
        service = SettingsService(session)
        await service.output_sizes()
        await service.refresh()
        await service.clean("nope")
        assert len(signal) == before

    @pytest.mark.asyncio
    async def test_clean_unknown_project(self, session: CoverageSession) -> None:
        result = await SettingsService(session).clean("nope")
        assert not result.ok
        assert result.error.code == "NOT_FOUND"


class TestAbout:
    def test_about(self, session: CoverageSession) -> None:
        result = SettingsService(session).about(license_text=True)
        assert result.ok
        assert result.data["name"] == "covctl"
        assert "license" in result.data
        assert "release_notes" not in result.data

    def test_open_web_site(
        self, session: CoverageSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        launched: list[str] = []
        monkeypatch.setattr("click.launch", lambda url, **kw: launched.append(url))
        result = SettingsService(session).open_web_site()
        assert result.ok
        assert launched == [result.data["url"]]
