"""Tests for CovSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from covctl.config.settings import CovSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("COVCTL_CONFIG", "COVCTL_ROOT", "COVCTL_RUNNER__DEFAULT"):
        monkeypatch.delenv(name, raising=False)


class TestCovSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = CovSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.runner.default == "pytest"
        assert settings.coverage.exclude_attributes == "*ExcludeFromCodeCoverage*"
        assert settings.display.show_line_coverage is True
        assert settings.state_dir == tmp_path / ".covctl"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = CovSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]

    def test_cli_flags(self, tmp_path: Path) -> None:
        settings = CovSettings.from_cli(root=tmp_path, json_output=True, sync=True)
        assert settings.json_output is True
        assert settings.sync is True


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "covctl.toml").write_text(
            '[runner]\ndefault = "unittest"\n[coverage]\nfilters = "not slow"\n'
        )
        settings = CovSettings.from_cli(root=tmp_path)
        assert settings.runner.default == "unittest"
        assert settings.coverage.filters == "not slow"
        assert settings.display.show_exceptions is True

    def test_root_follows_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "covctl.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = CovSettings.from_cli()
        assert settings.root == tmp_path.resolve()
        assert settings.config_path == tmp_path.resolve() / "covctl.toml"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[workspace]\ntest_settings_pattern = "^.*\\\\.ini$"\n')
        settings = CovSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.workspace.test_settings_pattern == r"^.*\.ini$"
        assert settings.config_path == custom
        assert settings.root == tmp_path

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "covctl.toml").write_text("[runner\n")
        with pytest.raises(click.ClickException):
            CovSettings.from_cli(root=tmp_path)


class TestEnvOverrides:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "covctl.toml").write_text('[runner]\ndefault = "unittest"\n')
        monkeypatch.setenv("COVCTL_RUNNER__DEFAULT", "nose")
        settings = CovSettings.from_cli(root=tmp_path)
        assert settings.runner.default == "nose"

    def test_cli_beats_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVCTL_QUIET", "true")
        settings = CovSettings.from_cli(root=tmp_path, quiet=False)
        assert settings.quiet is False
