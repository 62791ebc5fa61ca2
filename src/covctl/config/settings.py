"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``COVCTL_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``covctl.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

These are *startup* settings. User-editable values (exclusions, filters,
selected runner, ...) are seeded from here but live in the durable
settings store once written.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from covctl.config.discovery import find_config, resolve_root
from covctl.config.models import (
    CoverageConfig,
    DisplayConfig,
    OutputConfig,
    PluginsConfig,
    RunnerConfig,
    WorkspaceConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``covctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# pydantic-settings builds sources from a classmethod, so the TOML path
# discovered in from_cli() is handed over per thread.
_tls = threading.local()


class CovSettings(BaseSettings):
    """Frozen startup settings for one covctl invocation.

    Attributes:
        root: Workspace root (parent of ``covctl.toml``, or CWD).
        config_path: The TOML file in use, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "COVCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False

    # --- TOML sections ---
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @property
    def state_dir(self) -> Path:
        """``{root}/.covctl`` — database and local plugins."""
        return self.root / ".covctl"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> CovSettings:
        """Discover covctl.toml, resolve the root, and apply CLI flags."""
        toml_path: Path | None
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(root)

        _tls.toml_path = toml_path
        try:
            return cls(
                root=resolve_root(toml_path, root),
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
