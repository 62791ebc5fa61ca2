"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, covctl.toml only contains
overrides. The values here seed the defaults of the persisted settings;
once a user writes a setting, the stored value wins.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- covctl.toml sections ---


class CoverageConfig(BaseModel):
    """[coverage] section — instrumentation exclusions and test filters."""

    model_config = {"frozen": True}

    exclude_attributes: str = "*ExcludeFromCodeCoverage*"
    exclude_files: str = ""
    exclude_directories: str = ""
    filters: str = ""
    test_settings: str | None = None


class DisplayConfig(BaseModel):
    """[display] section — editor coverage adornments."""

    model_config = {"frozen": True}

    show_line_coverage: bool = True
    show_branch_coverage: bool = True
    show_exceptions: bool = True
    show_partial_coverage: bool = True


class RunnerConfig(BaseModel):
    """[runner] section."""

    model_config = {"frozen": True}

    default: str = "pytest"
    python: str | None = None


class WorkspaceConfig(BaseModel):
    """[workspace] section."""

    model_config = {"frozen": True}

    test_settings_pattern: str = r"^.*\.testsettings$"
    project_markers: tuple[str, ...] = ("pyproject.toml", "setup.py", "setup.cfg")
    skip_dirs: tuple[str, ...] = (".covctl", ".git", ".venv", "node_modules", "__pycache__")


class OutputConfig(BaseModel):
    """[output] section — artifact directories measured and cleaned per project."""

    model_config = {"frozen": True}

    directories: tuple[str, ...] = (
        "build",
        "dist",
        "htmlcov",
        ".pytest_cache",
        ".coverage_reports",
    )


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    builtin_runners: bool = True
    local_dir: str = ".covctl/plugins"


class CovConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
