"""Locate covctl.toml for the current workspace.

Resolution order: ``COVCTL_CONFIG`` env var, then a walk up from the start
directory (the way git finds ``.git/``). The directory holding the file is
the workspace root.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "covctl.toml"
CONFIG_ENV_VAR = "COVCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest covctl.toml at or above *start*, or None.

    An explicit ``COVCTL_CONFIG`` disables the walk-up; if it points at a
    missing file no config is used.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        candidate = Path(override)
        return candidate if candidate.is_file() else None

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_root(config_path: Path | None, explicit_root: Path | None = None) -> Path:
    """Workspace root: explicit flag, else the config's directory, else cwd."""
    if explicit_root is not None:
        return explicit_root
    if config_path is not None:
        return config_path.parent
    return Path.cwd()
