"""LocalOutputCleaner — measure and delete per-project artifact directories.

The directories are the configured ``[output] directories`` names relative
to each project root. File-system work runs in worker threads so the
event loop never blocks on a large tree.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path

from covctl.config.models import OutputConfig
from covctl.domain.errors import CollaboratorUnavailable
from covctl.domain.hierarchy import OutputDescriptor, OutputDirectory, TestProject

logger = logging.getLogger(__name__)


def measure_directory(path: Path) -> OutputDirectory:
    """Total size in bytes and file count of everything under *path*."""
    size = 0
    count = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            try:
                size += os.lstat(os.path.join(dirpath, filename)).st_size
            except OSError:
                continue
            count += 1
    return OutputDirectory(path=str(path), size=size, file_count=count)


class LocalOutputCleaner:
    """Output cleaner working on the local filesystem."""

    def __init__(self, config: OutputConfig | None = None) -> None:
        self._config = config or OutputConfig()

    def _scan(self, project_name: str, root: Path) -> OutputDescriptor:
        directories = tuple(
            measure_directory(root / name)
            for name in self._config.directories
            if (root / name).is_dir()
        )
        return OutputDescriptor(project=project_name, directories=directories)

    async def get_output_files(self, project: TestProject) -> OutputDescriptor:
        """Describe the artifact directories currently present for *project*."""
        if project.path is None:
            msg = f"Project {project.name!r} has no path"
            raise CollaboratorUnavailable(msg)
        return await asyncio.to_thread(self._scan, project.name, project.path)

    async def clean_output(self, target: OutputDescriptor) -> int:
        """Delete every directory in *target*. Returns bytes freed."""
        return await asyncio.to_thread(self._clean, target)

    def _clean(self, target: OutputDescriptor) -> int:
        freed = 0
        for directory in target.directories:
            path = Path(directory.path)
            if not path.is_dir():
                continue
            shutil.rmtree(path)
            freed += directory.size
            logger.debug("Removed %s (%d bytes)", path, directory.size)
        logger.info("Cleaned output for %s: %d bytes", target.project, freed)
        return freed
