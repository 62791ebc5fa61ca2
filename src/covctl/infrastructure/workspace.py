"""LocalWorkspace — a workspace host over a directory tree.

Stands in for an editor: it knows the open "solution" (a directory),
enumerates files under it, raises build/open lifecycle signals, and hands
paths and URLs to the desktop via ``click.launch``.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

import click

from covctl.config.models import WorkspaceConfig
from covctl.domain.hierarchy import TestProject, TestSolution
from covctl.domain.observable import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalSolution:
    """An opened workspace directory."""

    root: Path

    @property
    def name(self) -> str:
        return self.root.name


class LocalWorkspace:
    """Workspace host backed by the local filesystem.

    Signals:
        solution_opened: emitted with the :class:`LocalSolution`.
        solution_closed: emitted with no arguments.
        build_finished: emitted with the solution and a success flag.
    """

    def __init__(self, config: WorkspaceConfig | None = None) -> None:
        self._config = config or WorkspaceConfig()
        self._solution: LocalSolution | None = None
        self.solution_opened = Signal("solution_opened")
        self.solution_closed = Signal("solution_closed")
        self.build_finished = Signal("build_finished")

    @property
    def solution(self) -> LocalSolution | None:
        return self._solution

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open_solution(self, root: Path) -> LocalSolution:
        resolved = root.resolve()
        if not resolved.is_dir():
            msg = f"Not a directory: {root}"
            raise NotADirectoryError(msg)
        self._solution = LocalSolution(resolved)
        logger.debug("Opened solution %s", resolved)
        self.solution_opened.emit(self._solution)
        return self._solution

    def close_solution(self) -> None:
        if self._solution is None:
            return
        self._solution = None
        self.solution_closed.emit()

    def notify_build_finished(self, *, succeeded: bool = True) -> None:
        self.build_finished.emit(self._solution, succeeded)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def find_files(self, pattern: str | re.Pattern[str]) -> list[str]:
        """Paths under the solution root whose file name matches *pattern*.

        String patterns are compiled case-insensitively. Returns an empty
        list when no solution is open.
        """
        if self._solution is None:
            return []
        regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, re.IGNORECASE)
        skip = set(self._config.skip_dirs)

        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self._solution.root):
            dirnames[:] = [d for d in dirnames if d not in skip]
            found.extend(
                os.path.join(dirpath, filename) for filename in filenames if regex.match(filename)
            )
        return found

    def load_test_hierarchy(self) -> TestSolution | None:
        """Build the solution -> project tree for the open solution.

        A project is the root itself or any first-level directory holding
        one of the configured project marker files.
        """
        if self._solution is None:
            return None
        root = self._solution.root
        tree = TestSolution(self._solution.name, root)

        candidates = [root]
        skip = set(self._config.skip_dirs)
        candidates += sorted(
            p
            for p in root.iterdir()
            if p.is_dir() and p.name not in skip and not p.name.startswith(".")
        )
        for directory in candidates:
            if any((directory / marker).is_file() for marker in self._config.project_markers):
                tree.add_child(TestProject(directory.name, directory))
        return tree

    # ------------------------------------------------------------------
    # Desktop hand-off
    # ------------------------------------------------------------------

    def open_path_in_explorer(self, path: str) -> None:
        click.launch(path, locate=True)

    def navigate_to_file(self, path: str) -> None:
        click.launch(path)

    def open_url(self, url: str) -> None:
        click.launch(url)
