"""Collaborator interfaces consumed by the coordination layer.

Structural (``Protocol``) so hosts, cleaners, and runners from plugins
need not inherit from anything covctl ships.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from covctl.domain.hierarchy import OutputDescriptor, TestProject
    from covctl.domain.observable import Signal


class Solution(Protocol):
    """The workspace currently open in the host."""

    @property
    def name(self) -> str: ...

    @property
    def root(self) -> Path: ...


class WorkspaceHost(Protocol):
    """Editor/workspace host: file enumeration, lifecycle events, navigation."""

    build_finished: Signal
    solution_opened: Signal

    @property
    def solution(self) -> Solution | None: ...

    def find_files(self, pattern: str | re.Pattern[str]) -> list[str]: ...

    def open_path_in_explorer(self, path: str) -> None: ...

    def navigate_to_file(self, path: str) -> None: ...

    def open_url(self, url: str) -> None: ...


class OutputCleaner(Protocol):
    """Measures and deletes per-project build/test artifacts."""

    async def clean_output(self, target: OutputDescriptor) -> int: ...

    async def get_output_files(self, project: TestProject) -> OutputDescriptor: ...


@runtime_checkable
class TestRunner(Protocol):
    """Test execution capability. How tests run is up to the backend."""

    @property
    def name(self) -> str: ...

    def run_tests(
        self,
        targets: Sequence[str],
        *,
        filters: str = "",
        settings_file: str | None = None,
    ) -> int: ...


class MultiplexerAdmin(Protocol):
    """Administers which implementation of a capability is active."""

    changed: Signal

    @property
    def implementations(self) -> tuple[str, ...]: ...

    @property
    def active_name(self) -> str | None: ...

    def set_active(self, name: str) -> None: ...


class DurableStore(Protocol):
    """Key/value persistence used by the property store."""

    def read(self, key: str, default: Any = None) -> Any: ...

    def write(self, key: str, value: Any) -> None: ...
