"""Shared pytest fixtures and test doubles for covctl tests."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Generator, Sequence
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from covctl.config.settings import CovSettings
from covctl.domain.errors import PersistenceError
from covctl.domain.hierarchy import OutputDescriptor, OutputDirectory, TestProject, TestSolution
from covctl.domain.manifest import PackageManifest
from covctl.domain.observable import Signal
from covctl.infrastructure.database.engine import init_database
from covctl.services.coordinator import SettingsCoordinator, default_values
from covctl.services.multiplexer import MultiplexedTestRunner
from covctl.services.properties import PropertyStore
from covctl.services.runtime import CoverageSession


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root and covctl logger state after each test.

    The CLI reconfigures logging on every invocation, binding handlers to
    CliRunner's temporary streams.
    """
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    cov = logging.getLogger("covctl")
    cov_level = cov.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    cov.setLevel(cov_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / ".covctl")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace so the CLI keeps its state there.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.delenv("COVCTL_CONFIG", raising=False)
    monkeypatch.chdir(workspace_root)


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Workspace with one project, its build output, and two settings files."""
    project = tmp_path / "core"
    (project / "build").mkdir(parents=True)
    (project / "pyproject.toml").write_text("[project]\nname = \"core\"\n")
    (project / "build" / "out.bin").write_bytes(b"x" * 100)
    (project / "Local.TestSettings").write_text("")
    (tmp_path / "ci.testsettings").write_text("")
    (tmp_path / "notes.txt").write_text("")
    return tmp_path


@pytest.fixture
def session(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> CoverageSession:
    """CoverageSession over the temp workspace with synchronous events."""
    monkeypatch.delenv("COVCTL_CONFIG", raising=False)
    settings = CovSettings.from_cli(root=workspace_root, sync=True)
    s = CoverageSession(settings)
    try:
        yield s
    finally:
        s.close()


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class MemoryBackend:
    """Dict-backed durable store that counts writes."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})
        self.writes: list[tuple[str, Any]] = []

    def read(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def write(self, key: str, value: Any) -> None:
        self.writes.append((key, value))
        self.data[key] = value


class FailingBackend(MemoryBackend):
    """Backend whose writes fail while ``fail`` is set."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        super().__init__(data)
        self.fail = False

    def write(self, key: str, value: Any) -> None:
        if self.fail:
            raise PersistenceError(key, "disk full")
        super().write(key, value)


class FakeSolution:
    def __init__(self, name: str = "demo", root: Path = Path("/demo")) -> None:
        self.name = name
        self.root = root


class FakeHost:
    """Workspace host with a fixed file list and recorded hand-offs."""

    def __init__(self, files: Sequence[str] = (), *, solution: bool = True) -> None:
        self.files = list(files)
        self.solution = FakeSolution() if solution else None
        self.build_finished = Signal("build_finished")
        self.solution_opened = Signal("solution_opened")
        self.find_calls = 0
        self.opened: list[tuple[str, str]] = []

    def find_files(self, pattern: re.Pattern[str]) -> list[str]:
        self.find_calls += 1
        return [f for f in self.files if pattern.match(f.rsplit("/", 1)[-1])]

    def open_path_in_explorer(self, path: str) -> None:
        self.opened.append(("explorer", path))

    def navigate_to_file(self, path: str) -> None:
        self.opened.append(("editor", path))

    def open_url(self, url: str) -> None:
        self.opened.append(("url", url))


class FakeCleaner:
    """Output cleaner with scripted sizes, failures, and an event log."""

    def __init__(self, sizes: dict[str, int] | None = None) -> None:
        self.sizes = dict(sizes or {})
        self.failing: set[str] = set()
        self.log: list[str] = []
        self.gate: asyncio.Event | None = None

    async def get_output_files(self, project: TestProject) -> OutputDescriptor:
        self.log.append(f"query:{project.name}")
        if self.gate is not None:
            await self.gate.wait()
        if project.name in self.failing:
            raise OSError(f"cannot read {project.name}")
        size = self.sizes.get(project.name, 0)
        return OutputDescriptor(
            project=project.name,
            directories=(OutputDirectory(path=f"/{project.name}/build", size=size, file_count=1),),
        )

    async def clean_output(self, target: OutputDescriptor) -> int:
        await asyncio.sleep(0)
        self.log.append(f"clean:{target.project}")
        freed = self.sizes.get(target.project, 0)
        self.sizes[target.project] = 0
        return freed


class FakeRunner:
    __test__ = False

    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[tuple[tuple[str, ...], str, str | None]] = []

    def run_tests(
        self, targets: Sequence[str], *, filters: str = "", settings_file: str | None = None
    ) -> int:
        self.calls.append((tuple(targets), filters, settings_file))
        return 0


def make_solution(*names: str) -> TestSolution:
    """Solution with one project per name."""
    solution = TestSolution("demo", Path("/demo"))
    for name in names:
        solution.add_child(TestProject(name, Path("/demo") / name))
    return solution


def make_runners(*names: str) -> MultiplexedTestRunner:
    runners = MultiplexedTestRunner()
    for name in names:
        runners.register(name, FakeRunner(name))
    return runners


def make_coordinator(
    *,
    host: FakeHost | None = None,
    cleaner: FakeCleaner | None = None,
    runners: MultiplexedTestRunner | None = None,
    backend: MemoryBackend | None = None,
) -> SettingsCoordinator:
    """Coordinator over in-memory collaborators."""
    return SettingsCoordinator(
        host,
        cleaner,
        runners if runners is not None else make_runners("pytest", "unittest"),
        PropertyStore(backend if backend is not None else MemoryBackend(), default_values()),
        manifest=PackageManifest(version="1.2.3", website="https://example.org/covctl"),
    )
