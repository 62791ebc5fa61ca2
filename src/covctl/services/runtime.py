"""CoverageSession — wires the coordinator to its collaborators.

Owns the state database, the plugin manager and event bus, the runner
multiplexer, the local workspace host, and the output cleaner. Created
lazily by the CLI context so ``--help`` never touches the database.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covctl.infrastructure.cleaner import LocalOutputCleaner
from covctl.infrastructure.database.engine import init_database
from covctl.infrastructure.store import SettingsStore
from covctl.infrastructure.workspace import LocalSolution, LocalWorkspace
from covctl.plugins.builtins.runners import BuiltinRunnersPlugin
from covctl.plugins.event_bus import EventBus
from covctl.plugins.manager import PluginManager
from covctl.services.coordinator import SettingsCoordinator, default_values
from covctl.services.multiplexer import MultiplexedTestRunner
from covctl.services.properties import PropertyStore

if TYPE_CHECKING:
    from covctl.config.settings import CovSettings

logger = logging.getLogger(__name__)


class CoverageSession:
    """Everything one covctl invocation needs, built from settings."""

    def __init__(self, settings: CovSettings) -> None:
        self.settings = settings
        self.engine = init_database(settings.state_dir)
        self.store = SettingsStore(self.engine)

        self.plugins = PluginManager()
        if settings.plugins.builtin_runners:
            self.plugins.register_plugin(BuiltinRunnersPlugin(), name="builtin-runners")
        self.plugins.discover_and_load(local_dir=settings.root / settings.plugins.local_dir)
        self.event_bus = EventBus(self.engine, self.plugins, sync=settings.sync)

        self.runners = MultiplexedTestRunner()
        for runner in self.plugins.collect_test_runners(settings.runner):
            try:
                self.runners.register(runner.name, runner)
            except ValueError:
                logger.warning("Duplicate test runner %r ignored", runner.name)

        self.workspace = LocalWorkspace(settings.workspace)
        self.cleaner = LocalOutputCleaner(settings.output)
        self.properties = PropertyStore(self.store, default_values(settings))

        # Connected before the coordinator so the hierarchy is in place
        # when its solution_opened handler schedules a refresh.
        self.workspace.solution_opened.connect(self._load_hierarchy)
        self.coordinator = SettingsCoordinator(
            self.workspace,
            self.cleaner,
            self.runners,
            self.properties,
            workspace=settings.workspace,
            event_bus=self.event_bus,
        )

    def open(self) -> LocalSolution:
        """Open the workspace root as the current solution."""
        return self.workspace.open_solution(self.settings.root)

    def close(self) -> None:
        self.coordinator.close()
        self.workspace.solution_opened.disconnect(self._load_hierarchy)
        self.event_bus.shutdown()
        self.engine.dispose()

    def _load_hierarchy(self, _solution: LocalSolution) -> None:
        self.coordinator.test_solution = self.workspace.load_test_hierarchy()
