"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.covctl/plugins/``.
Capabilities: test-runner backends and lifecycle hooks.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

from covctl.domain.contracts import TestRunner
from covctl.plugins.hookspecs import CovctlHookSpec

if TYPE_CHECKING:
    from covctl.config.models import RunnerConfig

PROJECT_NAME = "covctl"
ENTRY_POINT_GROUP = "covctl.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(CovctlHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then single-file plugins from *local_dir*.

        Returns the names of all registered plugins.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_class_plugins()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def collect_test_runners(self, config: RunnerConfig) -> list[TestRunner]:
        """Gather runners from every ``register_test_runners`` implementation.

        Each plugin is called on its own so one broken plugin only costs
        its own runners. Objects that do not satisfy :class:`TestRunner`
        are skipped with a warning.
        """
        runners: list[TestRunner] = []
        # get_hookimpls() lists plugins in registration order.
        for impl in self._pm.hook.register_test_runners.get_hookimpls():
            try:
                contributed = impl.function(config=config)
            except Exception:
                logger.warning(
                    "Plugin %s failed to register test runners",
                    impl.plugin_name,
                    exc_info=True,
                )
                continue
            for runner in contributed or ():
                if not isinstance(runner, TestRunner):
                    logger.warning(
                        "Plugin %s returned a non-runner object: %r",
                        impl.plugin_name,
                        runner,
                    )
                    continue
                runners.append(runner)
        return runners

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Load each ``*.py`` in *local_dir* and register its plugin classes.

        Files starting with ``_`` are skipped. A broken local plugin is
        logged and skipped; it never stops the rest from loading.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"covctl_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name or not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=f"{module_name}.{obj.__name__}")
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _instantiate_class_plugins(self) -> None:
        """Replace plugin classes registered by entry points with instances.

        Hook dispatch against a class object leaves ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            self._pm.register(instance, name=plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Whether *cls* has any ``@hookimpl`` methods (``covctl_impl`` marker)."""
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "covctl_impl", None):
                return True
        return False
