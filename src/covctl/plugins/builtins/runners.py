"""Built-in test-runner backends: pytest and unittest.

Both launch ``python -m <tool>`` in a subprocess and return its exit
code. Which interpreter is used comes from ``[runner] python``, falling
back to the one running covctl.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Sequence
from typing import ClassVar

import pluggy

from covctl.config.models import RunnerConfig

hookimpl = pluggy.HookimplMarker("covctl")

logger = logging.getLogger(__name__)


class ModuleRunner:
    """Runs a test tool as ``python -m <module>``."""

    __test__ = False
    module: ClassVar[str] = ""

    def __init__(self, python: str | None = None) -> None:
        self._python = python or sys.executable

    @property
    def name(self) -> str:
        return self.module

    def build_command(
        self,
        targets: Sequence[str],
        *,
        filters: str = "",
        settings_file: str | None = None,
    ) -> list[str]:
        return [self._python, "-m", self.module, *targets]

    def run_tests(
        self,
        targets: Sequence[str],
        *,
        filters: str = "",
        settings_file: str | None = None,
    ) -> int:
        command = self.build_command(targets, filters=filters, settings_file=settings_file)
        logger.info("Running %s", " ".join(command))
        return subprocess.run(command, check=False).returncode


class PytestRunner(ModuleRunner):
    module = "pytest"

    def build_command(
        self,
        targets: Sequence[str],
        *,
        filters: str = "",
        settings_file: str | None = None,
    ) -> list[str]:
        command = super().build_command(targets)
        if filters:
            command += ["-k", filters]
        if settings_file:
            command += ["-c", settings_file]
        return command


class UnittestRunner(ModuleRunner):
    module = "unittest"

    def build_command(
        self,
        targets: Sequence[str],
        *,
        filters: str = "",
        settings_file: str | None = None,
    ) -> list[str]:
        command = super().build_command(targets)
        if filters:
            command += ["-k", filters]
        if settings_file:
            logger.debug("unittest has no settings file option; ignoring %s", settings_file)
        return command


class BuiltinRunnersPlugin:
    """Contributes the pytest and unittest backends."""

    @hookimpl
    def register_test_runners(self, config: RunnerConfig) -> list[ModuleRunner]:
        return [PytestRunner(config.python), UnittestRunner(config.python)]
