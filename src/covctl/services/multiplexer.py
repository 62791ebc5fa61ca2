"""Multiplexer — several implementations of a capability, one active.

Administration (``implementations`` / ``active_name`` / ``set_active``)
and the capability itself are separate interfaces. A subclass such as
:class:`MultiplexedTestRunner` implements the capability by delegating to
:attr:`Multiplexer.active`, so callers typed to the capability never learn
that multiplexing happens.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from covctl.domain.contracts import TestRunner
from covctl.domain.errors import UnknownImplementationError
from covctl.domain.observable import Signal

logger = logging.getLogger(__name__)


class Multiplexer[T]:
    """Registry of named implementations with one active pointer.

    INVARIANT: ``active_name`` is None or a registered name.
    """

    def __init__(self) -> None:
        self._implementations: dict[str, T] = {}
        self._active: str | None = None
        self.changed = Signal("Multiplexer.changed")

    def register(self, name: str, implementation: T) -> None:
        """Add *implementation* under *name*. The first one becomes active."""
        if name in self._implementations:
            msg = f"Implementation already registered: {name!r}"
            raise ValueError(msg)
        self._implementations[name] = implementation
        logger.debug("Registered implementation %s", name)
        if self._active is None:
            self._active = name

    @property
    def implementations(self) -> tuple[str, ...]:
        """Registered names in registration order."""
        return tuple(self._implementations)

    @property
    def active_name(self) -> str | None:
        return self._active

    def set_active(self, name: str) -> None:
        """Select *name*. Unknown names raise and leave the selection alone."""
        if name not in self._implementations:
            raise UnknownImplementationError(name, self.implementations)
        self._active = name
        logger.debug("Active implementation is now %s", name)
        self.changed.emit(name)

    @property
    def active(self) -> T:
        if self._active is None:
            raise UnknownImplementationError(None, self.implementations)
        return self._implementations[self._active]

    def get(self, name: str) -> T:
        try:
            return self._implementations[name]
        except KeyError:
            raise UnknownImplementationError(name, self.implementations) from None

    def __contains__(self, name: object) -> bool:
        return name in self._implementations

    def __len__(self) -> int:
        return len(self._implementations)


class MultiplexedTestRunner(Multiplexer[TestRunner]):
    """A :class:`TestRunner` that routes every call to the active backend."""

    __test__ = False

    @property
    def name(self) -> str:
        return self.active.name

    def run_tests(
        self,
        targets: Sequence[str],
        *,
        filters: str = "",
        settings_file: str | None = None,
    ) -> int:
        return self.active.run_tests(targets, filters=filters, settings_file=settings_file)
