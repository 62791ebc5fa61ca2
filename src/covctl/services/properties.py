"""PropertyStore — named, typed settings that persist and notify on write.

Write order within :meth:`PropertyStore.set` is fixed: memory update,
durable write, subscriber notification, all before ``set`` returns. A
failed durable write restores the previous in-memory value and notifies
nobody, so callers never observe a value that was not persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from covctl.domain.errors import PersistenceError

if TYPE_CHECKING:
    from covctl.domain.contracts import DurableStore

logger = logging.getLogger(__name__)

type SettingListener = Callable[[str, Any], None]


@dataclass
class Setting[T]:
    """One persisted value: its key, default, and current value."""

    key: str
    default: T
    value: T
    listeners: list[SettingListener] = field(default_factory=list, repr=False)

    @property
    def is_default(self) -> bool:
        return self.value == self.default


class PropertyStore:
    """In-memory view over a durable store, one :class:`Setting` per key.

    Parameters:
        backend: Durable key/value store (``read`` / ``write``).
        defaults: Key -> default value. Each key's initial value is the
            persisted one if present, else the default.
    """

    def __init__(self, backend: DurableStore, defaults: Mapping[str, Any] | None = None) -> None:
        self._backend = backend
        self._settings: dict[str, Setting[Any]] = {}
        for key, default in (defaults or {}).items():
            self.define(key, default)

    def define(self, key: str, default: Any) -> Setting[Any]:
        """Register *key*, loading its persisted value if one exists."""
        if key in self._settings:
            msg = f"Setting already defined: {key!r}"
            raise ValueError(msg)
        setting = Setting(key=key, default=default, value=self._backend.read(key, default))
        self._settings[key] = setting
        return setting

    def setting(self, key: str) -> Setting[Any]:
        try:
            return self._settings[key]
        except KeyError:
            msg = f"Unknown setting: {key!r}"
            raise KeyError(msg) from None

    def keys(self) -> tuple[str, ...]:
        return tuple(self._settings)

    def items(self) -> Iterable[tuple[str, Any]]:
        return ((key, s.value) for key, s in self._settings.items())

    def get(self, key: str) -> Any:
        return self.setting(key).value

    def set(self, key: str, value: Any) -> None:
        """Update, persist, then notify. Raises PersistenceError on failure."""
        setting = self.setting(key)
        previous = setting.value
        setting.value = value
        try:
            self._backend.write(key, value)
        except PersistenceError:
            setting.value = previous
            raise
        except Exception as exc:
            setting.value = previous
            raise PersistenceError(key, str(exc)) from exc

        logger.debug("Setting %s written", key)
        for listener in list(setting.listeners):
            listener(key, value)

    def reset(self, key: str) -> None:
        """Write the default back as the current value."""
        self.set(key, self.setting(key).default)

    def subscribe(self, key: str, listener: SettingListener) -> None:
        """Call ``listener(key, value)`` after each change of *key*."""
        listeners = self.setting(key).listeners
        if listener not in listeners:
            listeners.append(listener)

    def unsubscribe(self, key: str, listener: SettingListener) -> None:
        listeners = self.setting(key).listeners
        if listener in listeners:
            listeners.remove(listener)
