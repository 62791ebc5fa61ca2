"""Synchronous publish/subscribe primitives.

:class:`Signal` is an explicit subscriber list scoped to its owner; there is
no global event bus. :class:`ObservableObject` layers per-property change
notification on top of it, the way UI bindings expect.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

type Callback = Callable[..., Any]


class Signal:
    """Ordered list of callbacks invoked synchronously by :meth:`emit`.

    Callbacks run in subscription order on the emitting thread. Exceptions
    raised by a callback propagate to the emitter.
    """

    def __init__(self, name: str = "signal") -> None:
        self.name = name
        self._callbacks: list[Callback] = []

    def connect(self, callback: Callback) -> Callback:
        """Subscribe *callback*. Returns it so the method works as a decorator."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)
        return callback

    def disconnect(self, callback: Callback) -> None:
        """Unsubscribe *callback*. Unknown callbacks are ignored."""
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    def clear(self) -> None:
        self._callbacks.clear()

    def emit(self, *args: Any, **kwargs: Any) -> None:
        # Copy so callbacks may (un)subscribe while being notified.
        for callback in list(self._callbacks):
            callback(*args, **kwargs)

    def __len__(self) -> int:
        return len(self._callbacks)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, subscribers={len(self._callbacks)})"


class ObservableObject:
    """Base for objects that announce property changes by name.

    Subscribers either listen to every change through :attr:`property_changed`
    (called with the property name) or to one property via :meth:`subscribe`.
    """

    def __init__(self) -> None:
        self.property_changed = Signal(f"{type(self).__name__}.property_changed")
        self._property_subscribers: dict[str, list[Callback]] = {}

    def subscribe(self, name: str, callback: Callback) -> None:
        """Call *callback* with no arguments whenever property *name* changes."""
        callbacks = self._property_subscribers.setdefault(name, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unsubscribe(self, name: str, callback: Callback) -> None:
        callbacks = self._property_subscribers.get(name, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def notify_property_changed(self, name: str) -> None:
        """Announce that property *name* has a new value."""
        self.property_changed.emit(name)
        for callback in list(self._property_subscribers.get(name, ())):
            callback()
