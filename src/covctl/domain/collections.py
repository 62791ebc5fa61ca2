"""ObservableEnumeration — a derived sequence refreshed on demand.

The exposed items are always the result of the most recent explicit
refresh; reads never re-run the producer. Each refresh replaces the whole
sequence with a single reference swap and fires exactly one notification.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable, Iterable, Iterator

from covctl.domain.observable import Signal


class ObservableEnumeration[T]:
    """Sorted, de-duplicated snapshot of a producer's output.

    Parameters:
        producer: Zero-argument callable returning the current items.
            Returning an empty iterable is valid output, not an error.
        compare: Three-way comparison (negative, zero, positive) defining
            the canonical order. Equal items are kept once.
    """

    def __init__(
        self,
        producer: Callable[[], Iterable[T]],
        compare: Callable[[T, T], int],
    ) -> None:
        self._producer = producer
        self._compare = compare
        self._items: tuple[T, ...] = ()
        self.changed = Signal("ObservableEnumeration.changed")

    @property
    def items(self) -> tuple[T, ...]:
        """The snapshot taken by the last :meth:`refresh`."""
        return self._items

    def refresh(self) -> tuple[T, ...]:
        """Re-run the producer, normalize the result, and notify once."""
        return self._replace(self._producer())

    async def refresh_async(self) -> tuple[T, ...]:
        """Like :meth:`refresh`, with the producer running in a worker thread.

        The swap and the notification happen on the calling loop's thread.
        """
        produced = await asyncio.to_thread(lambda: list(self._producer() or ()))
        return self._replace(produced)

    def _replace(self, produced: Iterable[T] | None) -> tuple[T, ...]:
        unique: list[T] = list(dict.fromkeys(produced or ()))
        unique.sort(key=functools.cmp_to_key(self._compare))
        self._items = tuple(unique)
        self.changed.emit(self._items)
        return self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __repr__(self) -> str:
        return f"ObservableEnumeration({list(self._items)!r})"


def compare_ignore_case(left: str, right: str) -> int:
    """Ordinal, case-insensitive three-way string comparison."""
    a, b = left.casefold(), right.casefold()
    return (a > b) - (a < b)
