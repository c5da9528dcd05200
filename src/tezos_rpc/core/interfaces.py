"""Structural interfaces consumed by the streaming transport.

Defines the :class:`Sink` protocol that streaming requests deliver
decoded values into, plus an in-memory implementation suitable for
tests and short-lived collection.

``asyncio.Queue`` satisfies :class:`Sink` as-is, which makes a bounded
queue the usual hand-off between a monitor task and its consumer.
"""
from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


@runtime_checkable
class Sink(Protocol[T_contra]):
    """Destination accepting decoded stream values one at a time, in order.

    ``put`` may suspend until the consumer accepts the value; the
    transport races that suspension against cancellation.
    """

    async def put(self, item: T_contra) -> None:
        """Accept one value."""
        ...


class CollectingSink(Generic[T]):
    """In-memory :class:`Sink` that appends every value to :attr:`items`.

    Parameters
    ----------
    limit:
        Optional number of items after which :attr:`full` becomes ``True``.
        Nothing is dropped; the flag only lets a caller decide to cancel.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.items: list[T] = []
        self._limit = limit

    async def put(self, item: T) -> None:
        self.items.append(item)

    @property
    def full(self) -> bool:
        return self._limit is not None and len(self.items) >= self._limit

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return f"CollectingSink(items={len(self.items)})"


def is_sink(obj: Any) -> bool:
    """Return ``True`` if *obj* structurally satisfies :class:`Sink`."""
    return isinstance(obj, Sink)
