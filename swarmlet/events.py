"""A minimal publish/subscribe event carrying peer information."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from .models import PeerInfo

T = TypeVar("T")


class Event(Generic[T]):
    """Holds listeners and calls each of them with the data of every emission."""

    def __init__(self) -> None:
        self._listeners: dict[int, Callable[[T], None]] = {}
        self._next_id = 0

    def subscribe(self, listener: Callable[[T], None]) -> int:
        """Register a listener and return the id used to remove it."""
        listener_id = self._next_id
        self._next_id += 1
        self._listeners[listener_id] = listener
        return listener_id

    def unsubscribe(self, listener_id: int) -> None:
        """Remove a listener; unknown ids are ignored."""
        self._listeners.pop(listener_id, None)

    def emit(self, data: T) -> None:
        """Call every registered listener with the data."""
        for listener in list(self._listeners.values()):
            listener(data)

    def __len__(self) -> int:
        return len(self._listeners)


PeerEvent = Event[PeerInfo]