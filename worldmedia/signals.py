"""Change notification for the persisted stores."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Signal(Generic[T]):
    """Ordered subscriber list; listen() returns an unsubscribe callable."""

    def __init__(self, name: str):
        self.name = name
        self.listeners: list[Callable[[T], None]] = []

    def listen(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self.listeners.append(listener)

        def unlisten() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unlisten

    def emit(self, value: T) -> None:
        # Listeners may unsubscribe while being notified
        for listener in list(self.listeners):
            listener(value)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, listeners={len(self.listeners)})"
