"""Synchronous publish/subscribe channel used for history notifications."""

from __future__ import annotations

from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

Subscriber = Callable[[T], None]
Unsubscribe = Callable[[], None]


class Emitter(Generic[T]):
    """Ordered list of callbacks invoked in registration order on ``trigger``.

    Delivery happens on the caller's thread before ``trigger`` returns.
    Exceptions raised by a subscriber propagate to the caller.
    """

    def __init__(self) -> None:
        self._subscribers: List[Subscriber[T]] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def on(self, callback: Subscriber[T]) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            # bound methods are rebuilt on each access, so match by equality
            for index, existing in enumerate(self._subscribers):
                if existing == callback:
                    del self._subscribers[index]
                    return

        return unsubscribe

    def once(self, callback: Subscriber[T]) -> Unsubscribe:
        unsubscribe: Unsubscribe

        def wrapper(payload: T) -> None:
            unsubscribe()
            callback(payload)

        unsubscribe = self.on(wrapper)
        return unsubscribe

    def off(self, callback: Subscriber[T]) -> None:
        self._subscribers = [cb for cb in self._subscribers if cb != callback]

    def trigger(self, payload: T) -> "Emitter[T]":
        for callback in list(self._subscribers):
            callback(payload)
        return self

    def clear(self) -> None:
        self._subscribers.clear()


__all__ = ["Emitter", "Subscriber", "Unsubscribe"]
