"""Synchronous change notification."""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

Handler = Callable[[Any], None]


class ChangeEvent:
    """Subscriber list invoked synchronously with the sender.

    Handlers run on the caller's thread, in subscription order. Exceptions
    raised by a handler propagate to whoever triggered the change.
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: list[Handler] = []

    def subscribe(self, handler: Handler) -> Handler:
        if not callable(handler):
            raise ValueError(f"{self.name} handler must be callable, got {handler!r}")
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: Handler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    def emit(self, sender: Any) -> None:
        # Copy so handlers may unsubscribe themselves while being called.
        for handler in list(self._handlers):
            handler(sender)

    def __len__(self) -> int:
        return len(self._handlers)


class TrackedValue(Generic[T]):
    """A value paired with a ChangeEvent fired only on actual change."""

    def __init__(
        self,
        name: str,
        initial: T,
        equals: Callable[[T, T], bool] | None = None,
    ):
        self.value = initial
        self.changed = ChangeEvent(name)
        self._equals = equals or (lambda a, b: a == b)

    def assign(self, value: T) -> bool:
        """Store without notifying. Returns True if the value changed."""
        if self._equals(self.value, value):
            return False
        self.value = value
        return True

    def set(self, value: T, sender: Any) -> bool:
        if not self.assign(value):
            return False
        self.changed.emit(sender)
        return True
