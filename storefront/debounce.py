from __future__ import annotations
import asyncio
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

class Debouncer(Generic[T]):
    """Holds a value that only follows its input after ``delay`` seconds of quiet.

    Every ``push`` cancels the pending timer and starts a new one, so the
    last pushed value wins and ``value`` never updates early. ``close`` drops
    the pending timer; the debouncer can be pushed to again afterwards.
    """

    def __init__(
        self,
        initial: T,
        delay: float,
        on_change: Optional[Callable[[T], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.value = initial
        self.delay = delay
        self.on_change = on_change
        self._loop = loop
        self._pending: Optional[T] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def latest(self) -> T:
        """The most recent input, pending or applied."""
        return self._pending if self._handle is not None else self.value

    def push(self, value: T) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._pending = value
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    def reset(self, value: T) -> None:
        """Cancel anything pending and set ``value`` immediately, silently."""
        self.cancel()
        self.value = value

    close = cancel

    def _fire(self) -> None:
        value = self._pending
        self._handle = None
        self._pending = None
        self.value = value
        if self.on_change is not None:
            self.on_change(value)
