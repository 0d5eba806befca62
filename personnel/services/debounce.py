"""Debounced values on top of the running asyncio loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Holds a value that only changes after its input stayed stable for ``delay`` seconds.

    Every ``schedule`` call cancels the previous pending update, so only the
    last value within a window settles. ``close`` cancels whatever is pending
    and turns later timer callbacks into no-ops.
    """

    def __init__(
        self,
        initial: T,
        delay: float,
        on_settle: Callable[[T], None] | None = None,
    ) -> None:
        self.value: T = initial
        self.delay = delay
        self.on_settle = on_settle
        self._pending: T | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, value: T) -> asyncio.TimerHandle:
        if self._closed:
            raise RuntimeError("Debouncer is closed")

        self.cancel()
        loop = asyncio.get_running_loop()
        self._pending = value
        self._handle = loop.call_later(self.delay, self._settle, value)
        return self._handle

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = None

    def flush(self) -> None:
        """Apply the pending value now instead of waiting for the timer."""
        if self._handle is None:
            return
        value = self._pending
        self.cancel()
        self._settle(value)  # type: ignore[arg-type]

    def close(self) -> None:
        self.cancel()
        self._closed = True

    def _settle(self, value: T) -> None:
        self._handle = None
        self._pending = None
        if self._closed or value == self.value:
            return
        self.value = value
        if self.on_settle is not None:
            self.on_settle(value)
