"""Time sources for pools."""

from __future__ import annotations

import threading
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current unix time in whole seconds."""

    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to.

    Used for simulations and tests that need to step a pool through its
    lifecycle deterministically.
    """

    def __init__(self, start: int = 0) -> None:
        self._now = start
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._now

    def advance(self, seconds: int) -> int:
        """Move forward by seconds and return the new time.

        Raises:
            ValueError: If seconds is negative
        """
        if seconds < 0:
            raise ValueError(f"clock cannot move backwards (advance by {seconds})")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, timestamp: int) -> None:
        """Jump to timestamp.

        Raises:
            ValueError: If timestamp is earlier than the current time
        """
        with self._lock:
            if timestamp < self._now:
                raise ValueError(f"clock cannot move backwards ({self._now} -> {timestamp})")
            self._now = timestamp
