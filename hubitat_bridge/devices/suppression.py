"""
Per-device command timestamp table.

Opening a suppression window for a capability key blocks every observation
for that key (poll or webhook) until the cooldown elapses. Entries are never
removed; they expire lazily when compared against the current time.
"""

import logging
import time
from typing import Callable, Iterable, Optional

from .models import CapabilityKey

logger = logging.getLogger("hubitat.devices.suppression")

Clock = Callable[[], float]


class CommandTimestampTable:
    """Most recent dispatch time for each capability key of one device."""

    def __init__(self, cooldown_ms: int = 2000, clock: Clock = time.monotonic):
        self._cooldown = cooldown_ms / 1000
        self._clock = clock
        self._last_command: dict[CapabilityKey, float] = {}

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown

    def mark(self, keys: Iterable[CapabilityKey]) -> float:
        """Record a dispatch touching keys. Returns the timestamp used."""
        now = self._clock()
        for key in keys:
            self._last_command[key] = now
        return now

    def last_command(self, key: CapabilityKey) -> Optional[float]:
        return self._last_command.get(key)

    def elapsed(self, key: CapabilityKey) -> Optional[float]:
        """Seconds since the last command touching key, None if never commanded."""
        last = self._last_command.get(key)
        if last is None:
            return None
        return self._clock() - last

    def is_suppressed(self, key: CapabilityKey) -> bool:
        elapsed = self.elapsed(key)
        return elapsed is not None and elapsed < self._cooldown
