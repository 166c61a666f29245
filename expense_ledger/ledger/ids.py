"""
Identifier generation.

Ids are "<milliseconds since epoch>-<sequence>". The sequence comes from
a process-wide counter, so two ids minted in the same clock tick still
differ. Ids are opaque to callers; nothing parses them back.
"""

import itertools
import threading
import time
from typing import Callable


class IdGenerator:
    """Mints process-unique identifiers."""

    def __init__(self, clock: Callable[[], int] = time.time_ns):
        self._clock = clock
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            seq = next(self._counter)
        return f"{self._clock() // 1_000_000}-{seq}"


# Shared by every store in the process so uniqueness holds across them.
new_id = IdGenerator()
