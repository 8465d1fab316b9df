"""Strictly monotonic int64 point ids derived from a microsecond clock."""

import threading
import time
from collections.abc import Callable


class MonotonicPointIdGenerator:
    """Hands out contiguous id ranges that never repeat within a process.

    Each reservation starts at the current clock reading in microseconds,
    or one past the last id issued if the clock has not moved on. Two calls
    in the same microsecond therefore still receive disjoint ranges.
    """

    def __init__(self, clock_ns: Callable[[], int] = time.time_ns):
        self._clock_ns = clock_ns
        self._last_id = 0
        self._lock = threading.Lock()

    def reserve(self, count: int) -> list[int]:
        if count <= 0:
            return []
        with self._lock:
            start = max(self._clock_ns() // 1_000, self._last_id + 1)
            self._last_id = start + count - 1
        return list(range(start, start + count))
