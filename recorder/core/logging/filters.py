# recorder/core/logging/filters.py
from __future__ import annotations
import logging
import threading
import time
from collections import deque, defaultdict

__all__ = ["RecurringSuppressFilter"]

MAX_KEY_LEN = 512



class RecurringSuppressFilter(logging.Filter):
    """
    Drops identical messages after `maxPerWindow` occurrences within
    `windowSeconds`. Once the window slides and the message is let through
    again, a single summary line reports how many copies were dropped.

    A failing catalog tends to produce one warning per plugin on every
    blueprint request; this keeps that from flooding the console.

    Key = (logger name, levelno, whitespace-squashed message)
    """
    def __init__(
            self,
            *,
            windowSeconds: int = 60,
            maxPerWindow: int = 5,
            summaryLevel: int = logging.INFO,
            clock=time.monotonic,
    ):
        super().__init__()
        self.windowSeconds = max(1, int(windowSeconds))
        self.maxPerWindow = max(1, int(maxPerWindow))
        self.summaryLevel = int(summaryLevel)
        self._clock = clock

        self._buckets: dict[tuple[str, int, str], deque[float]] = defaultdict(deque)
        self._suppressedCounts: dict[tuple[str, int, str], int] = defaultdict(int)
        self._lock = threading.Lock()

    def _keyOf(self, record: logging.LogRecord) -> tuple[str, int, str]:
        norm = " ".join(str(record.getMessage()).split())
        if len(norm) > MAX_KEY_LEN:
            norm = norm[:MAX_KEY_LEN] + "..."
        return (record.name, record.levelno, norm)

    def _emitSummary(self, key: tuple[str, int, str]) -> None:
        count = self._suppressedCounts.pop(key, 0)
        if count <= 0:
            return
        loggerName, _levelno, message = key
        logging.getLogger(loggerName).log(
            self.summaryLevel,
            "Suppressed %d repeated logs: %s",
            count,
            message,
            extra={"_noRecurringSuppress": True},
        )

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "_noRecurringSuppress", False):
            return True

        now = self._clock()
        key = self._keyOf(record)

        with self._lock:
            dq = self._buckets[key]
            limit = now - self.windowSeconds
            while dq and dq[0] < limit:
                dq.popleft()

            dq.append(now)
            if len(dq) <= self.maxPerWindow:
                needsSummary = self._suppressedCounts.get(key, 0) > 0
            else:
                self._suppressedCounts[key] += 1
                return False

        if needsSummary:
            self._emitSummary(key)
        return True
