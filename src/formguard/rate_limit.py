"""In-memory fixed-window rate limiting for contact submissions.

Per-key counter with a reset deadline. Resets on server restart.
A burst straddling a window boundary can admit up to twice the limit
in a short span; that is the accepted cost of fixed windows.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_LIMIT = 3
DEFAULT_WINDOW_SECONDS = 60 * 60


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int


class RateLimitStore:
    """In-memory rate limit store keyed by client identifier (IP, etc.).

    Every operation holds one lock, so check-then-increment is atomic and two
    concurrent requests from the same client cannot both take the last slot.
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, RateLimitEntry] = {}

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def check_and_consume(self, client_id: str, now: Optional[float] = None) -> RateLimitDecision:
        """Decide whether ``client_id`` may submit, consuming a slot if so."""
        now = self._now(now)
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None or entry.reset_at <= now:
                self._entries[client_id] = RateLimitEntry(
                    count=1, reset_at=now + self.window_seconds,
                )
                return RateLimitDecision(allowed=True, remaining=self.limit - 1)

            if entry.count >= self.limit:
                return RateLimitDecision(allowed=False, remaining=0)

            entry.count += 1
            return RateLimitDecision(allowed=True, remaining=self.limit - entry.count)

    def release(self, client_id: str, now: Optional[float] = None) -> None:
        """Give back one slot in the current window. No-op once it has expired."""
        now = self._now(now)
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None or entry.reset_at <= now:
                return
            if entry.count <= 1:
                del self._entries[client_id]
            else:
                entry.count -= 1

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop expired entries. Returns the number removed."""
        now = self._now(now)
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.reset_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def get(self, client_id: str) -> Optional[RateLimitEntry]:
        """Snapshot of the entry for ``client_id``, if any."""
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None:
                return None
            return RateLimitEntry(count=entry.count, reset_at=entry.reset_at)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
