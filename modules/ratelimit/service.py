"""
In-memory sliding-window rate limiter.

State is process-local and lost on restart. It is not a correctness
guarantee across replicas; swap in a shared-counter IRateLimiter for that.
"""

import logging
import threading
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Optional

from .exceptions import RateLimitedError
from .interfaces import IRateLimiter
from .models import RateLimitDecision, RateWindow

logger = logging.getLogger(__name__)

WindowKey = tuple[str, str]


class InMemoryRateLimiter(IRateLimiter):
    """
    Sliding-window limiter held in a single process.

    Windows are pruned lazily when their key is checked. Keys that are never
    revisited are reclaimed by sweep() or, once more than max_keys windows
    exist, by evicting the least recently used window.
    """

    def __init__(self, max_keys: int = 10_000):
        if max_keys < 1:
            raise ValueError("max_keys must be at least 1")
        self._max_keys = max_keys
        self._windows: OrderedDict[WindowKey, RateWindow] = OrderedDict()
        # Prune, count and append happen under one lock so two requests can
        # never both take the last slot.
        self._lock = threading.Lock()

    def check(
        self,
        principal_id: str,
        action_key: str,
        now: datetime,
        max_attempts: int,
        window: timedelta,
    ) -> RateLimitDecision:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        key = (principal_id, action_key)
        window_seconds = int(window.total_seconds())

        with self._lock:
            entry = self._windows.get(key)
            if entry is not None:
                entry.window = window
                entry.prune(now)
                if not entry.timestamps:
                    del self._windows[key]
                    entry = None

            count = len(entry) if entry is not None else 0
            if entry is not None and count >= max_attempts:
                self._windows.move_to_end(key)
                retry_after = entry.retry_after_seconds(now)
                logger.info(
                    f"Rate limited principal={principal_id} action={action_key} "
                    f"retry_after={retry_after}s"
                )
                raise RateLimitedError(action_key, retry_after, max_attempts, window_seconds)

            if entry is None:
                entry = RateWindow(window=window)
                self._windows[key] = entry
                self._evict_overflow()
            else:
                self._windows.move_to_end(key)
            entry.timestamps.append(now)

        return RateLimitDecision(
            remaining=max_attempts - count - 1,
            limit=max_attempts,
            window_seconds=window_seconds,
        )

    def sweep(self, now: datetime) -> int:
        removed = 0
        with self._lock:
            for key in list(self._windows):
                entry = self._windows[key]
                entry.prune(now)
                if not entry.timestamps:
                    del self._windows[key]
                    removed += 1
        if removed:
            logger.debug(f"Rate limiter sweep removed {removed} idle windows")
        return removed

    def reset(self, principal_id: Optional[str] = None) -> None:
        """Forget all windows, or only those of one principal."""
        with self._lock:
            if principal_id is None:
                self._windows.clear()
                return
            for key in [k for k in self._windows if k[0] == principal_id]:
                del self._windows[key]

    def attempts(self, principal_id: str, action_key: str) -> int:
        """Attempts currently recorded for a key (without pruning)."""
        with self._lock:
            entry = self._windows.get((principal_id, action_key))
            return len(entry) if entry is not None else 0

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, key: object) -> bool:
        return key in self._windows

    def _evict_overflow(self) -> None:
        while len(self._windows) > self._max_keys:
            evicted, _ = self._windows.popitem(last=False)
            logger.debug(f"Rate limiter evicted least recently used window {evicted}")
