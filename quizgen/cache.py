"""In-process cache of parsed LLM responses, keyed by prompt hash."""
from __future__ import annotations

import copy
import hashlib
import logging
import threading
import time
from collections.abc import Callable

from quizgen.models import CacheEntry, QuestionSet

log = logging.getLogger("quizgen.cache")

DEFAULT_EXPIRY = 24 * 60 * 60  # seconds
DEFAULT_MAX_ENTRIES = 100


def cache_key(prompt: str) -> str:
    return hashlib.md5(prompt.encode()).hexdigest()


class ResponseCache:
    """Expiring map from prompt hash to the QuestionSet parsed for that prompt.

    One instance is created per process and handed to every
    ``DocumentProcessor``. Reads and writes are guarded by a lock, so chunk
    workers running as tasks or threads may share it. When the entry count
    exceeds *max_entries* after a write, expired entries are swept; live
    entries are never evicted.
    """

    def __init__(
        self,
        expiry: float = DEFAULT_EXPIRY,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        self.expiry = expiry
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.expiry

    def get(self, key: str) -> QuestionSet | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return copy.deepcopy(entry.data)

    def put(self, key: str, data: QuestionSet) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(timestamp=self._clock(), data=copy.deepcopy(data))
            if len(self._entries) > self.max_entries:
                removed = self._sweep_locked()
                if removed:
                    log.info("Swept %d expired cache entries", removed)

    def sweep(self) -> int:
        """Delete every expired entry and return how many were removed."""
        with self._lock:
            return self._sweep_locked()

    def _sweep_locked(self) -> int:
        now = self._clock()
        stale = [k for k, e in self._entries.items() if self._expired(e, now)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict:
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "expiry_seconds": self.expiry,
                "hits": self.hits,
                "misses": self.misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
