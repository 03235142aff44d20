"""Memoization of verdicts keyed by inputs and ruleset version."""

from __future__ import annotations

import threading
from collections import OrderedDict

from ..schemas import EligibilityResult

CacheKey = tuple[str, str, int]


class VerdictCache:
    """Thread-safe LRU cache of eligibility results.

    Entries are keyed by ``(visa fingerprint, job fingerprint, ruleset version)``.
    Seeing a new ruleset version drops every stored entry.
    """

    def __init__(self, max_size: int = 1024) -> None:
        if max_size < 1:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        self._entries: OrderedDict[CacheKey, EligibilityResult] = OrderedDict()
        self._version: int | None = None
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> EligibilityResult | None:
        with self._lock:
            self._sync_version(key[2])
            result = self._entries.get(key)
            if result is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return result

    def put(self, key: CacheKey, result: EligibilityResult) -> None:
        with self._lock:
            self._sync_version(key[2])
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sync_version(self, version: int) -> None:
        if self._version != version:
            self._entries.clear()
            self._version = version


def create_cache(max_size: int | None = None) -> VerdictCache:
    return VerdictCache(max_size=max_size or 1024)
