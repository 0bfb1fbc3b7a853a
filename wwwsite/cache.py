"""A value cache that refreshes itself in the background once it goes stale."""

from __future__ import annotations

import sys
import threading
import time
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

CACHE_TTL_SECS = 120


class Cache(Generic[T]):
    """Holds a fetched value and re-fetches it in the background after ``ttl`` seconds.

    Readers always get the value currently held, never waiting on a fetch.
    A failed fetch is reported on stderr and the old value is kept.
    """

    def __init__(self, fetcher: Callable[[], T], initial: T, ttl: float = CACHE_TTL_SECS):
        self._fetcher = fetcher
        self._value = initial
        self._ttl = ttl
        self._stamp = time.monotonic()
        self._lock = threading.Lock()
        self._refreshing = False

    @property
    def value(self) -> T:
        """The value currently held, without triggering a refresh."""
        with self._lock:
            return self._value

    def get(self) -> T:
        """Return the held value, starting a background refresh if it is stale."""
        with self._lock:
            value = self._value
            stale = time.monotonic() - self._stamp > self._ttl
            start = stale and not self._refreshing
            if start:
                self._refreshing = True
        if start:
            threading.Thread(target=self._background_refresh, daemon=True).start()
        return value

    def refresh(self) -> bool:
        """Fetch a new value now; return whether it replaced the old one."""
        try:
            value = self._fetcher()
        except Exception as exc:  # noqa: BLE001 - any fetch failure keeps the old value
            print(f"failed to update cache: {exc}", file=sys.stderr)
            return False
        with self._lock:
            self._value = value
            self._stamp = time.monotonic()
        return True

    def _background_refresh(self) -> None:
        try:
            self.refresh()
        finally:
            with self._lock:
                self._refreshing = False