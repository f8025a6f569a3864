"""Short-lived in-process cache for GitHub listings."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any


class TTLCache:
    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        # Keys rotate with credentials, so stale ones are swept here as well as on get.
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self._ttl]
        for stale in expired:
            del self._entries[stale]
        self._entries[key] = (now, value)

    def clear(self, prefix: str = "") -> int:
        """Drop entries whose key starts with ``prefix``; everything when empty."""
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def __len__(self) -> int:
        return len(self._entries)
