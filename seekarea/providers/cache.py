"""Small in-memory TTL cache shared by the HTTP collaborators."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    def __init__(self, ttl_s: float = 15 * 60, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires, value = entry
        if self._clock() > expires:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        for stale in [k for k, (expires, _) in self._entries.items() if now > expires]:
            del self._entries[stale]
        self._entries[key] = (now + self.ttl_s, value)

    def __len__(self) -> int:
        return len(self._entries)


def round_bbox_key(bbox, decimals: int = 2) -> str:
    return ",".join(f"{float(v):.{decimals}f}" for v in bbox)
