from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict

from fastapi import Request


@dataclass
class RateLimitEntry:
    count: int
    expiry: float


@dataclass
class RateLimiter:
    max_requests: int = 5
    window_seconds: int = 60
    time_fn: Callable[[], float] = time.monotonic
    _entries: Dict[str, RateLimitEntry] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def check(self, key: str) -> bool:
        now = float(self.time_fn())
        with self._lock:
            entry = self._entries.get(key)
            # window is anchored at the first request after expiry, not a clock boundary
            if entry is None or now > entry.expiry:
                self._entries[key] = RateLimitEntry(count=1, expiry=now + self.window_seconds)
                return True
            if entry.count >= self.max_requests:
                return False
            entry.count += 1
            return True

    def size(self) -> int:
        return len(self._entries)


def client_key(request: Request) -> str:
    # X-Forwarded-For is client-controlled unless a trusted proxy sets it.
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client:
        return request.client.host
    return "unknown"
