"""
Sliding-window request admission per logical endpoint.

Admission is a pure check: a denied request is never queued or delayed,
the caller moves on to its next provider or to synthetic data.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True)
class RateLimit:
    """Admission budget for one endpoint key."""
    key: str
    max_requests: int
    window_ms: int


MINUTE_MS = 60_000
DAY_MS = 86_400_000

# Published free-tier budgets per provider endpoint
PROVIDER_LIMITS = {
    "openai": RateLimit("openai", 60, MINUTE_MS),
    "gemini": RateLimit("gemini", 60, MINUTE_MS),
    "virustotal": RateLimit("virustotal", 4, MINUTE_MS),
    "virustotal-file": RateLimit("virustotal-file", 4, MINUTE_MS),
    "abuseipdb": RateLimit("abuseipdb", 1000, DAY_MS),
    "coingecko": RateLimit("coingecko", 50, MINUTE_MS),
    "etherscan": RateLimit("etherscan", 5, 1000),
    "dappier": RateLimit("dappier", 30, MINUTE_MS),
}


class RateLimiter:
    """
    Per-key sliding window of request timestamps.

    Windows are created lazily on the first request for a key and live for
    the lifetime of the limiter. Each key's prune/check/append runs under
    its own lock so concurrent threads sharing a key see a consistent window.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or _monotonic_ms
        self._windows: Dict[str, Deque[float]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, endpoint_key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(endpoint_key)
            if lock is None:
                lock = self._locks[endpoint_key] = threading.Lock()
                self._windows[endpoint_key] = deque()
            return lock

    def can_make_request(self, endpoint_key: str, max_requests: int, window_ms: float) -> bool:
        """
        Admit or deny one request for endpoint_key.

        Args:
            endpoint_key: Logical endpoint name (e.g. "virustotal")
            max_requests: Requests allowed within the window
            window_ms: Window length in milliseconds

        Returns:
            True if admitted (and recorded), False if the caller must fall back
        """
        lock = self._lock_for(endpoint_key)
        with lock:
            now = self._clock()
            window = self._windows.setdefault(endpoint_key, deque())

            # Timestamps are appended in order, so stale ones sit at the left
            while window and now - window[0] >= window_ms:
                window.popleft()

            if len(window) >= max_requests:
                return False

            window.append(now)
            return True

    def admit(self, limit: RateLimit) -> bool:
        """Admission check using a RateLimit descriptor."""
        return self.can_make_request(limit.key, limit.max_requests, limit.window_ms)

    def pending(self, endpoint_key: str) -> int:
        """Number of timestamps currently recorded for endpoint_key."""
        lock = self._lock_for(endpoint_key)
        with lock:
            return len(self._windows.get(endpoint_key, ()))

    def reset(self, endpoint_key: Optional[str] = None) -> None:
        """Forget recorded requests for one key, or for every key."""
        with self._registry_lock:
            if endpoint_key is None:
                self._windows.clear()
                self._locks.clear()
            else:
                self._windows.pop(endpoint_key, None)
                self._locks.pop(endpoint_key, None)
