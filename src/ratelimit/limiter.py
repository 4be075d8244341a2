"""Sliding-window rate limiter keyed by client id.

Each client id owns a deque of admission timestamps (epoch ms). An admission
check prunes timestamps that have left the window, denies when the remaining
count has reached the budget, and otherwise records ``now``.

The map of windows is guarded by a single lock that is held only for lookup,
creation and eviction. Each window carries its own lock so checks for one
client are serialized while different clients proceed independently. No lock
is ever held across an ``await``.

State is process-local: running N instances gives each client N times the
configured budget.

Usage:
    limiter = SlidingWindowRateLimiter(window_ms=60_000, max_requests=5)
    admission = limiter.admit("203.0.113.7")
    if not admission.allowed:
        return 429, admission.retry_after_seconds
"""

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass, field

from src.ratelimit.config import RateLimitConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Admission:
    """Outcome of one admission check.

    Attributes:
        allowed: Whether the request was admitted (and counted).
        retry_after_seconds: Seconds until the oldest counted request leaves
            the window. Zero when allowed.
    """

    allowed: bool
    retry_after_seconds: int = 0


@dataclass
class _ClientWindow:
    timestamps: deque[int] = field(default_factory=deque)
    lock: threading.Lock = field(default_factory=threading.Lock)
    evicted: bool = False

    def prune(self, now_ms: int, window_ms: int) -> None:
        # Fresh means strictly younger than the window
        while self.timestamps and now_ms - self.timestamps[0] >= window_ms:
            self.timestamps.popleft()


def _now_ms() -> int:
    return int(time.time() * 1000)


class SlidingWindowRateLimiter:
    """In-process per-client sliding-window admission control.

    Args:
        window_ms: Length of the sliding window in milliseconds.
        max_requests: Admissions allowed per client within one window.
        sweep_interval_ms: Minimum time between idle-client eviction sweeps.
            Sweeps are triggered by admission checks.
    """

    def __init__(
        self,
        window_ms: int = 60_000,
        max_requests: int = 5,
        sweep_interval_ms: int = 60_000,
    ) -> None:
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {max_requests}")

        self._window_ms = window_ms
        self._max_requests = max_requests
        self._sweep_interval_ms = sweep_interval_ms
        self._windows: dict[str, _ClientWindow] = {}
        self._map_lock = threading.Lock()
        self._last_sweep_ms: int | None = None

    @classmethod
    def from_config(cls, config: RateLimitConfig) -> "SlidingWindowRateLimiter":
        """Build a limiter from RATE_LIMIT_* settings."""
        return cls(
            window_ms=config.window_ms,
            max_requests=config.max_requests,
            sweep_interval_ms=config.sweep_interval_ms,
        )

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def client_count(self) -> int:
        """Number of client ids currently tracked."""
        with self._map_lock:
            return len(self._windows)

    def admit(self, client_id: str, now_ms: int | None = None) -> Admission:
        """Check and record one request for ``client_id``.

        Args:
            client_id: Client identity (see ``src.api.rate_limit.get_client_id``).
            now_ms: Current time in epoch milliseconds (default: wall clock).

        Returns:
            Admission. A denied attempt is not counted against the window.
        """
        now = _now_ms() if now_ms is None else now_ms
        self._maybe_sweep(now)

        while True:
            window = self._get_window(client_id)
            with window.lock:
                if window.evicted:
                    # Lost a race with the sweep; retry on a fresh window
                    continue
                window.prune(now, self._window_ms)

                if len(window.timestamps) >= self._max_requests:
                    oldest = window.timestamps[0]
                    retry_after_ms = max(0, self._window_ms - (now - oldest))
                    return Admission(
                        allowed=False,
                        retry_after_seconds=math.ceil(retry_after_ms / 1000),
                    )

                window.timestamps.append(now)
                return Admission(allowed=True)

    def evict_idle(self, now_ms: int | None = None) -> int:
        """Remove client ids whose window is empty after pruning.

        Windows currently locked by an in-flight check are skipped and
        revisited on the next sweep.

        Returns:
            Number of client ids evicted.
        """
        now = _now_ms() if now_ms is None else now_ms
        evicted = 0
        with self._map_lock:
            for client_id, window in list(self._windows.items()):
                if not window.lock.acquire(blocking=False):
                    continue
                try:
                    window.prune(now, self._window_ms)
                    if not window.timestamps:
                        window.evicted = True
                        del self._windows[client_id]
                        evicted += 1
                finally:
                    window.lock.release()
            self._last_sweep_ms = now

        if evicted:
            logger.debug("Evicted %d idle rate-limit windows", evicted)
        return evicted

    def _get_window(self, client_id: str) -> _ClientWindow:
        with self._map_lock:
            window = self._windows.get(client_id)
            if window is None:
                window = _ClientWindow()
                self._windows[client_id] = window
            return window

    def _maybe_sweep(self, now_ms: int) -> None:
        last = self._last_sweep_ms
        if last is None:
            self._last_sweep_ms = now_ms
            return
        if now_ms - last >= self._sweep_interval_ms:
            self.evict_idle(now_ms)
