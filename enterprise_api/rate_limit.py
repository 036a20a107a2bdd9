"""In-memory per-client rate limiter over a sliding time window."""
from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Deque, Dict

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float


@dataclass
class ClientWindow:
    """Timestamps of the requests a single client made inside the window."""

    timestamps: Deque[float] = field(default_factory=deque)
    lock: Lock = field(default_factory=Lock)
    retired: bool = False

    def prune(self, cutoff: float) -> None:
        # Timestamps are appended in arrival order, but a caller-supplied
        # clock may step backwards, so scan the whole window.
        if any(ts < cutoff for ts in self.timestamps):
            self.timestamps = deque(ts for ts in self.timestamps if ts >= cutoff)


class RateLimiter:
    """Tracks requests per client identifier within a sliding window.

    Each client's window has its own lock so that concurrent checks for
    different clients never wait on each other; the registry lock only
    guards inserting new clients and sweeping expired ones.
    """

    def __init__(self, limit: int, window_seconds: float, sweep_every: int = 0) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window = window_seconds
        self.sweep_every = sweep_every
        self._windows: Dict[str, ClientWindow] = {}
        self._registry_lock = Lock()
        self._checks = itertools.count(1)

    def __len__(self) -> int:
        return len(self._windows)

    def check(self, client_id: str, now: float) -> RateLimitResult:
        """Record a request for ``client_id`` at ``now`` unless it is over the limit."""

        cutoff = now - self.window
        while True:
            window = self._window_for(client_id)
            with window.lock:
                if window.retired:
                    continue
                window.prune(cutoff)
                count = len(window.timestamps)
                if count >= self.limit:
                    result = RateLimitResult(
                        allowed=False,
                        limit=self.limit,
                        remaining=0,
                        reset_at=min(window.timestamps) + self.window,
                    )
                else:
                    window.timestamps.append(now)
                    result = RateLimitResult(
                        allowed=True,
                        limit=self.limit,
                        remaining=self.limit - (count + 1),
                        reset_at=now + self.window,
                    )
            break
        self._maybe_sweep(now)
        return result

    def sweep(self, now: float) -> int:
        """Forget every client whose whole window has expired."""

        cutoff = now - self.window
        removed = 0
        with self._registry_lock:
            for client_id, window in list(self._windows.items()):
                with window.lock:
                    window.prune(cutoff)
                    if window.timestamps:
                        continue
                    window.retired = True
                del self._windows[client_id]
                removed += 1
        if removed:
            LOGGER.debug("swept %d expired rate limit windows", removed)
        return removed

    def clear(self) -> None:
        with self._registry_lock:
            for window in self._windows.values():
                with window.lock:
                    window.retired = True
            self._windows.clear()

    def _window_for(self, client_id: str) -> ClientWindow:
        window = self._windows.get(client_id)
        if window is not None:
            return window
        with self._registry_lock:
            return self._windows.setdefault(client_id, ClientWindow())

    def _maybe_sweep(self, now: float) -> None:
        if self.sweep_every <= 0:
            return
        if next(self._checks) % self.sweep_every == 0:
            self.sweep(now)
