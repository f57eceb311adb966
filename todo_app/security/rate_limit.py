"""
Per-client request rate limiting.

Implements a sliding-window limiter: for each client identifier the
limiter keeps the instants of its recent requests and admits a new request
only while fewer than ``limit`` of them fall inside the trailing window.

The limiter is in-memory and single-process.  Callers depend only on the
:class:`RateLimiter` interface, so a limiter backed by a shared external
counter can be substituted for multi-instance deployments.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from functools import wraps
from threading import Lock

from flask import Response, current_app, request

from ..errors import RateLimited

logger = logging.getLogger(__name__)

EXTENSION_KEY = "rate_limiter"


class RateLimiter(ABC):
    """Interface for admitting or denying requests per client identifier."""

    window_seconds: float

    @abstractmethod
    def allow(self, client_id: str) -> bool:
        """Return ``True`` if the request from *client_id* is admitted."""

    @abstractmethod
    def reset(self) -> None:
        """Forget all recorded requests."""


class SlidingWindowRateLimiter(RateLimiter):
    """
    Thread-safe sliding-window limiter.

    A single lock guards the whole map; the critical section only prunes
    and appends timestamps and never performs I/O.

    Args:
        limit: Maximum number of admitted requests per client within the
            window.
        window_seconds: Length of the trailing window.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, list[float]] = {}
        self._lock = Lock()
        self._last_sweep = clock()

        logger.info("Rate limiter initialized: %d requests per %.1fs", limit, window_seconds)

    def allow(self, client_id: str) -> bool:
        with self._lock:
            now = self._clock()
            self._sweep(now)

            recent = [
                instant
                for instant in self._requests.get(client_id, [])
                if now - instant < self.window_seconds
            ]
            admitted = len(recent) < self.limit
            if admitted:
                recent.append(now)
            self._requests[client_id] = recent

        if not admitted:
            logger.warning("Rate limit exceeded for client %s", client_id)
        return admitted

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()
            self._last_sweep = self._clock()

    def tracked_clients(self) -> int:
        """Number of client identifiers currently held in memory."""
        with self._lock:
            return len(self._requests)

    def _sweep(self, now: float) -> None:
        # Caller holds the lock. Runs at most once per window.
        if now - self._last_sweep < self.window_seconds:
            return
        stale = [
            client_id
            for client_id, instants in self._requests.items()
            if not instants or now - instants[-1] >= self.window_seconds
        ]
        for client_id in stale:
            del self._requests[client_id]
        if stale:
            logger.debug("Dropped %d idle rate-limit windows", len(stale))
        self._last_sweep = now


def get_rate_limiter() -> RateLimiter | None:
    """Return the limiter bound to the current app, or ``None`` if disabled."""
    return current_app.extensions.get(EXTENSION_KEY)


def client_identifier() -> str:
    """
    Identify the caller by its transport-level peer address.

    Clients behind a shared NAT or proxy are counted together.
    """
    return request.remote_addr or "unknown"


def rate_limited(view_func: Callable[..., tuple[Response, int] | Response]):
    """
    Decorator that rejects the request with ``429`` (``RateLimited``) once
    the caller's window is exhausted.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        limiter = get_rate_limiter()
        if limiter is not None and not limiter.allow(client_identifier()):
            raise RateLimited(retry_after=limiter.window_seconds)
        return view_func(*args, **kwargs)

    return wrapper
