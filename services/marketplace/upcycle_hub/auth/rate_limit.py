"""In-memory sliding-window limiter guarding registration in local auth mode"""
import asyncio
import logging
import math
import time
from collections import defaultdict, deque
from typing import Callable, Optional

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


class LocalRateLimiter:
    """Simple per-client limiter used when no external provider enforces limits"""

    def __init__(
        self,
        times: int,
        seconds: int,
        clock: Callable[[], float] = time.monotonic,
        cleanup_interval: float = 60.0,
    ):
        self._hits: defaultdict[str, deque] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._times = times
        self._seconds = seconds
        self._clock = clock
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    async def __call__(self, request: Request) -> None:
        client_host = request.client.host if request.client else "anonymous"
        retry_after = await self.hit(f"ip:{client_host}:{request.url.path}")
        if retry_after is not None:
            logger.warning(f"Rate limit exceeded for {client_host} on {request.url.path}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests: email rate limit exceeded",
                headers={"Retry-After": str(retry_after)},
            )

    def _cleanup_old_keys(self, now: float) -> None:
        """Drop keys whose hits have all left the window; caller holds the lock"""
        if now - self._last_cleanup < self._cleanup_interval:
            return

        self._last_cleanup = now
        window_start = now - self._seconds
        keys_to_remove = []
        for key, hits in self._hits.items():
            while hits and hits[0] <= window_start:
                hits.popleft()
            if not hits:
                keys_to_remove.append(key)

        for key in keys_to_remove:
            del self._hits[key]
        if keys_to_remove:
            logger.debug(f"Dropped {len(keys_to_remove)} idle rate limit keys, {len(self._hits)} tracked")

    async def hit(self, key: str) -> Optional[int]:
        """Record a hit; returns seconds to wait when the window is full"""
        now = self._clock()
        window_start = now - self._seconds
        async with self._lock:
            self._cleanup_old_keys(now)
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= self._times:
                return max(1, math.ceil(hits[0] + self._seconds - now))
            hits.append(now)
            return None

    async def reset(self) -> None:
        async with self._lock:
            self._hits.clear()
