"""
placement_api/core/rate_limit.py

Purpose: Per-client request limits

- Fixed-window counters keyed by client address
- Applied as a dependency on the API routers only
- Health endpoints are never counted
"""

import time
from typing import Callable

from fastapi import Request
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from placement_api.core.exceptions import RateLimitExceededError
from placement_api.core.logging import get_logger

logger = get_logger(__name__)


def get_remote_address(request: Request) -> str:
    """Client address as seen after proxy header handling."""
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    Request limiter for a group of routes.

    Usage:
        limiter = RateLimiter("100 per 15 minutes")
        app.include_router(router, dependencies=[Depends(limiter)])
    """

    def __init__(
        self,
        limit: str,
        enabled: bool = True,
        key_func: Callable[[Request], str] = get_remote_address,
        scope: str = "api"
    ):
        self.item = parse(limit)
        self.enabled = enabled
        self.key_func = key_func
        self.scope = scope
        self._limiter = FixedWindowRateLimiter(MemoryStorage())

    async def __call__(self, request: Request):
        if not self.enabled:
            return

        key = self.key_func(request)
        if self._limiter.hit(self.item, self.scope, key):
            return

        stats = self._limiter.get_window_stats(self.item, self.scope, key)
        retry_after = max(1, int(stats.reset_time - time.time()))

        logger.warning(
            f"Rate limit exceeded: {request.method} {request.url.path}",
            extra={"client": key, "path": request.url.path}
        )
        raise RateLimitExceededError(retry_after)
