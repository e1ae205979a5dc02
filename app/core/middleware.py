from __future__ import annotations

"""HTTP middleware: security headers and per-client rate limiting.

Both are plain function middlewares registered via ``app.middleware("http")``,
the same way the request context middleware is wired in ``app.main``.
"""
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi.responses import JSONResponse
from starlette import status

SECURITY_HEADERS: Dict[str, str] = {
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'self'",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
}


async def security_headers_middleware(request, call_next):  # type: ignore
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


@dataclass
class _Window:
    started_at: float
    count: int


class RateLimiter:
    """Fixed-window request counter keyed by client address."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}

    def hit(self, key: str) -> float:
        """Record a request; return 0 if allowed, else seconds until the window resets."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            self._purge(now)
            self._windows[key] = _Window(started_at=now, count=1)
            return 0.0
        if window.count >= self.max_requests:
            return self.window_seconds - (now - window.started_at)
        window.count += 1
        return 0.0

    def _purge(self, now: float) -> None:
        expired = [
            k
            for k, w in self._windows.items()
            if now - w.started_at >= self.window_seconds
        ]
        for k in expired:
            self._windows.pop(k, None)


def make_rate_limit_middleware(limiter: RateLimiter):
    async def rate_limit_middleware(request, call_next):  # type: ignore
        client = request.client.host if request.client else "anonymous"
        retry_after = limiter.hit(client)
        if retry_after > 0:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests"},
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )
        return await call_next(request)

    return rate_limit_middleware
