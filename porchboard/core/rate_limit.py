"""
Fixed-window rate limiting middleware, keyed by client IP

Counters live in process memory, so each replica enforces its own budget.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from typing import Callable, Dict, Tuple
import asyncio
import time
import structlog

logger = structlog.get_logger(__name__)

EXEMPT_PATHS = {"/health"}


class FixedWindowCounter:
    """Request counter that resets at the end of each window"""

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str) -> Tuple[int, float]:
        """Record a request for key; return (count in window, seconds until reset)"""
        now = self._clock()
        async with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)

            # Drop windows that have already ended
            if len(self._windows) > 10_000:
                self._windows = {
                    k: v for k, v in self._windows.items()
                    if now - v[0] < self.window_seconds
                }

        return count, max(started + self.window_seconds - now, 0.0)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed max_requests per window with 429"""

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        enabled: bool = True,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.enabled = enabled
        self.counter = FixedWindowCounter(window_seconds)
        logger.info(f"Rate limiting: enabled={enabled} max={max_requests} window={window_seconds}s")

    def _client_key(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.enabled or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client = self._client_key(request)
        count, reset_in = await self.counter.hit(client)
        remaining = max(self.max_requests - count, 0)
        headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(int(reset_in)),
        }

        if count > self.max_requests:
            logger.warning(f"Rate limit exceeded: client={client} path={request.url.path} count={count}")
            headers["Retry-After"] = str(max(int(reset_in), 1))
            return JSONResponse(
                status_code=429,
                content={"status": "error", "message": "Too many requests, please try again later"},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
