"""
Notebox Backend — Rate Limiting Middleware
============================================

What:  Per-IP sliding-window limit on the credential endpoints.
How:   Keeps the timestamps of recent requests per client IP in memory.
       On each request to a limited path, timestamps older than the window
       are dropped; if `limit` remain the request is answered with 429 and a
       Retry-After header, otherwise it is recorded and passed through.
Who:   Guards POST /api/register and POST /api/login against password
       guessing and account spraying. Note routes are not limited.

Algorithm: Sliding Window Log
    Always counts the last `window` seconds, so there is no burst at a
    fixed-window boundary.

Scope:
    State lives in one process. Multiple uvicorn workers each keep their own
    window, so the effective limit is `limit × workers`.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, Iterable, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from notebox.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

DEFAULT_LIMITED_PATHS = ("/api/register", "/api/login")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Args:
        limit: Max requests per client IP per window
        window: Window length in seconds
        paths: Exact paths the limit applies to
        enabled: False turns the middleware into a pass-through
    """

    CLEANUP_EVERY = 1000

    def __init__(
        self,
        app,
        limit: int = 20,
        window: int = 60,
        paths: Iterable[str] = DEFAULT_LIMITED_PATHS,
        enabled: bool = True,
    ):
        super().__init__(app)
        self.limit = limit
        self.window = window
        self.paths = frozenset(paths)
        self.enabled = enabled
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.enabled or request.url.path not in self.paths:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= self.limit:
            retry_after = int(recent[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s on %s: %d requests in %ds window",
                client_ip,
                request.url.path,
                len(recent),
                self.window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": (
                        f"Too many requests. Please wait {retry_after} seconds before retrying."
                    ),
                    "code": "rate_limit_exceeded",
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        recent.append(now)

        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
