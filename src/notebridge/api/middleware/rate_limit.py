"""Per-client token-bucket rate limiting.

Manifesto:
    Buckets are kept in memory per process; ``/health`` is never limited
    so orchestrator probes keep working under load.

Tags:
    notebridge, api, middleware, rate-limiting, token-bucket, 429

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from notebridge.api.middleware.errors import problem_response
from notebridge.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitState:
    """Bucket for one client."""

    tokens: float
    last_update: float = field(default_factory=time.monotonic)


class RateLimiter:
    """Token bucket rate limiter.

    Each client starts with ``max_tokens``; tokens refill at ``refill_rate``
    per second and every request consumes one.
    """

    def __init__(self, max_tokens: float = 120.0, refill_rate: float = 2.0):
        self.max_tokens = max_tokens
        self.refill_rate = refill_rate
        self._lock = threading.Lock()
        self._buckets: dict[str, RateLimitState] = defaultdict(
            lambda: RateLimitState(tokens=self.max_tokens)
        )

    @classmethod
    def per_minute(cls, rpm: int) -> RateLimiter:
        return cls(max_tokens=float(rpm), refill_rate=rpm / 60.0)

    def _get_client_id(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _refill(self, state: RateLimitState) -> None:
        now = time.monotonic()
        elapsed = now - state.last_update
        state.tokens = min(self.max_tokens, state.tokens + elapsed * self.refill_rate)
        state.last_update = now

    def allow_request(self, request: Request) -> tuple[bool, dict[str, str]]:
        """Check if request should be allowed.

        Returns:
            Tuple of (allowed, rate_limit_headers).
        """
        client_id = self._get_client_id(request)
        with self._lock:
            state = self._buckets[client_id]
            self._refill(state)

            headers = {
                "X-RateLimit-Limit": str(int(self.max_tokens)),
                "X-RateLimit-Remaining": str(max(0, int(state.tokens - 1))),
            }
            if state.tokens >= 1:
                state.tokens -= 1
                return True, headers

            retry_after = (1 - state.tokens) / self.refill_rate if self.refill_rate > 0 else 60
            headers["Retry-After"] = str(int(retry_after) + 1)

        logger.warning("rate_limit_exceeded", client_id=client_id, retry_after=retry_after)
        return False, headers


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject over-limit clients with a 429 ProblemDetail."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        enabled: bool = True,
        rpm: int = 120,
        exclude_paths: list[str] | None = None,
    ):
        super().__init__(app)
        self.enabled = enabled
        self.limiter = RateLimiter.per_minute(rpm)
        self.exclude_paths = exclude_paths or ["/health"]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.enabled or any(request.url.path.startswith(p) for p in self.exclude_paths):
            return await call_next(request)

        allowed, headers = self.limiter.allow_request(request)
        if not allowed:
            return problem_response(
                status=429,
                title="Too Many Requests",
                detail="Rate limit exceeded. Please retry later.",
                instance=request.url.path,
                code="RATE_LIMITED",
                headers=headers,
            )

        response = await call_next(request)
        for key, value in headers.items():
            response.headers[key] = value
        return response
