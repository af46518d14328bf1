"""Request context middleware: request IDs, timing, request logs and rate limiting.

Generation requests fan out into many Notion calls and one long LLM call, so
they are throttled per client with a token bucket. Clients are keyed by a
fingerprint of their Notion credential when they send one, else by IP.
"""

import hashlib
import logging
import threading
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import request_id_var
from ..exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)

NOTION_KEY_HEADER = "notion-api-key"

# {client_key: (available_tokens, last_refill_timestamp)}
_rate_buckets: dict[str, tuple[float, float]] = {}
_rate_lock = threading.Lock()

_STALE_AFTER = 120.0  # seconds without traffic before a bucket is dropped
_SWEEP_EVERY = 100
_calls_since_sweep = 0

_EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


def check_rate_limit(
    bucket: dict[str, tuple[float, float]],
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> tuple[bool, float]:
    """Take one token for *key* from *bucket* (mutated in place).

    Returns:
        ``(allowed, retry_after)``; *retry_after* is the seconds until the next
        token when denied, else 0.0. A non-positive limit disables throttling.
    """
    global _calls_since_sweep

    if max_per_minute <= 0:
        return True, 0.0
    if now is None:
        now = time.monotonic()

    _calls_since_sweep += 1
    if _calls_since_sweep >= _SWEEP_EVERY:
        _calls_since_sweep = 0
        for stale in [k for k, (_, ts) in bucket.items() if now - ts > _STALE_AFTER]:
            del bucket[stale]

    per_second = max_per_minute / 60.0
    tokens, last = bucket.get(key, (float(max_per_minute), now))
    tokens = min(float(max_per_minute), tokens + (now - last) * per_second)

    if tokens < 1.0:
        bucket[key] = (tokens, now)
        return False, (1.0 - tokens) / per_second

    bucket[key] = (tokens - 1.0, now)
    return True, 0.0


def client_key(request: Request) -> str:
    """Credential fingerprint, else forwarded/peer IP."""
    credential = request.headers.get(NOTION_KEY_HEADER)
    if credential:
        return "key:" + hashlib.sha256(credential.encode()).hexdigest()[:16]
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitedError(AppException):
    def __init__(self, retry_after: float):
        super().__init__(
            "Too many requests",
            ErrorCode.RATE_LIMITED,
            status_code=429,
            details={"retry_after": round(retry_after, 1)},
        )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets the request ID, throttles, times and logs every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        if request.url.path not in _EXEMPT_PATHS:
            key = client_key(request)
            with _rate_lock:
                allowed, retry_after = check_rate_limit(
                    _rate_buckets, key, settings.rate_limit_per_minute
                )
            if not allowed:
                error = RateLimitedError(retry_after)
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": key, "path": request.url.path, "retry_after": error.details["retry_after"]},
                )
                return JSONResponse(
                    status_code=error.status_code,
                    content=error.to_dict(),
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
