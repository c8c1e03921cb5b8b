"""
Redis-based rate limiting middleware.
Implements per-client-IP limits with a sliding window algorithm.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import redis.asyncio as redis
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.errors import RateLimitExceededError
from core.middleware.error_handling import error_envelope

logger = logging.getLogger(__name__)


class RateLimitWindow(str, Enum):
    """Time window types for rate limiting."""
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"


WINDOW_SECONDS = {
    RateLimitWindow.SECOND: 1,
    RateLimitWindow.MINUTE: 60,
    RateLimitWindow.HOUR: 3600,
}


@dataclass
class RateLimitRule:
    """Rate limit rule configuration."""
    name: str
    window: RateLimitWindow
    max_requests: int
    paths: Optional[List[str]] = None  # Path prefixes the rule applies to
    methods: Optional[List[str]] = None  # HTTP methods the rule applies to

    def applies_to(self, method: str, path: str) -> bool:
        if self.paths and not any(path.startswith(prefix) for prefix in self.paths):
            return False
        if self.methods and method not in self.methods:
            return False
        return True


def default_rules(
    api_prefix: str,
    per_minute: int = 100,
    login_per_minute: int = 5,
) -> List[RateLimitRule]:
    """
    Default rules: a strict login limit, a tighter limit on public
    application submissions and a general per-IP limit.
    """
    prefix = api_prefix.rstrip("/")
    return [
        RateLimitRule(
            name="login",
            window=RateLimitWindow.MINUTE,
            max_requests=login_per_minute,
            paths=[f"{prefix}/auth/login"],
            methods=["POST"],
        ),
        RateLimitRule(
            name="submit",
            window=RateLimitWindow.MINUTE,
            max_requests=max(1, per_minute // 10),
            paths=[f"{prefix}/applications/submit/"],
            methods=["POST"],
        ),
        RateLimitRule(
            name="ip",
            window=RateLimitWindow.MINUTE,
            max_requests=per_minute,
        ),
    ]


class SlidingWindowRateLimiter:
    """
    Redis-based sliding window rate limiter.

    Each key is a sorted set of request timestamps; entries older than the
    window are dropped before counting.
    """

    def __init__(self, redis_client: Redis):
        """
        Initialize rate limiter.

        Args:
            redis_client: Async Redis client instance
        """
        self.redis = redis_client

    async def is_allowed(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
    ) -> tuple[bool, Dict[str, Any]]:
        """
        Check if request is allowed under rate limit.

        Args:
            key: Unique identifier for the rate limit
            max_requests: Maximum requests allowed in window
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_allowed, metadata)
            metadata contains: limit, remaining, reset, retry_after
        """
        now = time.time()
        window_start = now - window_seconds
        member = f"{now}:{uuid.uuid4().hex[:8]}"

        try:
            pipe = self.redis.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.zadd(key, {member: now})
            pipe.expire(key, window_seconds + 60)
            results = await pipe.execute()

            # Count before this request was added
            current_count = results[1]
            allowed = current_count + 1 <= max_requests
            retry_after = 0

            if not allowed:
                oldest = await self.redis.zrange(key, 0, 0, withscores=True)
                if oldest:
                    retry_after = int(oldest[0][1] + window_seconds - now) + 1
                else:
                    retry_after = window_seconds
                await self.redis.zrem(key, member)

            return allowed, {
                'limit': max_requests,
                'remaining': max(0, max_requests - current_count - 1),
                'reset': int(now + window_seconds),
                'retry_after': max(0, retry_after),
                'member': member if allowed else None,
            }

        except (RedisError, OSError) as e:
            logger.error(f"Redis error in rate limiter: {e}")
            # Fail open
            return True, {
                'limit': max_requests,
                'remaining': max_requests,
                'reset': int(now + window_seconds),
                'retry_after': 0,
                'member': None,
                'error': 'redis_unavailable',
            }

    async def release(self, key: str, member: str) -> None:
        """Remove a request recorded by is_allowed."""
        try:
            await self.redis.zrem(key, member)
        except (RedisError, OSError) as e:
            logger.error(f"Redis error releasing rate limit entry: {e}")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware keyed on the client IP.

    All matching rules are checked; the most restrictive one decides the
    X-RateLimit-* headers. Requests are allowed when Redis is unavailable.
    """

    def __init__(
        self,
        app: ASGIApp,
        redis_url: Optional[str] = None,
        rules: Optional[List[RateLimitRule]] = None,
        key_prefix: str = "ratelimit",
        enable_headers: bool = True,
        redis_client: Optional[Redis] = None,
    ):
        """
        Initialize rate limiting middleware.

        Args:
            app: The ASGI application
            redis_url: Redis connection URL
            rules: Rate limit rules to apply
            key_prefix: Prefix for Redis keys
            enable_headers: Whether to add rate limit headers to responses
            redis_client: Pre-built client (takes precedence over redis_url)
        """
        super().__init__(app)
        self.redis_url = redis_url
        self.redis_client = redis_client
        self.limiter = SlidingWindowRateLimiter(redis_client) if redis_client else None
        self.rules = rules or default_rules("/api/v1")
        self.key_prefix = key_prefix
        self.enable_headers = enable_headers

    def _initialize(self) -> None:
        """Create the Redis client lazily."""
        if self.limiter or not self.redis_url:
            return
        try:
            self.redis_client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
            )
            self.limiter = SlidingWindowRateLimiter(self.redis_client)
            logger.info("Rate limiter initialized")
        except (RedisError, ValueError) as e:
            logger.error(f"Failed to initialize rate limiter: {e}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        self._initialize()

        if not self.limiter or request.url.path in ('/health', '/ready'):
            return await call_next(request)

        result = await self._check_rate_limits(request)

        if not result['allowed']:
            error = RateLimitExceededError()
            logger.warning(
                f"Rate limit exceeded: {request.method} {request.url.path} "
                f"(rule={result['rule']})"
            )
            response = JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=error_envelope(
                    error.code,
                    error.message,
                    request_id=request.headers.get('x-request-id'),
                ),
            )
            self._add_rate_limit_headers(response, result)
            return response

        response = await call_next(request)
        if self.enable_headers:
            self._add_rate_limit_headers(response, result)
        return response

    async def _check_rate_limits(self, request: Request) -> Dict[str, Any]:
        """
        Check all applicable rate limits for a request.

        Args:
            request: The incoming request

        Returns:
            Dictionary with rate limit check results
        """
        results = {
            'allowed': True,
            'limit': 0,
            'remaining': 0,
            'reset': 0,
            'retry_after': 0,
            'rule': None,
        }
        client_ip = self._get_client_ip(request)
        recorded = []

        for rule in self.rules:
            if not rule.applies_to(request.method, request.url.path):
                continue

            key = ":".join([self.key_prefix, rule.name, rule.window.value, client_ip])
            allowed, metadata = await self.limiter.is_allowed(
                key=key,
                max_requests=rule.max_requests,
                window_seconds=WINDOW_SECONDS[rule.window],
            )
            if metadata.get('member'):
                recorded.append((key, metadata['member']))

            if not allowed:
                results['allowed'] = False
                results['rule'] = rule.name
                results['retry_after'] = max(results['retry_after'], metadata['retry_after'])

            if results['limit'] == 0 or metadata['remaining'] < results['remaining']:
                results['limit'] = metadata['limit']
                results['remaining'] = metadata['remaining']
                results['reset'] = metadata['reset']

        # Denied requests leave no entry in any window
        if not results['allowed']:
            for key, member in recorded:
                await self.limiter.release(key, member)

        return results

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get('x-forwarded-for')
        if forwarded_for:
            return forwarded_for.split(',')[0].strip()

        real_ip = request.headers.get('x-real-ip')
        if real_ip:
            return real_ip

        return request.client.host if request.client else 'unknown'

    def _add_rate_limit_headers(self, response: Response, result: Dict[str, Any]):
        response.headers['X-RateLimit-Limit'] = str(result['limit'])
        response.headers['X-RateLimit-Remaining'] = str(result['remaining'])
        response.headers['X-RateLimit-Reset'] = str(result['reset'])

        if not result['allowed']:
            response.headers['Retry-After'] = str(result['retry_after'])
