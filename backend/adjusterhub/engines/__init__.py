"""Stateless or in-memory engines used by the HTTP edge and the services."""

from adjusterhub.engines.rate_limiter import FixedWindowRateLimiter, RateLimitDecision, RateLimitRule
from adjusterhub.engines.request_screen import RequestScreen, ScreenVerdict
from adjusterhub.engines.ttl_cache import CachePresets, TTLCache, cache_key

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitDecision",
    "RateLimitRule",
    "RequestScreen",
    "ScreenVerdict",
    "TTLCache",
    "CachePresets",
    "cache_key",
]
