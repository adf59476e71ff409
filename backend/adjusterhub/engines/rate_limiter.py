"""Fixed-window, in-memory rate limiting.

Usage::

    limiter = FixedWindowRateLimiter(AUTH_RULE)
    decision = limiter.acquire("auth:203.0.113.7")
    if not decision.allowed:
        ...  # 429, Retry-After: decision.retry_after
    ...
    limiter.settle("auth:203.0.113.7", succeeded=response.status_code < 400)

A request is counted when it is acquired, unless the rule skips failed
requests; ``settle`` then corrects the count once the outcome is known.
Counting up front keeps concurrent bursts from slipping past the limit.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional


@dataclass(frozen=True)
class RateLimitRule:
    name: str
    window_seconds: float
    max_requests: int
    message: str = "Too many requests, please try again later."
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds
    retry_after: int  # seconds, 0 when allowed

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(math.ceil(self.reset_at))),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


@dataclass
class _Window:
    count: int
    reset_at: float


# Canonical rules.
AUTH_RULE = RateLimitRule(
    name="auth",
    window_seconds=15 * 60,
    max_requests=5,
    message="Too many authentication attempts, please try again later",
    skip_successful_requests=True,
)
PASSWORD_RESET_RULE = RateLimitRule(
    name="password",
    window_seconds=60 * 60,
    max_requests=3,
    message="Too many password reset attempts, please try again later",
)
TWO_FACTOR_RULE = RateLimitRule(
    name="2fa",
    window_seconds=15 * 60,
    max_requests=5,
    message="Too many 2FA verification attempts, please try again later",
)
UPLOAD_RULE = RateLimitRule(
    name="upload",
    window_seconds=60,
    max_requests=10,
    message="Too many file uploads, please try again later",
    skip_failed_requests=True,
)
MESSAGES_RULE = RateLimitRule(
    name="messages",
    window_seconds=60,
    max_requests=30,
    message="Too many messages sent, please slow down",
)
API_RULE = RateLimitRule(
    name="api",
    window_seconds=60,
    max_requests=100,
    message="Too many API requests, please try again later",
)


class FixedWindowRateLimiter:
    """Thread-safe per-key counter over fixed time windows."""

    def __init__(self, rule: RateLimitRule, clock: Callable[[], float] = time.time):
        self.rule = rule
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _window(self, key: str, now: float) -> _Window:
        window = self._windows.get(key)
        if window is None or now >= window.reset_at:
            window = _Window(count=0, reset_at=now + self.rule.window_seconds)
            self._windows[key] = window
        return window

    def _decision(self, window: _Window, allowed: bool, now: float) -> RateLimitDecision:
        retry_after = 0 if allowed else max(1, int(math.ceil(window.reset_at - now)))
        return RateLimitDecision(
            allowed=allowed,
            limit=self.rule.max_requests,
            remaining=max(0, self.rule.max_requests - window.count) if allowed else 0,
            reset_at=window.reset_at,
            retry_after=retry_after,
        )

    def acquire(self, key: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            window = self._window(key, now)
            if window.count >= self.rule.max_requests:
                return self._decision(window, False, now)
            if not self.rule.skip_failed_requests:
                window.count += 1
            return self._decision(window, True, now)

    def settle(self, key: str, succeeded: bool) -> None:
        """Correct the count for an acquired request once its outcome is known."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                return
            if succeeded and self.rule.skip_successful_requests and not self.rule.skip_failed_requests:
                window.count = max(0, window.count - 1)
            elif succeeded and self.rule.skip_failed_requests:
                window.count += 1

    def peek(self, key: str) -> Optional[int]:
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._clock() >= window.reset_at:
                return None
            return window.count

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, w in self._windows.items() if now >= w.reset_at]
            for key in expired:
                del self._windows[key]
        return len(expired)


ALL_RULES = (AUTH_RULE, PASSWORD_RESET_RULE, TWO_FACTOR_RULE, UPLOAD_RULE, MESSAGES_RULE, API_RULE)


def build_limiters(
    rules: Iterable[RateLimitRule] = ALL_RULES, clock: Callable[[], float] = time.time
) -> Dict[str, FixedWindowRateLimiter]:
    """One limiter per rule, keyed by rule name."""
    return {rule.name: FixedWindowRateLimiter(rule, clock=clock) for rule in rules}
