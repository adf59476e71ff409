"""In-memory TTL cache with tag-based invalidation.

Entries expire lazily: an expired entry is dropped the next time it is read
or when ``purge_expired`` runs. There is no size bound.

Usage::

    cache = TTLCache(default_ttl=300)
    stats = cache.get_or_set(
        cache_key("dashboard", user_id),
        lambda: build_stats(user_id),
        **CachePresets.user(user_id),
    )
    cache.invalidate_by_tag(f"user:{user_id}")
"""

import re
import threading
import time
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

_MISSING = object()


@dataclass
class _Entry:
    value: Any
    stored_at: float
    ttl: float
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class TTLCache:
    def __init__(self, default_ttl: float = 300, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return default
            if entry.expired(self._clock()):
                del self._entries[key]
                self.misses += 1
                return default
            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None, tags: Iterable[str] = ()) -> None:
        with self._lock:
            self._entries[key] = _Entry(
                value=value,
                stored_at=self._clock(),
                ttl=self.default_ttl if ttl is None else ttl,
                tags=frozenset(tags),
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def invalidate_by_tag(self, tag: str) -> int:
        with self._lock:
            doomed = [k for k, e in self._entries.items() if tag in e.tags]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def invalidate_pattern(self, pattern: str) -> int:
        regex = re.compile(pattern)
        with self._lock:
            doomed = [k for k in self._entries if regex.search(k)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            doomed = [k for k, e in self._entries.items() if e.expired(now)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def get_or_set(
        self,
        key: str,
        fetcher: Callable[[], Any],
        ttl: Optional[float] = None,
        tags: Iterable[str] = (),
    ) -> Any:
        """Return the cached value, computing and storing it on a miss.

        ``None`` results are cached like any other value.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = fetcher()
        self.set(key, value, ttl=ttl, tags=tags)
        return value

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "size": len(self._entries),
                "keys": list(self._entries.keys()),
                "hits": self.hits,
                "misses": self.misses,
                "hitRate": round(self.hits / lookups, 4) if lookups else 0.0,
            }

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING


def cache_key(*parts: Any) -> str:
    """Join key parts with ':'; ``None`` parts are skipped."""
    return ":".join(str(p) for p in parts if p is not None)


def memoize(cache: TTLCache, ttl: Optional[float] = None, key_prefix: Optional[str] = None, tags: Iterable[str] = ()):
    """Cache a function's results keyed by its name and arguments."""

    def decorator(func: Callable):
        name = key_prefix or getattr(func, "__qualname__", func.__name__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            key = f"memoized:{name}:{args!r}:{sorted(kwargs.items())!r}"
            return cache.get_or_set(key, lambda: func(*args, **kwargs), ttl=ttl, tags=tags)

        return wrapper

    return decorator


class CachePresets:
    """TTL/tag bundles, spread into ``set``/``get_or_set`` as keyword arguments."""

    SHORT = {"ttl": 60}
    MEDIUM = {"ttl": 5 * 60}
    LONG = {"ttl": 60 * 60}
    CLAIMS = {"ttl": 2 * 60, "tags": ("claims",)}
    FIRMS = {"ttl": 10 * 60, "tags": ("firms",)}
    ANALYTICS = {"ttl": 15 * 60, "tags": ("analytics",)}

    @staticmethod
    def user(user_id: Any, ttl: float = 5 * 60) -> Dict[str, Any]:
        return {"ttl": ttl, "tags": (f"user:{user_id}",)}


def cache_headers(max_age: int, etag: Optional[str] = None, private: bool = False) -> Dict[str, str]:
    """Cache-Control (and optional ETag) headers for cacheable responses."""
    if max_age <= 0:
        headers = {"Cache-Control": "no-store, must-revalidate"}
    else:
        scope = "private" if private else "public"
        headers = {"Cache-Control": f"{scope}, max-age={max_age}, stale-while-revalidate={max_age * 2}"}
    if etag:
        headers["ETag"] = f'"{etag}"'
    return headers
