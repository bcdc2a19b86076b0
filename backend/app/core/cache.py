"""
cache.py — In-Memory TTL Cache

Purpose:
- Memoize repeated company lookups, dimension queries and hierarchy trees.
- Entries expire after a per-entry TTL; mutations delete targeted keys.
- Exposed as an injectable object (`TTLCache`) so services receive the
  cache explicitly and tests can pass a fresh instance with a fake clock.

Key Notes:
- Process-local, non-distributed, non-persistent.
- Thread-safe: sync FastAPI routes run in a worker threadpool.
- Cache keys are deterministic strings built by `make_key()`.

This module does NOT:
- Deduplicate concurrent recomputation. Two simultaneous misses for the same
  key both compute and both write; the last write wins.
- Bound memory. Keep cached values small and targeted.
"""

import json
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

# -----------------------------------------------------------------------------
# Key Construction
# -----------------------------------------------------------------------------

def _key_part(part: Any) -> str:
    if isinstance(part, str):
        return part
    return json.dumps(part, sort_keys=True, separators=(",", ":"), default=str)


def make_key(namespace: str, *parts: Any) -> str:
    """
    Utility to construct consistent cache keys.

    Example:
        make_key("company", "all")              → "company:all"
        make_key("company", "id", "C1")         → "company:id.C1"
        make_key("company", "query", {"b": 1})  → 'company:query.{"b":1}'

    Non-string parts are JSON-encoded with sorted keys, so two equal dicts
    always produce the same key.
    """
    return f"{namespace}:" + ".".join(_key_part(p) for p in parts)


# -----------------------------------------------------------------------------
# TTL Cache
# -----------------------------------------------------------------------------

class TTLCache:
    """
    Dict-backed key/value store with per-entry expiry.

    `clock` returns seconds; defaults to time.monotonic.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._store: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """
        Retrieve cached object if present and not expired.
        Returns None otherwise.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """
        Store object in cache. ttl_seconds=None keeps it until deleted.
        """
        expires_at = None if ttl_seconds is None else self._clock() + ttl_seconds
        with self._lock:
            self._store[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self, namespace: Optional[str] = None) -> None:
        """
        Clears cache entirely, or only keys in a namespace.

        Example:
            cache.clear("company") clears keys starting with "company:"
        """
        with self._lock:
            if namespace is None:
                self._store.clear()
                return
            prefix = f"{namespace}:"
            for key in [k for k in self._store if k.startswith(prefix)]:
                del self._store[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


# -----------------------------------------------------------------------------
# Process-wide instance (FastAPI dependency)
# -----------------------------------------------------------------------------

_cache = TTLCache()


def get_cache() -> TTLCache:
    """
    FastAPI dependency returning the shared cache.
    Override in tests with `app.dependency_overrides[get_cache]`.
    """
    return _cache
