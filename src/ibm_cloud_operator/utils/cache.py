"""TTL cache for Kubernetes objects read on every reconciliation.

Only ProviderConfigs are cached; managed resources used for reference
resolution are always read fresh. Handlers run on kopf's thread pool, so every
access goes through one lock.
"""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Optional

_cache: dict[str, tuple[Any, float]] = {}
_cache_ttl: float = float(os.getenv("K8S_CACHE_TTL_SECONDS", "30.0"))
_lock = threading.Lock()


def make_cache_key(kind: str, namespace: str, name: str) -> str:
    """Create a cache key for a Kubernetes resource."""
    return f"{kind}:{namespace}:{name}"


def get_cached_object(key: str) -> Optional[Any]:
    """Get an object from cache if it hasn't expired.

    Args:
        key: Cache key, see ``make_cache_key``

    Returns:
        Cached object or None if not found or expired
    """
    with _lock:
        entry = _cache.get(key)
        if entry is None:
            return None
        obj, stored_at = entry
        if time.time() - stored_at > _cache_ttl:
            del _cache[key]
            return None
        return obj


def set_cached_object(key: str, obj: Any) -> None:
    with _lock:
        _cache[key] = (obj, time.time())


def invalidate_object(kind: str, namespace: str, name: str) -> None:
    """Drop the cached copy of one resource, if any."""
    with _lock:
        _cache.pop(make_cache_key(kind, namespace, name), None)


def invalidate_cache(prefix: Optional[str] = None) -> None:
    """Drop cache entries whose key starts with ``prefix``, or all entries.

    ``invalidate_cache("ProviderConfig:")`` drops every cached ProviderConfig.
    """
    with _lock:
        if prefix is None:
            _cache.clear()
            return
        for key in [key for key in _cache if key.startswith(prefix)]:
            del _cache[key]
