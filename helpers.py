import time
from typing import Any, Dict, Optional, Tuple

# ---------------------------
# Dashboard TTL cache (in-memory, per process)
# ---------------------------
CacheStore = Dict[str, Tuple[float, Any]]
# key -> (expires_at_epoch, payload)

# Everything derived from stored audits; dropped whenever an audit or a rate changes
DASHBOARD_PREFIXES = ("summary:", "audit_table:")


def cache_key(prefix: str, **params: Any) -> str:
    """cache_key("summary:", limit=500) -> 'summary:limit=500' (params sorted)."""
    return prefix + ":".join(f"{k}={params[k]}" for k in sorted(params))


def cache_get(store: Optional[CacheStore], key: str) -> Optional[Any]:
    if not store or key not in store:
        return None

    expires_at, payload = store[key]
    if time.time() < expires_at:
        return payload

    del store[key]
    return None


def cache_set(store: CacheStore, key: str, value: Any, ttl_seconds: int) -> None:
    # ttl <= 0 disables caching for that key
    if ttl_seconds > 0:
        store[key] = (time.time() + ttl_seconds, value)
    else:
        store.pop(key, None)


def cache_clear_prefix(store: Optional[CacheStore], prefix: str) -> int:
    """Drop every key under prefix; returns how many went."""
    if not store:
        return 0
    stale = [k for k in store if k.startswith(prefix)]
    for k in stale:
        del store[k]
    return len(stale)


def invalidate_dashboard(store: Optional[CacheStore]) -> int:
    return sum(cache_clear_prefix(store, p) for p in DASHBOARD_PREFIXES)
