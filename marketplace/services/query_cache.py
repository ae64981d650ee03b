from typing import Any, Dict, Hashable, Optional, Tuple

CacheKey = Tuple[Hashable, ...]


class QueryCache:
    """Query results keyed by tuples such as ``("customer-bookings", customer_id)``.

    Each key has a generation that ``invalidate`` bumps. A reader takes the
    generation before it fetches and stores with ``set_if_current``, so a
    result fetched across an invalidation is never cached.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, Any] = {}
        self._generations: Dict[CacheKey, int] = {}

    def get(self, key: CacheKey) -> Optional[Any]:
        return self._entries.get(key)

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value

    def generation(self, key: CacheKey) -> int:
        return self._generations.setdefault(key, 0)

    def set_if_current(self, key: CacheKey, value: Any, generation: int) -> bool:
        if self._generations.get(key, 0) != generation:
            return False
        self._entries[key] = value
        return True

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def invalidate(self, prefix: CacheKey) -> int:
        """Drop every entry whose key starts with ``prefix``; returns how many."""
        for key in self._generations:
            if key[:len(prefix)] == prefix:
                self._generations[key] += 1
        stale = [key for key in self._entries if key[:len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        for key in self._generations:
            self._generations[key] += 1


query_cache = QueryCache()
