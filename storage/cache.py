"""
Cache
Per-run result cache for provider calls
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple
import hashlib
import json
import logging
import time


logger = logging.getLogger(__name__)


class BaseCache(ABC):
    """
    Cache interface
    """

    def __init__(self, ttl: Optional[float] = None):
        """
        Args:
            ttl: entry lifetime in seconds, None = never stale
        """
        self.ttl = ttl

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or stale"""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    @staticmethod
    def make_key(*args, **kwargs) -> str:
        """
        Build a cache key from exact request parameters

        Args:
            *args: positional parts
            **kwargs: named parts (order independent)

        Returns:
            Hex digest key
        """
        key_parts = [str(arg) for arg in args]
        key_parts.append(json.dumps(kwargs, sort_keys=True, default=str))
        key_string = ":".join(key_parts)
        return hashlib.md5(key_string.encode()).hexdigest()


class MemoryCache(BaseCache):
    """
    In-memory key -> (timestamp, value) map.

    Entries are never evicted proactively; staleness is decided at read time
    by comparing the stored timestamp against the TTL.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        super().__init__(ttl)
        self._clock = clock
        self._cache: Dict[str, Tuple[float, Any]] = {}

    def _is_stale(self, stored_at: float) -> bool:
        if self.ttl is None:
            return False
        return (self._clock() - stored_at) >= self.ttl

    def get(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if self._is_stale(stored_at):
            logger.debug(f"Cache entry {key[:8]} is stale")
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = (self._clock(), value)

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def size(self) -> int:
        return len(self._cache)
