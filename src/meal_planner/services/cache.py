"""TTL cache for external lookups."""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Cache(Protocol):
    """Key-value store whose entries expire."""

    def get(self, key: str) -> object | None:
        """Return the value stored under key, or None once it has expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store value under key for ttl_seconds."""


@dataclass
class InMemoryCache(Cache):
    """Bounded in-process cache; the least recently stored key goes first."""

    max_entries: int = 512
    clock: Callable[[], float] = time.monotonic
    _store: OrderedDict[str, tuple[float, object]] = field(
        default_factory=OrderedDict
    )

    def get(self, key: str) -> object | None:
        expires_at, value = self._store.get(key, (0.0, None))
        if value is not None and self.clock() < expires_at:
            return value
        self._store.pop(key, None)
        return None

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        self._store.pop(key, None)
        self._store[key] = (self.clock() + ttl_seconds, value)
        while len(self._store) > self.max_entries:
            self._store.popitem(last=False)
