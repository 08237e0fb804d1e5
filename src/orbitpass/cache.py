"""In-memory LRU cache with per-entry expiry.

Pass predictions and parsed element sets are pure functions of their
inputs, so a calling layer (a web handler, a UI worker) can reuse them for
a short time instead of recomputing.  :class:`TTLCache` holds such results
for that layer.  The prediction functions themselves never consult it.

Entries expire ``ttl_seconds`` after they were stored, measured on the
injected ``clock`` (``time.monotonic`` by default).  When full, the least
recently used entry is evicted.  The cache is not thread-safe; guard it
with a lock if it is shared between threads.
"""

from __future__ import annotations

import logging
import math
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

from orbitpass.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_DEFAULT_CAPACITY = 128
_DEFAULT_TTL_SECONDS = 300.0
_MISSING = object()


class TTLCache(Generic[K, V]):
    """Bounded least-recently-used cache whose entries expire.

    Args:
        capacity: Maximum number of entries held.
        ttl_seconds: Lifetime of an entry in seconds.
        clock: Zero-argument callable returning the current time in
            seconds.  Only differences between its values are used.

    Raises:
        InvalidInputError: If ``capacity`` is below 1 or ``ttl_seconds`` is
            not a positive finite number.

    Examples:
        ```python
        from orbitpass.cache import TTLCache
        from orbitpass.passes import find_passes

        cache = TTLCache(capacity=32, ttl_seconds=600.0)
        key = (tle.satnum, observer, start)
        passes = cache.get_or_load(key, lambda: find_passes(sat, observer, start))
        ```
    """

    def __init__(
        self,
        capacity: int = _DEFAULT_CAPACITY,
        ttl_seconds: float = _DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise InvalidInputError(f"capacity must be at least 1, got {capacity}")
        if not math.isfinite(ttl_seconds) or ttl_seconds <= 0.0:
            raise InvalidInputError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self._capacity = int(capacity)
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: OrderedDict[K, tuple[float, V]] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _is_expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at >= self._ttl

    def get(self, key: K, default: V | None = None) -> V | None:
        """Return the live value for *key*, or *default*.

        A hit marks the entry as most recently used.  An expired entry is
        removed and counts as a miss.
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Cache miss for %r", key)
            return default

        stored_at, value = entry
        if self._is_expired(stored_at):
            del self._entries[key]
            logger.debug("Cache entry for %r expired", key)
            return default

        self._entries.move_to_end(key)
        logger.debug("Cache hit for %r", key)
        return value

    def put(self, key: K, value: V) -> None:
        """Store *value* under *key*, evicting the least recently used entry if full."""
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache full (%d entries), evicted %r", self._capacity, evicted)
        self._entries[key] = (self._clock(), value)

    def get_or_load(self, key: K, loader: Callable[[], V]) -> V:
        """Return the cached value for *key*, computing and storing it on a miss.

        Exceptions raised by *loader* propagate and nothing is stored.

        Args:
            key: Cache key.
            loader: Zero-argument callable producing the value.

        Returns:
            The cached or freshly loaded value.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = loader()
        self.put(key, value)
        return value

    def invalidate(self, key: K) -> bool:
        """Remove *key*.  Returns ``True`` if an entry was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        # Counts stored entries, including any that have expired but not yet been purged
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._is_expired(entry[0])

