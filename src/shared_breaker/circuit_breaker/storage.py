"""State storage for circuit breakers.

Storage is intentionally decoupled from breaker logic. The breaker only needs
four primitives over string keys: ``get``, ``set`` with an optional TTL, an
atomic ``increment`` and an ``expire`` refresh. Any key-value store offering
those can back a breaker; see ``redis_storage`` for the networked backend.

Backends translate their own failures into ``StorageError``. A missing or
expired key is not a failure: ``get`` returns ``None``.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from shared_breaker.errors import StorageError


def _monotonic() -> float:
    return time.monotonic()


def validate_set_ttl(ttl: int) -> None:
    """Reject a negative ``set`` TTL; ``0`` means no expiry."""
    if ttl < 0:
        raise ValueError("ttl must be >= 0")


def validate_expire_ttl(ttl: int) -> None:
    """Reject an ``expire`` TTL below one second."""
    if ttl < 1:
        raise ValueError("ttl must be >= 1")


class AbstractBreakerStorage(ABC):
    """Abstract key-value storage interface used by ``CircuitBreaker``."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored at ``key`` or ``None`` if unset or expired."""

    @abstractmethod
    async def set(self, key: str, value: str | int, ttl: int = 0) -> bool:
        """Store ``value`` at ``key``; ``ttl`` seconds, ``0`` for no expiry."""

    @abstractmethod
    async def increment(self, key: str) -> int:
        """Atomically add one to the integer at ``key`` and return the result.

        An absent key counts as ``0``, so the first call returns ``1``.
        """

    @abstractmethod
    async def expire(self, key: str, ttl: int) -> bool:
        """Reset the TTL of an existing key; ``False`` when the key is absent."""

    async def close(self) -> None:
        """Release backend resources."""
        return None


@dataclass(slots=True)
class _Entry:
    value: str
    expires_at: float | None = None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryBreakerStorage(AbstractBreakerStorage):
    """Single-process expiring cache.

    Entries live in a dict guarded by one ``threading.Lock``. Critical sections
    never await, so the lock serializes coroutines on one loop as well as
    threads sharing the instance. Expired entries are evicted on access.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _live_entry(self, key: str, now: float) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(now):
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        """Return the stored value, evicting it first if it has expired."""
        with self._lock:
            entry = self._live_entry(key, _monotonic())
            return None if entry is None else entry.value

    async def set(self, key: str, value: str | int, ttl: int = 0) -> bool:
        """Store ``str(value)``, replacing any previous value and TTL."""
        validate_set_ttl(ttl)
        with self._lock:
            expires_at = _monotonic() + ttl if ttl > 0 else None
            self._entries[key] = _Entry(value=str(value), expires_at=expires_at)
        return True

    async def increment(self, key: str) -> int:
        """Increment the counter at ``key``, keeping its current TTL."""
        with self._lock:
            entry = self._live_entry(key, _monotonic())
            if entry is None:
                self._entries[key] = _Entry(value="1")
                return 1
            try:
                current = int(entry.value)
            except ValueError as error:
                raise StorageError(
                    f"value at {key!r} is not an integer: {entry.value!r}"
                ) from error
            entry.value = str(current + 1)
            return current + 1

    async def expire(self, key: str, ttl: int) -> bool:
        """Give an existing key a fresh ``ttl`` without touching its value."""
        validate_expire_ttl(ttl)
        with self._lock:
            now = _monotonic()
            entry = self._live_entry(key, now)
            if entry is None:
                return False
            entry.expires_at = now + ttl
            return True
