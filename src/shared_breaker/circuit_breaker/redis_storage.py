"""Redis storage backend for breakers shared across processes and hosts."""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from shared_breaker.circuit_breaker.storage import (
    AbstractBreakerStorage,
    validate_expire_ttl,
    validate_set_ttl,
)
from shared_breaker.errors import StorageError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6379


class RedisBreakerStorage(AbstractBreakerStorage):
    """Storage backed by Redis ``GET``/``SET``/``INCR``/``EXPIRE``.

    Atomicity of ``increment`` comes from ``INCR``. Redis client errors are
    re-raised as ``StorageError`` with the original exception chained.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        socket_timeout: float | None = None,
        client: Redis | None = None,
    ) -> None:
        """Build a Redis storage backend.

        Args:
            host: Redis server host.
            port: Redis server port.
            socket_timeout: Per-command socket timeout in seconds. ``None``
                leaves commands unbounded.
            client: Pre-built client to use instead of connecting to
                ``host``/``port``. Byte replies are decoded as UTF-8.
        """
        if client is None:
            client = Redis(
                host=host,
                port=port,
                socket_timeout=socket_timeout,
                decode_responses=True,
            )
        self._client = client

    async def get(self, key: str) -> str | None:
        try:
            value = await self._client.get(key)
        except RedisError as error:
            raise StorageError(f"redis get failed for {key!r}") from error
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str | int, ttl: int = 0) -> bool:
        validate_set_ttl(ttl)
        try:
            if ttl > 0:
                return bool(await self._client.set(key, value, ex=ttl))
            return bool(await self._client.set(key, value))
        except RedisError as error:
            raise StorageError(f"redis set failed for {key!r}") from error

    async def increment(self, key: str) -> int:
        try:
            return int(await self._client.incr(key))
        except RedisError as error:
            raise StorageError(f"redis incr failed for {key!r}") from error

    async def expire(self, key: str, ttl: int) -> bool:
        validate_expire_ttl(ttl)
        try:
            return bool(await self._client.expire(key, ttl))
        except RedisError as error:
            raise StorageError(f"redis expire failed for {key!r}") from error

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
