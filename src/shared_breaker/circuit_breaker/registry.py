"""Backend registry and breaker factory driven by ``BreakerSettings``."""

from collections.abc import Callable

from shared_breaker.circuit_breaker.breaker import CircuitBreaker, CircuitBreakerConfig
from shared_breaker.circuit_breaker.redis_storage import RedisBreakerStorage
from shared_breaker.circuit_breaker.storage import (
    AbstractBreakerStorage,
    InMemoryBreakerStorage,
)
from shared_breaker.errors import ConfigurationError
from shared_breaker.logging import configure_structlog
from shared_breaker.settings import BreakerSettings

StorageFactory = Callable[[BreakerSettings], AbstractBreakerStorage]


def _memory_storage(_: BreakerSettings) -> AbstractBreakerStorage:
    return InMemoryBreakerStorage()


def _redis_storage(settings: BreakerSettings) -> AbstractBreakerStorage:
    return RedisBreakerStorage(
        settings.redis_host,
        settings.redis_port,
        socket_timeout=settings.redis_socket_timeout,
    )


_STORAGE_BACKENDS: dict[str, StorageFactory] = {
    "memory": _memory_storage,
    "redis": _redis_storage,
}


def register_storage_backend(name: str, factory: StorageFactory) -> None:
    """Register ``factory`` under the ``storage_service`` identifier ``name``."""
    normalized = name.strip().lower()
    if not normalized:
        raise ConfigurationError("storage backend name must be non-empty")
    _STORAGE_BACKENDS[normalized] = factory


def available_storage_backends() -> tuple[str, ...]:
    """Return registered backend identifiers in sorted order."""
    return tuple(sorted(_STORAGE_BACKENDS))


def build_storage(settings: BreakerSettings) -> AbstractBreakerStorage:
    """Build the storage backend selected by ``settings.storage_service``."""
    try:
        factory = _STORAGE_BACKENDS[settings.storage_service]
    except KeyError as error:
        choices = ", ".join(available_storage_backends())
        raise ConfigurationError(
            f"unknown storage_service {settings.storage_service!r}; "
            f"expected one of: {choices}"
        ) from error
    return factory(settings)


def build_breaker(
    settings: BreakerSettings | None = None,
    *,
    configure_logging: bool = False,
) -> CircuitBreaker:
    """Build a breaker and its storage backend from settings.

    Args:
        settings: Breaker settings. Defaults to ``BreakerSettings()``, which
            reads the environment.
        configure_logging: Also configure structlog and the root logger at
            ``settings.log_level``. Leave off when the host application
            owns logging setup.
    """
    settings = BreakerSettings() if settings is None else settings
    if configure_logging:
        configure_structlog(log_level=settings.log_level)
    config = CircuitBreakerConfig(
        failure_threshold=settings.failure_threshold,
        timeout_period=settings.timeout_period,
    )
    return CircuitBreaker(build_storage(settings), config)
