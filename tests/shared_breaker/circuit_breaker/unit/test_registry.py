from __future__ import annotations

import logging
import sys
from collections.abc import Iterator

import pytest

import shared_breaker.circuit_breaker.registry as registry_mod
from shared_breaker.circuit_breaker import (
    AbstractBreakerStorage,
    CircuitBreaker,
    ConfigurationError,
    InMemoryBreakerStorage,
    RedisBreakerStorage,
    available_storage_backends,
    build_breaker,
    build_storage,
    register_storage_backend,
)
from shared_breaker.settings import BreakerSettings


@pytest.fixture(autouse=True)
def _restore_registry() -> Iterator[None]:
    saved = dict(registry_mod._STORAGE_BACKENDS)
    yield
    registry_mod._STORAGE_BACKENDS.clear()
    registry_mod._STORAGE_BACKENDS.update(saved)


def test_builtin_backends_are_registered() -> None:
    assert available_storage_backends() == ("memory", "redis")


def test_build_storage_defaults_to_memory() -> None:
    storage = build_storage(BreakerSettings())

    assert isinstance(storage, InMemoryBreakerStorage)


def test_build_storage_redis_uses_connection_settings() -> None:
    settings = BreakerSettings(
        storage_service="redis",
        redis_host="cache.internal",
        redis_port=6380,
        redis_socket_timeout=1.5,
    )

    storage = build_storage(settings)

    assert isinstance(storage, RedisBreakerStorage)
    kwargs = storage._client.connection_pool.connection_kwargs
    assert kwargs["host"] == "cache.internal"
    assert kwargs["port"] == 6380
    assert kwargs["socket_timeout"] == 1.5


def test_build_storage_rejects_unknown_backend() -> None:
    with pytest.raises(ConfigurationError, match="memcached"):
        build_storage(BreakerSettings(storage_service="memcached"))


def test_register_storage_backend_makes_factory_selectable() -> None:
    custom = InMemoryBreakerStorage()

    def _factory(_: BreakerSettings) -> AbstractBreakerStorage:
        return custom

    register_storage_backend(" Custom ", _factory)

    assert "custom" in available_storage_backends()
    assert build_storage(BreakerSettings(storage_service="custom")) is custom


def test_register_storage_backend_rejects_blank_name() -> None:
    with pytest.raises(ConfigurationError):
        register_storage_backend("  ", lambda _: InMemoryBreakerStorage())


def test_build_breaker_applies_threshold_and_timeout() -> None:
    breaker = build_breaker(
        BreakerSettings(failure_threshold=3, timeout_period=15)
    )

    assert isinstance(breaker, CircuitBreaker)
    assert breaker.config.failure_threshold == 3
    assert breaker.config.timeout_period == 15
    assert isinstance(breaker.storage, InMemoryBreakerStorage)


def test_build_breaker_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CIRCUIT_BREAKER_FAILURE_THRESHOLD", "9")
    monkeypatch.setenv("CIRCUIT_BREAKER_TIMEOUT_PERIOD", "120")

    breaker = build_breaker()

    assert breaker.config.failure_threshold == 9
    assert breaker.config.timeout_period == 120


def test_build_breaker_configures_logging_at_settings_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(sys.stderr, "isatty", lambda: False, raising=False)
    logging.getLogger().setLevel(logging.WARNING)

    build_breaker(BreakerSettings(log_level="DEBUG"), configure_logging=True)

    assert logging.getLogger().level == logging.DEBUG


def test_build_breaker_leaves_logging_alone_by_default() -> None:
    logging.getLogger().setLevel(logging.WARNING)

    build_breaker(BreakerSettings(log_level="DEBUG"))

    assert logging.getLogger().level == logging.WARNING
