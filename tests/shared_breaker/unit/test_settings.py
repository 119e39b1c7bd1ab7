from __future__ import annotations

from typing import Any, cast

import pytest
from pydantic import ValidationError

from shared_breaker.settings import BreakerSettings


def _build_settings(**overrides: object) -> BreakerSettings:
    return BreakerSettings(**cast(Any, overrides))


def test_breaker_settings_defaults() -> None:
    settings = _build_settings()

    assert settings.storage_service == "memory"
    assert settings.failure_threshold == 5
    assert settings.timeout_period == 60
    assert settings.redis_host == "127.0.0.1"
    assert settings.redis_port == 6379
    assert settings.redis_socket_timeout == 5.0
    assert settings.log_level == "INFO"


def test_breaker_settings_normalizes_storage_service_and_log_level() -> None:
    settings = _build_settings(storage_service="  Redis ", log_level=" debug ")

    assert settings.storage_service == "redis"
    assert settings.log_level == "DEBUG"


def test_breaker_settings_reads_prefixed_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("CIRCUIT_BREAKER_STORAGE_SERVICE", "redis")
    monkeypatch.setenv("circuit_breaker_redis_host", "cache.internal")
    monkeypatch.setenv("CIRCUIT_BREAKER_REDIS_PORT", "6380")

    settings = _build_settings()

    assert settings.storage_service == "redis"
    assert settings.redis_host == "cache.internal"
    assert settings.redis_port == 6380


@pytest.mark.parametrize(
    "overrides",
    [
        {"failure_threshold": 0},
        {"failure_threshold": -1},
        {"timeout_period": 0},
        {"redis_port": 0},
        {"redis_port": 70_000},
        {"redis_socket_timeout": 0},
        {"storage_service": "   "},
        {"redis_host": ""},
        {"log_level": "TRACE"},
    ],
)
def test_breaker_settings_rejects_invalid_values(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        _build_settings(**overrides)


def test_breaker_settings_allows_unbounded_socket_timeout() -> None:
    settings = _build_settings(redis_socket_timeout=None)

    assert settings.redis_socket_timeout is None
