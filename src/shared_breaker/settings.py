from __future__ import annotations

from pydantic import ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared_breaker.logging import get_log_level_value

ENV_PREFIX = "CIRCUIT_BREAKER_"


def prefixed_settings_config(prefix: str) -> SettingsConfigDict:
    """Build standard Pydantic settings config for prefixed environments."""
    return SettingsConfigDict(env_prefix=prefix, case_sensitive=False)


class BreakerSettings(BaseSettings):
    """Settings used to build a storage backend and a breaker.

    Values come from keyword arguments or ``CIRCUIT_BREAKER_*`` environment
    variables, for example ``CIRCUIT_BREAKER_STORAGE_SERVICE=redis``.
    """

    model_config = prefixed_settings_config(ENV_PREFIX)

    storage_service: str = "memory"
    failure_threshold: int = 5
    timeout_period: int = 60
    redis_host: str = "127.0.0.1"
    redis_port: int = 6379
    redis_socket_timeout: float | None = 5.0
    log_level: str = "INFO"

    @field_validator("storage_service", "redis_host", mode="before")
    @classmethod
    def _validate_required_string(cls, value: object, info: ValidationInfo) -> object:
        if not isinstance(value, str):
            return value
        normalized = value.strip()
        if not normalized:
            raise ValueError(f"{info.field_name} must be non-empty")
        if info.field_name == "storage_service":
            return normalized.lower()
        return normalized

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            get_log_level_value(value)
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _validate_breaker_settings(self) -> BreakerSettings:
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if self.timeout_period < 1:
            raise ValueError("timeout_period must be >= 1")
        if not 1 <= self.redis_port <= 65535:
            raise ValueError("redis_port must be between 1 and 65535")
        if self.redis_socket_timeout is not None and self.redis_socket_timeout <= 0:
            raise ValueError("redis_socket_timeout must be > 0 when set")
        return self
