"""Circuit breaker with state shared through a key-value store.

This package implements the circuit breaker pattern from *Release It!*.

Key behavior notes:
  - Callers ask ``is_open`` before calling a dependency and report the outcome
    with ``attempt_success`` or ``attempt_failure`` afterwards. The breaker
    never performs the call itself.
  - All state lives in storage under ``circuit:<service>:<field>`` keys, so
    breakers in different processes that share a Redis backend share fate.
  - Recovery is evaluated lazily: an ``OPEN`` circuit becomes ``HALF_OPEN`` on
    the first check after ``timeout_period`` seconds, and the next reported
    outcome decides whether it closes or reopens.
"""

from shared_breaker.circuit_breaker.breaker import CircuitBreaker, CircuitBreakerConfig
from shared_breaker.circuit_breaker.exceptions import (
    CircuitBreakerError,
    CircuitOpenError,
    ConfigurationError,
    StorageError,
)
from shared_breaker.circuit_breaker.redis_storage import RedisBreakerStorage
from shared_breaker.circuit_breaker.registry import (
    available_storage_backends,
    build_breaker,
    build_storage,
    register_storage_backend,
)
from shared_breaker.circuit_breaker.state import (
    BreakerSnapshot,
    CircuitState,
    storage_key,
)
from shared_breaker.circuit_breaker.storage import (
    AbstractBreakerStorage,
    InMemoryBreakerStorage,
)

__all__ = [
    "AbstractBreakerStorage",
    "BreakerSnapshot",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerError",
    "CircuitOpenError",
    "CircuitState",
    "ConfigurationError",
    "InMemoryBreakerStorage",
    "RedisBreakerStorage",
    "StorageError",
    "available_storage_backends",
    "build_breaker",
    "build_storage",
    "register_storage_backend",
    "storage_key",
]
