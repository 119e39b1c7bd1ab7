"""Core circuit breaker implementation."""

import time
from dataclasses import dataclass

from shared_breaker.circuit_breaker.exceptions import CircuitOpenError
from shared_breaker.circuit_breaker.state import (
    FAILURES_FIELD,
    LAST_OPENED_FIELD,
    STATE_FIELD,
    BreakerSnapshot,
    CircuitState,
    storage_key,
)
from shared_breaker.circuit_breaker.storage import AbstractBreakerStorage
from shared_breaker.errors import ConfigurationError
from shared_breaker.logging import BreakerLogger, get_logger, log_info, log_warning


def _now() -> int:
    return int(time.time())


def _parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _parse_state(raw: str | None) -> CircuitState:
    try:
        return CircuitState(raw) if raw is not None else CircuitState.CLOSED
    except ValueError:
        return CircuitState.CLOSED


@dataclass(frozen=True, slots=True)
class CircuitBreakerConfig:
    """Circuit breaker configuration values.

    Attributes:
        failure_threshold: Failure count at which the circuit opens.
        timeout_period: Seconds the circuit stays ``OPEN`` before a probe.
    """

    failure_threshold: int = 5
    timeout_period: int = 60

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ConfigurationError("failure_threshold must be >= 1")
        if self.timeout_period < 1:
            raise ConfigurationError("timeout_period must be >= 1")


class CircuitBreaker:
    """Per-service circuit breaker whose state lives entirely in storage.

    The breaker keeps no per-service state of its own. Every check re-reads
    storage, so any number of instances sharing a backend share fate for the
    same service name. Multi-field updates are not transactional; a reader
    racing a transition may briefly see a new ``state`` next to an old
    ``lastOpened`` or ``failures`` value. ``lastOpened`` is only consulted
    while the state is ``OPEN``, which keeps those windows harmless.

    Storage failures propagate to the caller as ``StorageError``.
    """

    def __init__(
        self,
        storage: AbstractBreakerStorage,
        config: CircuitBreakerConfig | None = None,
        *,
        logger: BreakerLogger | None = None,
    ) -> None:
        """Build a circuit breaker over a storage backend.

        Args:
            storage: Backend holding the per-service state.
            config: Threshold and timeout. Defaults to
                ``CircuitBreakerConfig()``.
            logger: Structured logger for state transitions.
        """
        self.config = CircuitBreakerConfig() if config is None else config
        self._storage = storage
        self._logger = get_logger(__name__) if logger is None else logger

    @property
    def storage(self) -> AbstractBreakerStorage:
        """Backend holding this breaker's per-service state."""
        return self._storage

    async def _open_status(self, service_name: str) -> tuple[bool, int]:
        state = await self._storage.get(storage_key(service_name, STATE_FIELD))
        if state != CircuitState.OPEN:
            return False, 0

        raw_opened = await self._storage.get(
            storage_key(service_name, LAST_OPENED_FIELD)
        )
        last_opened = _parse_int(raw_opened) or 0
        elapsed = _now() - last_opened
        if elapsed > self.config.timeout_period:
            await self._storage.set(
                storage_key(service_name, STATE_FIELD), CircuitState.HALF_OPEN
            )
            log_info(
                self._logger,
                "circuit_breaker.half_open",
                service=service_name,
                open_seconds=elapsed,
            )
            return False, 0
        return True, self.config.timeout_period - elapsed

    async def is_open(self, service_name: str) -> bool:
        """Return whether calls to ``service_name`` should be skipped.

        An ``OPEN`` circuit whose timeout has elapsed is moved to
        ``HALF_OPEN`` and reported as not open, letting the next call probe
        the dependency. ``HALF_OPEN`` and ``CLOSED`` are never open.
        """
        is_open, _ = await self._open_status(service_name)
        return is_open

    async def raise_if_open(self, service_name: str) -> None:
        """Raise ``CircuitOpenError`` when ``is_open`` would return ``True``."""
        is_open, retry_after = await self._open_status(service_name)
        if is_open:
            raise CircuitOpenError(service_name, retry_after=max(retry_after, 0))

    async def attempt_success(self, service_name: str) -> None:
        """Close the circuit and reset the failure counter."""
        await self._storage.set(
            storage_key(service_name, STATE_FIELD), CircuitState.CLOSED
        )
        await self._storage.set(storage_key(service_name, FAILURES_FIELD), 0)

    async def attempt_failure(self, service_name: str) -> None:
        """Count one failure and open the circuit once the threshold is hit."""
        failures = await self._storage.increment(
            storage_key(service_name, FAILURES_FIELD)
        )
        if failures < self.config.failure_threshold:
            return

        await self._storage.set(
            storage_key(service_name, STATE_FIELD), CircuitState.OPEN
        )
        await self._storage.set(
            storage_key(service_name, LAST_OPENED_FIELD), _now()
        )
        log_warning(
            self._logger,
            "circuit_breaker.opened",
            service=service_name,
            failures=failures,
            threshold=self.config.failure_threshold,
        )

    async def snapshot(self, service_name: str) -> BreakerSnapshot:
        """Read the stored fields for ``service_name`` without modifying them."""
        state = await self._storage.get(storage_key(service_name, STATE_FIELD))
        failures = await self._storage.get(
            storage_key(service_name, FAILURES_FIELD)
        )
        last_opened = await self._storage.get(
            storage_key(service_name, LAST_OPENED_FIELD)
        )
        return BreakerSnapshot(
            service_name=service_name,
            state=_parse_state(state),
            failures=_parse_int(failures) or 0,
            last_opened=_parse_int(last_opened),
        )
