"""Circuit breaker state primitives and storage key layout."""

from dataclasses import dataclass
from enum import StrEnum

KEY_PREFIX = "circuit"
STATE_FIELD = "state"
FAILURES_FIELD = "failures"
LAST_OPENED_FIELD = "lastOpened"


class CircuitState(StrEnum):
    """Circuit breaker state values as persisted in storage."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


def storage_key(service_name: str, field: str) -> str:
    """Return the storage key for one field of a service's breaker state."""
    return f"{KEY_PREFIX}:{service_name}:{field}"


@dataclass(frozen=True)
class BreakerSnapshot:
    """Point-in-time view of the stored fields for one service.

    The fields are read one after another, not atomically, so a snapshot taken
    during a concurrent transition may mix old and new values.

    Attributes:
        service_name: Service the snapshot belongs to.
        state: Stored state, ``CLOSED`` when unset.
        failures: Failure counter, ``0`` when unset.
        last_opened: Unix seconds of the last transition to ``OPEN``, if any.
    """

    service_name: str
    state: CircuitState
    failures: int
    last_opened: int | None
