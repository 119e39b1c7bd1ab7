"""Circuit breaker exceptions.

Callers can distinguish between:
  - A storage backend failing to read or write breaker state.
  - A call being refused because the circuit is open.
"""

from shared_breaker.errors import (
    CircuitBreakerError,
    ConfigurationError,
    StorageError,
)


class CircuitOpenError(CircuitBreakerError):
    """Raised by ``raise_if_open`` when the circuit for a service is open.

    Attributes:
        service_name: Service whose circuit is open.
        retry_after: Seconds until a half-open probe may be attempted.
    """

    def __init__(self, service_name: str, retry_after: int) -> None:
        """Initialize a circuit-open exception payload.

        Args:
            service_name: Service whose circuit is open.
            retry_after: Seconds until the next probe window opens.
        """
        self.service_name = service_name
        self.retry_after = retry_after
        super().__init__(f"circuit_open: {service_name} retry_after={retry_after}s")


__all__ = [
    "CircuitBreakerError",
    "CircuitOpenError",
    "ConfigurationError",
    "StorageError",
]
