"""Shared error types for shared_breaker."""


class CircuitBreakerError(Exception):
    """Base exception for the shared_breaker package."""


class StorageError(CircuitBreakerError):
    """A storage backend could not complete an operation."""


class ConfigurationError(CircuitBreakerError, ValueError):
    """Invalid breaker or backend configuration."""
