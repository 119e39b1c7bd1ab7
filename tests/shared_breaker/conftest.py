from __future__ import annotations

import pytest

import shared_breaker.circuit_breaker.breaker as breaker_mod
from tests.shared_breaker.support.breaker_fakes import (
    FakeClock,
    FakeLogger,
    RecordingStorage,
)


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Provide a fresh structured logger test double per test."""
    return FakeLogger()


@pytest.fixture
def recording_storage() -> RecordingStorage:
    """Provide in-memory storage that records writes."""
    return RecordingStorage()


@pytest.fixture
def fake_clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Pin the breaker's Unix clock to a controllable value."""
    clock = FakeClock()
    monkeypatch.setattr(breaker_mod, "_now", clock)
    return clock
