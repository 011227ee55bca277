"""Shared fixtures for session registry tests."""

from datetime import datetime, timedelta, timezone

import pytest

from session_registry import SessionRegistry


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return SessionRegistry(lifetime_minutes=30, id_length=64, clock=clock)
