# tests/conftest.py

from __future__ import annotations

import pytest

from .fakes import FakeClock, FakeTimer


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(0)


@pytest.fixture()
def timer(clock: FakeClock) -> FakeTimer:
    """
    Timer wired to the clock fixture.

    Scheduler tests use the pair instead of real time so every
    assertion is deterministic.
    """
    return FakeTimer(clock)


@pytest.fixture()
def perform_log() -> list[tuple[str, int, int]]:
    return []
