"""
Shared pytest fixtures for all rainbow_relay tests.

Provides the fake chains and an engine whose sleeps return immediately.
Import these fixtures automatically via pytest discovery.
"""

from __future__ import annotations

import asyncio

import pytest

from rainbow_relay.relay import RelayEngine, RetryPolicy
from tests.rainbow_relay.helpers import FakeSourceChain, FakeTargetChain


@pytest.fixture
def source() -> FakeSourceChain:
    """Source chain with no blocks registered."""
    return FakeSourceChain()


@pytest.fixture
def target() -> FakeTargetChain:
    """Initialized verifier contract at height 100 with no stake."""
    return FakeTargetChain()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """
    Replace engine sleeps with instant ones and record their durations.

    A sleep also moves the fake target chain's clock forward by the whole
    seconds slept, as real time would.
    """
    recorded: list[float] = []

    async def instant_sleep(self: RelayEngine, seconds: float) -> None:
        recorded.append(seconds)
        if isinstance(self.target, FakeTargetChain):
            self.target.chain_time += int(seconds)
        await asyncio.sleep(0)

    monkeypatch.setattr(RelayEngine, "_sleep", instant_sleep)
    return recorded


@pytest.fixture
def engine(source: FakeSourceChain, target: FakeTargetChain, sleeps: list[float]) -> RelayEngine:
    """Engine wired to the fakes, with instant sleeps and unlimited retries."""
    return RelayEngine(source=source, target=target, retry_policy=RetryPolicy())
