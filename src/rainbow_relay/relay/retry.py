"""Backoff policy for retrying failed relay steps."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Capped exponential backoff.

    The n-th consecutive failure (counting from 1) waits
    `min(initial_delay * multiplier ** (n - 1), max_delay)` seconds.
    """

    initial_delay: float = 1.0
    """Delay after the first failure, in seconds."""

    multiplier: float = 2.0
    """Growth factor between consecutive delays."""

    max_delay: float = 60.0
    """Upper bound on any single delay, in seconds."""

    max_attempts: int | None = None
    """Consecutive failed attempts after which the error propagates. `None` retries forever."""

    def __post_init__(self) -> None:
        if self.initial_delay < 0 or self.max_delay < self.initial_delay:
            raise ValueError("RetryPolicy requires 0 <= initial_delay <= max_delay")
        if self.multiplier < 1:
            raise ValueError("RetryPolicy multiplier must be >= 1")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("RetryPolicy max_attempts must be >= 1")

    def delay(self, failures: int) -> float:
        """Seconds to wait after `failures` consecutive failures."""
        if failures < 1:
            return 0.0
        return min(self.initial_delay * self.multiplier ** (failures - 1), self.max_delay)

    def exhausted(self, failures: int) -> bool:
        """Whether `failures` consecutive failures use up the allowed attempts."""
        return self.max_attempts is not None and failures >= self.max_attempts
