"""Bounded retry policies for polling stages."""

import asyncio
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-spacing retry budget."""

    max_attempts: int
    delay_seconds: float

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

    @property
    def budget_seconds(self) -> float:
        """Upper bound on time spent sleeping between attempts."""
        return self.delay_seconds * (self.max_attempts - 1)

    def attempts(self) -> Iterator[int]:
        """Yield 1-based attempt numbers."""
        return iter(range(1, self.max_attempts + 1))

    async def pause(self, attempt: int, sleep: Sleep = asyncio.sleep) -> None:
        """Sleep before the next attempt; the last attempt is not followed by a wait."""
        if attempt < self.max_attempts:
            await sleep(self.delay_seconds)


CONFIRMATION_POLICY = RetryPolicy(max_attempts=30, delay_seconds=1.0)
BALANCE_POLICY = RetryPolicy(max_attempts=10, delay_seconds=2.0)
