"""Backoff utilities.

`exponential_backoff` yields `(attempt, delay)` for the caller to make one connection
attempt, then sleeps before the next attempt. Attempts are numbered from 1; the final
attempt is `max_attempts`, after which the generator stops without sleeping.
"""
import asyncio
from typing import AsyncIterator


async def exponential_backoff(
    initial_delay: float,
    max_delay: float,
    multiplier: float,
    max_attempts: int,
) -> AsyncIterator[tuple[int, float]]:
    delay = min(initial_delay, max_delay)
    for attempt in range(1, max_attempts + 1):
        yield attempt, delay
        if attempt < max_attempts:
            await asyncio.sleep(delay)
            delay = min(delay * multiplier, max_delay)
