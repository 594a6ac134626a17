"""
Bounded retry with randomized exponential backoff.

Each orchestrator retries whole attempts (session acquisition through
publication); no stage retries itself. Jitter keeps concurrent requests from
hammering the shared rendering engine in lockstep.
"""

import asyncio
import random
from typing import Awaitable, Callable, TypeVar

from resume_printer.contexts.printing.logger import log_retry

T = TypeVar("T")

MAX_ATTEMPTS = 3
BASE_DELAY = 1.0
BACKOFF_FACTOR = 2.0
MAX_DELAY = 30.0


class RetryOrchestrator:
    """
    Runs an attempt up to max_attempts times.

    Args:
        name: Operation name used in retry logs (e.g., "print", "generate a preview of")
        max_attempts: Total attempts, including the first
        base_delay: Delay before the first retry, before jitter (seconds)
        factor: Exponential growth of the delay per attempt
        max_delay: Upper bound on any single delay
        sleep: Awaitable sleep function (injectable for tests)
        rng: Random source providing uniform()
    """

    def __init__(
        self,
        name: str,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY,
        factor: float = BACKOFF_FACTOR,
        max_delay: float = MAX_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random = None,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.name = name
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.factor = factor
        self.max_delay = max_delay
        self._sleep = sleep
        self._rng = rng or random.Random()

    def delay_for(self, attempt: int) -> float:
        """Backoff before the given retry attempt (2 = first retry)."""
        delay = self.base_delay * self.factor ** (attempt - 2) * self._rng.uniform(1, 2)
        return min(self.max_delay, delay)

    async def run(self, operation: Callable[[], Awaitable[T]], resume_id: str) -> T:
        """
        Await operation() until it succeeds or attempts run out.

        Args:
            operation: Zero-argument coroutine function performing one full attempt
            resume_id: Identifier included in retry logs

        Returns:
            Result of the first successful attempt

        Raises:
            The exception of the final attempt, unchanged
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_attempts:
                    raise
                attempt += 1
                delay = self.delay_for(attempt)
                log_retry(self.name, resume_id, attempt, delay, e)
                await self._sleep(delay)
