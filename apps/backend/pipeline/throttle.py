"""
Inter-job throttling and settle waits.

Sleep and randomness are injected so batch timing can be asserted in tests
without waiting on the wall clock.
"""

import random
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .outcomes import JobOutcome, is_fast_path_success

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class Throttle:
    """Politeness delays between jobs and settle waits inside a job."""

    def __init__(
        self,
        fast_delay_s: float = 0.5,
        slow_delay_min_s: float = 2.0,
        slow_delay_max_s: float = 15.0,
        sleep: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
    ):
        self.fast_delay_s = fast_delay_s
        self.slow_delay_min_s = slow_delay_min_s
        self.slow_delay_max_s = slow_delay_max_s
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, config, sleep: Optional[SleepFunc] = None,
                    rng: Optional[random.Random] = None) -> "Throttle":
        return cls(
            fast_delay_s=config.fast_delay_s,
            slow_delay_min_s=config.slow_delay_min_s,
            slow_delay_max_s=config.slow_delay_max_s,
            sleep=sleep,
            rng=rng,
        )

    def delay_after(self, outcome: Optional[JobOutcome]) -> float:
        """
        Delay before the next job.

        Short and fixed after a fast-path (server-rendered) success; otherwise
        drawn uniformly from the slow window so browser-driven visits do not
        follow a fixed rhythm.
        """
        if is_fast_path_success(outcome):
            return self.fast_delay_s
        return self._rng.uniform(self.slow_delay_min_s, self.slow_delay_max_s)

    async def pause_after(self, outcome: Optional[JobOutcome]) -> float:
        delay = self.delay_after(outcome)
        logger.debug(f"[enrich] Waiting {delay:.2f}s before next job")
        await self._sleep(delay)
        return delay

    async def settle(self, seconds: float) -> None:
        """Wait for client-side rendering to finish."""
        if seconds > 0:
            await self._sleep(seconds)
