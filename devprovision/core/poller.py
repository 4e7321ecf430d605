"""
Bounded fixed-interval poller used to wait for a tool to become responsive.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..models.descriptor import PollPolicy, Probe
from .capabilities import run_probe


class PollOutcome(str, Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class PollResult:
    """Outcome of one poll and how many times the probe was called."""
    outcome: PollOutcome
    attempts: int

    @property
    def ready(self) -> bool:
        return self.outcome == PollOutcome.READY


class BackoffPoller:
    """Invokes a probe until it passes or the attempt budget runs out."""

    def __init__(self,
                 probe_timeout: Optional[float] = 10.0,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        """
        Initialize the poller.

        Args:
            probe_timeout: Upper bound for a single probe call
            sleep: Replacement for ``asyncio.sleep`` when no cancel event is used
        """
        self.logger = logging.getLogger(__name__)
        self.probe_timeout = probe_timeout
        self._sleep = sleep or asyncio.sleep

    async def poll(self,
                   probe: Probe,
                   policy: PollPolicy,
                   cancel_event: Optional[asyncio.Event] = None,
                   deadline: Optional[float] = None) -> PollResult:
        """
        Poll a probe with a fixed interval.

        Args:
            probe: Readiness probe
            policy: Attempt budget and interval
            cancel_event: Setting this event interrupts the wait immediately
            deadline: Absolute event loop time after which polling stops

        Returns:
            PollResult with the outcome and number of probe calls made
        """
        loop = asyncio.get_running_loop()
        attempts = 0

        while attempts < policy.max_attempts:
            if cancel_event is not None and cancel_event.is_set():
                return PollResult(PollOutcome.CANCELLED, attempts)

            attempts += 1
            if await run_probe(probe, self.probe_timeout):
                self.logger.debug(f"Probe passed on attempt {attempts}/{policy.max_attempts}")
                return PollResult(PollOutcome.READY, attempts)

            self.logger.info(f"Attempt {attempts}/{policy.max_attempts} - not yet responsive, waiting...")
            if attempts >= policy.max_attempts:
                break

            wait = policy.interval_seconds
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    self.logger.warning("Poll deadline reached")
                    break
                wait = min(wait, remaining)

            if await self._wait(wait, cancel_event):
                return PollResult(PollOutcome.CANCELLED, attempts)

        return PollResult(PollOutcome.TIMED_OUT, attempts)

    async def _wait(self, seconds: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Wait for the interval. Returns True if cancelled while waiting."""
        if cancel_event is None:
            await self._sleep(seconds)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False
