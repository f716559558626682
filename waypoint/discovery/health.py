"""
Health polling for Waypoint

Waits for a single URL to start answering, retrying at a fixed interval.
"""
from __future__ import annotations

import asyncio
import contextlib

from enum import Enum

import aiohttp
import structlog

from waypoint.config.settings import HealthCheckPolicy
from waypoint.discovery.prober import PROBE_ERRORS

logger = structlog.get_logger(__name__)


class PollState(str, Enum):
    """HealthPoller states."""

    PROBING = "probing"
    SLEEPING = "sleeping"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    STOPPED = "stopped"


async def healthcheck(
    url: str,
    timeout: float = 1.0,
    session: aiohttp.ClientSession | None = None,
) -> bool:
    """Hit a URL once. Any completed response counts, whatever its status."""
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        if session is not None:
            async with session.get(url, timeout=client_timeout):
                return True
        async with aiohttp.ClientSession() as own_session:
            async with own_session.get(url, timeout=client_timeout):
                return True
    except PROBE_ERRORS as e:
        logger.debug("Health check failed", url=url, error=f"{e.__class__.__name__}: {e}")
        return False


class HealthPoller:
    """Repeatedly probes one URL until it answers or the budget runs out."""

    def __init__(
        self,
        policy: HealthCheckPolicy | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.policy = policy or HealthCheckPolicy()
        self.session = session
        self.state: PollState = PollState.PROBING
        self.attempts: int = 0

    async def check(self, url: str) -> bool:
        """Run a single attempt against url."""
        return await healthcheck(url, timeout=self.policy.timeout, session=self.session)

    async def wait_until_healthy(
        self,
        target_url: str | None = None,
        stop: asyncio.Event | None = None,
    ) -> bool:
        """Poll until the target answers.

        Args:
            target_url: URL to poll, defaults to the policy's target
            stop: Optional event; once set the poll ends and returns False

        Returns:
            True once an attempt succeeds, False when the attempt budget is
            exhausted or the stop event is set
        """
        url = target_url or self.policy.target
        if not url:
            raise ValueError("No health check target given")

        bounded = self.policy.bounded
        remaining = self.policy.max_attempts if bounded else None
        self.attempts = 0
        self.state = PollState.PROBING

        logger.info(
            "Waiting for healthy target",
            url=url,
            max_attempts=remaining,
            interval=self.policy.interval,
        )

        while True:
            if bounded and remaining <= 0:
                self.state = PollState.EXHAUSTED
                logger.warning("Health check attempts exhausted", url=url, attempts=self.attempts)
                return False

            if stop is not None and stop.is_set():
                self.state = PollState.STOPPED
                logger.info("Health poll stopped", url=url, attempts=self.attempts)
                return False

            self.state = PollState.PROBING
            self.attempts += 1
            if await self.check(url):
                self.state = PollState.SUCCEEDED
                logger.info("Target is healthy", url=url, attempts=self.attempts)
                return True

            logger.debug("Target not ready", url=url, attempt=self.attempts)

            if bounded:
                remaining -= 1
                if remaining <= 0:
                    continue

            self.state = PollState.SLEEPING
            await self._sleep(stop)

    async def _sleep(self, stop: asyncio.Event | None) -> None:
        """Sleep one interval, waking early if stop gets set."""
        if stop is None:
            await asyncio.sleep(self.policy.interval)
            return
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout=self.policy.interval)


async def wait_until_healthy(
    target_url: str,
    policy: HealthCheckPolicy | None = None,
    stop: asyncio.Event | None = None,
) -> bool:
    """Poll target_url under policy with a fresh HealthPoller."""
    return await HealthPoller(policy).wait_until_healthy(target_url, stop=stop)


async def wait_for_good_healthcheck(url: str, retry_count: int | None = None) -> bool:
    """Poll url with the baseline timings; retry_count=None retries forever."""
    return await wait_until_healthy(url, HealthCheckPolicy(max_attempts=retry_count))
