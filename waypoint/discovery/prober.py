"""
Concurrent liveness prober for Waypoint

Fans out one HTTP request per candidate address and collects every address
that answered, in the order the answers arrived.
"""
from __future__ import annotations

import asyncio
import time

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import aiohttp
import structlog

logger = structlog.get_logger(__name__)

# Anything the transport can raise while connecting or reading headers
PROBE_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
)


class ProbeStatus(str, Enum):
    """Outcome of a single probe."""

    RESPONDED = "responded"
    FAILED = "failed"


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing one address. Carries no latency or status code."""

    address: str
    status: ProbeStatus

    @property
    def responded(self) -> bool:
        return self.status == ProbeStatus.RESPONDED


@dataclass
class ScanSession:
    """In-flight probes and the responders collected so far."""

    pending: set[asyncio.Task] = field(default_factory=set)
    responders: list[str] = field(default_factory=list)
    failed: int = 0

    def record(self, outcome: ProbeOutcome) -> None:
        if outcome.responded:
            self.responders.append(outcome.address)
        else:
            self.failed += 1


async def probe_address(
    session: aiohttp.ClientSession,
    url: str,
    address: str,
    timeout: float,
) -> ProbeOutcome:
    """Issue one GET and report whether any response came back.

    The HTTP status is deliberately ignored: a 500 still proves the port is
    served by something speaking HTTP.
    """
    try:
        async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)):
            pass
    except PROBE_ERRORS as e:
        logger.debug("Nothing found", address=address, error=f"{e.__class__.__name__}: {e}")
        return ProbeOutcome(address, ProbeStatus.FAILED)

    logger.debug("Address responded", address=address)
    return ProbeOutcome(address, ProbeStatus.RESPONDED)


def probe_url(address: str, port: int, endpoint_path: str) -> str:
    return f"http://{address}:{port}{endpoint_path}"


class ConcurrentProber:
    """Probes every candidate at once and waits for all of them to resolve."""

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        """
        Initialize the prober.

        Args:
            session: Shared HTTP session; a private one is opened per scan if None
        """
        self.session = session

    async def probe_all(
        self,
        candidates: Iterable[str],
        port: int,
        endpoint_path: str = "/ping",
        per_probe_timeout: float = 2.0,
    ) -> list[str]:
        """Probe all candidates concurrently.

        Args:
            candidates: Addresses to probe
            port: Port to probe on each address
            endpoint_path: HTTP path requested on each address
            per_probe_timeout: Timeout applied to each probe independently

        Returns:
            Addresses that responded, in completion order
        """
        candidates = list(candidates)
        if not candidates:
            return []

        if self.session is not None:
            return await self._scan(self.session, candidates, port, endpoint_path, per_probe_timeout)

        # No pool limit: a /24 sweep opens ~255 connections at once
        connector = aiohttp.TCPConnector(limit=0, force_close=True)
        async with aiohttp.ClientSession(connector=connector) as session:
            return await self._scan(session, candidates, port, endpoint_path, per_probe_timeout)

    async def _scan(
        self,
        session: aiohttp.ClientSession,
        candidates: list[str],
        port: int,
        endpoint_path: str,
        per_probe_timeout: float,
    ) -> list[str]:
        started = time.monotonic()
        scan = ScanSession()

        logger.info(
            "Starting subnet probe",
            candidates=len(candidates),
            port=port,
            path=endpoint_path,
            timeout=per_probe_timeout,
        )

        # Launch everything before awaiting anything
        for address in candidates:
            scan.pending.add(
                asyncio.create_task(
                    probe_address(
                        session,
                        probe_url(address, port, endpoint_path),
                        address,
                        per_probe_timeout,
                    )
                )
            )

        try:
            while scan.pending:
                done, scan.pending = await asyncio.wait(
                    scan.pending, return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    outcome: ProbeOutcome = task.result()
                    if outcome.responded:
                        logger.info("Found responder", address=outcome.address, port=port)
                    scan.record(outcome)
        finally:
            # Only reached with work pending if the scan itself was cancelled
            for task in scan.pending:
                task.cancel()

        logger.info(
            "Subnet probe complete",
            responders=scan.responders,
            failed=scan.failed,
            elapsed=round(time.monotonic() - started, 3),
        )
        return scan.responders


async def probe_all(
    candidates: Iterable[str],
    port: int,
    endpoint_path: str = "/ping",
    per_probe_timeout: float = 2.0,
) -> list[str]:
    """Probe candidates with a throwaway ConcurrentProber."""
    return await ConcurrentProber().probe_all(candidates, port, endpoint_path, per_probe_timeout)
