"""
Orchestrator locator for Waypoint

Chains interface inspection, subnet enumeration and concurrent probing to find
an orchestrator on the local /24.
"""
from __future__ import annotations

import structlog

from waypoint.config.settings import ScanConfig
from waypoint.discovery.prober import ConcurrentProber
from waypoint.network.interfaces import InterfaceInspector
from waypoint.network.subnet import enumerate_candidates

logger = structlog.get_logger(__name__)


class OrchestratorLocator:
    """Finds orchestrators listening on the local subnet."""

    def __init__(
        self,
        config: ScanConfig | None = None,
        inspector: InterfaceInspector | None = None,
        prober: ConcurrentProber | None = None,
    ) -> None:
        self.config = config or ScanConfig()
        self.inspector = inspector or InterfaceInspector()
        self.prober = prober or ConcurrentProber()

    async def scan(self, port: int | None = None) -> list[str]:
        """Return every responder on the local subnet, in completion order."""
        port = port or self.config.port

        local = self.inspector.select_local_address()
        if local is None:
            logger.warning("No LAN address available, nothing to scan", port=port)
            return []

        candidates = enumerate_candidates(local, self.config.bounds)
        logger.info(
            "Scanning local subnet",
            local_address=local,
            candidates=len(candidates),
            port=port,
        )
        return await self.prober.probe_all(
            candidates,
            port,
            self.config.endpoint_path,
            self.config.probe_timeout,
        )

    async def locate(self, port: int | None = None) -> str | None:
        """Return one responder, or None if nothing answered.

        Whichever responder arrived first is returned. This is neither the
        lowest address nor stable between runs.
        """
        responders = await self.scan(port)
        if not responders:
            logger.info("No orchestrator found on LAN", port=port or self.config.port)
            return None

        orchestrator = responders[0]
        logger.info("Orchestrator found", address=orchestrator, responders=len(responders))
        return orchestrator


async def find_orchestrator_on_lan(port: int, config: ScanConfig | None = None) -> str | None:
    """Locate an orchestrator on port using default host inspection."""
    return await OrchestratorLocator(config).locate(port)
