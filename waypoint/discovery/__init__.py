"""
Waypoint Discovery Module

Provides concurrent subnet probing, orchestrator location and health polling.
"""

from .prober import ConcurrentProber, ProbeOutcome, ProbeStatus, ScanSession, probe_all
from .locator import OrchestratorLocator, find_orchestrator_on_lan
from .health import (
    HealthPoller,
    PollState,
    healthcheck,
    wait_for_good_healthcheck,
    wait_until_healthy,
)

__all__ = [
    "ConcurrentProber",
    "ProbeOutcome",
    "ProbeStatus",
    "ScanSession",
    "probe_all",
    "OrchestratorLocator",
    "find_orchestrator_on_lan",
    "HealthPoller",
    "PollState",
    "healthcheck",
    "wait_for_good_healthcheck",
    "wait_until_healthy",
]
