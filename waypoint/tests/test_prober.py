"""Tests for the concurrent prober.

Servers are bound to distinct 127.0.0.x addresses, which Linux routes to the
loopback interface without extra configuration.
"""

from __future__ import annotations

import time

import aiohttp
import pytest

from waypoint.discovery.prober import (
    ConcurrentProber,
    ProbeOutcome,
    ProbeStatus,
    ScanSession,
    probe_address,
    probe_all,
)

CANDIDATES = [f"127.0.0.{d}" for d in range(1, 10)]


class TestConcurrentProber:
    """Test fan-out probing across a candidate set."""

    async def test_collects_all_responders(self, http_responder, probe_port: int):
        await http_responder("127.0.0.2", probe_port)
        await http_responder("127.0.0.5", probe_port)

        responders = await probe_all(CANDIDATES, probe_port, "/ping", 1.0)

        assert sorted(responders) == ["127.0.0.2", "127.0.0.5"]

    async def test_error_status_counts_as_responder(self, http_responder, probe_port: int):
        """A 500 still proves something is serving HTTP on the port."""
        await http_responder("127.0.0.3", probe_port, status=500)
        await http_responder("127.0.0.4", probe_port, status=404)

        responders = await probe_all(CANDIDATES, probe_port, "/ping", 1.0)

        assert sorted(responders) == ["127.0.0.3", "127.0.0.4"]

    async def test_unknown_path_still_responds(self, http_responder, probe_port: int):
        await http_responder("127.0.0.2", probe_port, path="/other")

        responders = await probe_all(CANDIDATES, probe_port, "/ping", 1.0)

        assert responders == ["127.0.0.2"]

    async def test_responders_subset_of_candidates(self, http_responder, probe_port: int):
        await http_responder("127.0.0.2", probe_port)
        await http_responder("127.0.0.8", probe_port)

        candidates = ["127.0.0.1", "127.0.0.2", "127.0.0.3"]
        responders = await probe_all(candidates, probe_port, "/ping", 1.0)

        assert responders == ["127.0.0.2"]
        assert set(responders) <= set(candidates)

    async def test_no_responders(self, probe_port: int):
        assert await probe_all(CANDIDATES, probe_port, "/ping", 1.0) == []

    async def test_empty_candidates(self, probe_port: int):
        assert await probe_all([], probe_port) == []

    async def test_slow_candidates_time_out_concurrently(
        self, http_responder, silent_server, probe_port: int
    ):
        """Five hung hosts cost one timeout, not five."""
        timeout = 0.5
        for d in range(4, 9):
            await silent_server(f"127.0.0.{d}", probe_port)
        await http_responder("127.0.0.2", probe_port)

        started = time.monotonic()
        responders = await probe_all(CANDIDATES, probe_port, "/ping", timeout)
        elapsed = time.monotonic() - started

        assert responders == ["127.0.0.2"]
        # Waited for the hung probes instead of returning on first success
        assert elapsed >= timeout * 0.9
        assert elapsed < timeout * 3

    async def test_hung_host_does_not_hide_responder(
        self, http_responder, silent_server, probe_port: int
    ):
        await silent_server("127.0.0.1", probe_port)
        await http_responder("127.0.0.9", probe_port)

        responders = await probe_all(["127.0.0.1", "127.0.0.9"], probe_port, "/ping", 0.5)

        assert responders == ["127.0.0.9"]

    async def test_injected_session(self, http_responder, probe_port: int):
        await http_responder("127.0.0.6", probe_port)

        async with aiohttp.ClientSession() as session:
            prober = ConcurrentProber(session=session)
            responders = await prober.probe_all(CANDIDATES, probe_port, "/ping", 1.0)
            assert not session.closed

        assert responders == ["127.0.0.6"]


class TestProbeAddress:
    """Test single probe outcomes."""

    async def test_refused_is_failed(self, probe_port: int):
        async with aiohttp.ClientSession() as session:
            outcome = await probe_address(
                session, f"http://127.0.0.1:{probe_port}/ping", "127.0.0.1", 1.0
            )
        assert outcome == ProbeOutcome("127.0.0.1", ProbeStatus.FAILED)
        assert not outcome.responded

    async def test_timeout_is_failed(self, silent_server, probe_port: int):
        await silent_server("127.0.0.1", probe_port)
        async with aiohttp.ClientSession() as session:
            outcome = await probe_address(
                session, f"http://127.0.0.1:{probe_port}/ping", "127.0.0.1", 0.2
            )
        assert outcome.status == ProbeStatus.FAILED

    async def test_response_is_responded(self, http_responder, probe_port: int):
        await http_responder("127.0.0.1", probe_port, status=503)
        async with aiohttp.ClientSession() as session:
            outcome = await probe_address(
                session, f"http://127.0.0.1:{probe_port}/ping", "127.0.0.1", 1.0
            )
        assert outcome.responded


class TestScanSession:
    def test_record(self):
        session = ScanSession()
        session.record(ProbeOutcome("10.0.0.2", ProbeStatus.RESPONDED))
        session.record(ProbeOutcome("10.0.0.3", ProbeStatus.FAILED))
        session.record(ProbeOutcome("10.0.0.1", ProbeStatus.RESPONDED))

        assert session.responders == ["10.0.0.2", "10.0.0.1"]
        assert session.failed == 1


@pytest.mark.parametrize("status", list(ProbeStatus))
def test_outcome_responded_flag(status: ProbeStatus):
    assert ProbeOutcome("10.0.0.1", status).responded is (status == ProbeStatus.RESPONDED)
