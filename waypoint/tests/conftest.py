"""Pytest configuration and fixtures for Waypoint tests."""
from __future__ import annotations

import asyncio
from typing import Any, AsyncGenerator, Awaitable, Callable, Generator

import pytest
import structlog
from aiohttp import web
from aiohttp.test_utils import unused_port

from waypoint.config.settings import HealthCheckPolicy, ScanConfig, SubnetBounds


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Drop logging configuration installed by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def probe_port() -> int:
    """A port that is free on every loopback address."""
    return unused_port()


@pytest.fixture
async def http_responder() -> AsyncGenerator[Callable[..., Awaitable[None]], None]:
    """Start aiohttp servers answering /ping on a given loopback address."""
    runners: list[web.AppRunner] = []

    async def start(host: str, port: int, status: int = 200, path: str = "/ping") -> None:
        async def handler(request: web.Request) -> web.Response:
            return web.json_response({"status": "ok"}, status=status)

        app = web.Application()
        app.router.add_get(path, handler)
        runner = web.AppRunner(app)
        await runner.setup()
        await web.TCPSite(runner, host, port).start()
        runners.append(runner)

    yield start

    for runner in runners:
        await runner.cleanup()


@pytest.fixture
async def silent_server() -> AsyncGenerator[Callable[..., Awaitable[None]], None]:
    """Start TCP servers that accept connections and never answer."""
    servers: list[asyncio.AbstractServer] = []

    async def hold(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        # Hold the connection open until the client gives up
        await reader.read()
        writer.close()

    async def start(host: str, port: int) -> None:
        servers.append(await asyncio.start_server(hold, host, port))

    yield start

    for server in servers:
        server.close()
        await server.wait_closed()


@pytest.fixture
def fast_policy() -> HealthCheckPolicy:
    """Health check policy with short timings."""
    return HealthCheckPolicy(timeout=0.5, interval=0.05, max_attempts=3)


@pytest.fixture
def scan_config(probe_port: int) -> ScanConfig:
    """Scan config sweeping 127.0.0.1 - 127.0.0.9."""
    return ScanConfig(
        port=probe_port,
        probe_timeout=1.0,
        bounds=SubnetBounds(lower=1, upper=10),
    )


@pytest.fixture
def sample_waypoint_config() -> dict[str, Any]:
    """Partial YAML configuration for loader tests."""
    return {
        "scan": {
            "port": 9000,
            "bounds": {"lower": 10, "upper": 20},
        },
        "health": {
            "max_attempts": 5,
        },
        "logging": {
            "level": "debug",
        },
    }
