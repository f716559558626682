"""
Main Waypoint Service

Runs the orchestrator-side beacon that other nodes discover, and provides the
command line front end for locating, scanning and waiting on orchestrators.
"""
from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import uvicorn

from fastapi import FastAPI

from waypoint.config.logging import configure_logging, get_logger
from waypoint.config.settings import LOG_LEVELS, HealthCheckPolicy, WaypointConfig, load_config
from waypoint.discovery import HealthPoller, OrchestratorLocator
from waypoint.exceptions import ConfigError
from waypoint.node.identity import get_node_name

logger = get_logger(__name__)


def create_beacon_app(node_name: str | None = None) -> FastAPI:
    """Create the FastAPI application answered by an orchestrator."""
    node_name = node_name or get_node_name()
    app = FastAPI(
        title="Waypoint",
        description="Orchestrator discovery beacon",
        version="0.1.0",
    )

    @app.get("/ping")
    async def ping() -> dict[str, Any]:
        """Discovery probe endpoint."""
        return {"status": "ok", "node": node_name}

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(UTC).isoformat()}

    return app


class WaypointService:
    """Beacon service announcing this node as an orchestrator."""

    def __init__(self, config: WaypointConfig | None = None):
        """
        Initialize Waypoint service.

        Args:
            config: Service configuration (uses defaults if None)
        """
        self.config = config or WaypointConfig()
        self.node_name = get_node_name()
        self.app = create_beacon_app(self.node_name)
        self._server: uvicorn.Server | None = None

        logger.info("Waypoint service initialized", node=self.node_name)

    async def run(self) -> None:
        """Serve the beacon until a shutdown signal arrives."""
        config = uvicorn.Config(
            app=self.app,
            host=self.config.beacon.bind,
            port=self.config.beacon.port,
            log_config=None,  # We handle logging ourselves
            access_log=False,
        )
        self._server = uvicorn.Server(config)

        def signal_handler(signum, frame):
            logger.info("Received shutdown signal", signal=signum)
            self.stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        logger.info(
            "Starting beacon",
            bind=self.config.beacon.bind,
            port=self.config.beacon.port,
        )
        try:
            await self._server.serve()
        except Exception as e:
            logger.error("Beacon server error", error=f"{e.__class__.__name__}: {e}")
            raise

    def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Zero-configuration orchestrator discovery",
    )
    parser.add_argument("--config", "-c", type=Path, help="Configuration file path")
    parser.add_argument("--log-level", help="Logging level")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("locate", "Print the first orchestrator found on the LAN"),
        ("scan", "Print every orchestrator found on the LAN"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--port", "-p", type=int, help="Orchestrator port")
        sub.add_argument("--timeout", "-t", type=float, help="Per-probe timeout in seconds")
        sub.add_argument("--path", help="Probe endpoint path")

    wait = subparsers.add_parser("wait", help="Wait until a URL answers")
    wait.add_argument("url", help="URL to poll")
    wait.add_argument("--retries", "-r", type=int, help="Attempt budget (default: forever)")
    wait.add_argument("--interval", "-i", type=float, help="Seconds between attempts")
    wait.add_argument("--timeout", "-t", type=float, help="Per-attempt timeout in seconds")

    serve = subparsers.add_parser("serve", help="Run the discovery beacon")
    serve.add_argument("--bind", help="Bind address")
    serve.add_argument("--port", "-p", type=int, help="Listen port")

    return parser


def apply_overrides(config: WaypointConfig, args: argparse.Namespace) -> WaypointConfig:
    """Layer command line options over the loaded configuration."""
    updates: dict[str, dict[str, Any]] = {"scan": {}, "health": {}, "beacon": {}, "logging": {}}

    if args.log_level:
        updates["logging"]["level"] = args.log_level
    if args.json_logs:
        updates["logging"]["json_format"] = True

    if args.command in ("locate", "scan"):
        if args.port is not None:
            updates["scan"]["port"] = args.port
        if args.timeout is not None:
            updates["scan"]["probe_timeout"] = args.timeout
        if args.path:
            updates["scan"]["endpoint_path"] = args.path
    elif args.command == "wait":
        updates["health"]["target"] = args.url
        if args.retries is not None:
            updates["health"]["max_attempts"] = args.retries
        if args.interval is not None:
            updates["health"]["interval"] = args.interval
        if args.timeout is not None:
            updates["health"]["timeout"] = args.timeout
    elif args.command == "serve":
        if args.bind:
            updates["beacon"]["bind"] = args.bind
        if args.port is not None:
            updates["beacon"]["port"] = args.port

    data = config.model_dump()
    for section, values in updates.items():
        data[section].update(values)
    return WaypointConfig.model_validate(data)


async def run_command(config: WaypointConfig, command: str) -> int:
    """Execute one CLI command and return its exit code."""
    if command == "locate":
        orchestrator = await OrchestratorLocator(config.scan).locate()
        if orchestrator is None:
            return 1
        print(orchestrator)
        return 0

    if command == "scan":
        responders = await OrchestratorLocator(config.scan).scan()
        for address in responders:
            print(address)
        return 0 if responders else 1

    if command == "wait":
        policy: HealthCheckPolicy = config.health
        healthy = await HealthPoller(policy).wait_until_healthy()
        return 0 if healthy else 1

    if command == "serve":
        await WaypointService(config).run()
        return 0

    raise ValueError(f"Unknown command: {command}")


async def main(argv: list[str] | None = None) -> int:
    """Main entry point for the waypoint command."""
    args = build_parser().parse_args(argv)

    # Config loading logs too, so route it to stderr before the file is read
    cli_level = (args.log_level or "INFO").upper()
    configure_logging(
        log_level=cli_level if cli_level in LOG_LEVELS else "INFO",
        json_logs=args.json_logs,
    )

    try:
        config = apply_overrides(load_config(args.config), args)
    except (ConfigError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(
        log_level=config.logging.level,
        json_logs=config.logging.json_format,
    )

    try:
        return await run_command(config, args.command)
    except Exception as e:
        logger.error("Waypoint command failed", command=args.command, error=f"{e.__class__.__name__}: {e}")
        return 1


def cli() -> None:
    """Console script wrapper."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    cli()
