"""Wrappers around the git CLI."""

from __future__ import annotations

import asyncio

from pathlib import Path

import structlog

from waypoint.exceptions import AssetError

logger = structlog.get_logger(__name__)


async def clone_remote_branch(
    url: str,
    branch: str,
    dst_dir: Path,
    timeout: float = 300,
) -> None:
    """Clone branch of the repository at url into dst_dir.

    Raises:
        AssetError: If git is missing, times out or exits non-zero
    """
    logger.info("Cloning repository", url=url, branch=branch, dst=str(dst_dir))
    try:
        process: asyncio.subprocess.Process = await asyncio.create_subprocess_exec(
            "git",
            "clone",
            "-b",
            branch,
            url,
            str(dst_dir),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise AssetError("git command not found - is git installed?") from e

    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        raise AssetError(f"git clone of {url} timed out after {timeout}s") from e

    if process.returncode != 0:
        logger.error(
            "git clone failed",
            url=url,
            returncode=process.returncode,
            stderr=stderr.decode(errors="replace"),
        )
        raise AssetError(f"git clone of {url} exited with {process.returncode}")
