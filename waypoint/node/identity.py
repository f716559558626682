"""Node identity helpers."""

from __future__ import annotations

import platform

from typing import Callable

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_NODE_NAME = "unknown-model"


def get_node_name(resolver: Callable[[], str] = platform.node) -> str:
    """Return a user-friendly name for this node (the `uname -n` value).

    Falls back to ``unknown-model`` when the host name cannot be determined.
    """
    try:
        name = resolver().strip()
    except OSError as e:
        logger.warning("Unable to find node name, using default", error=f"{e.__class__.__name__}: {e}")
        return DEFAULT_NODE_NAME

    if not name:
        logger.warning("Unable to find node name, using default")
        return DEFAULT_NODE_NAME
    return name
