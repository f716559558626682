#!/usr/bin/env python3
"""
Waypoint CLI Entry Point

Allows running Waypoint as a module: python -m waypoint
"""

from __future__ import annotations

from waypoint.core.service import cli

if __name__ == "__main__":
    cli()
