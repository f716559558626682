"""
Waypoint - zero-configuration orchestrator discovery on the local network.
"""

__version__ = "0.1.0"
