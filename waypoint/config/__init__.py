"""Waypoint configuration and logging."""
