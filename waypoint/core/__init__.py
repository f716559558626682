"""Waypoint beacon service and command line."""
