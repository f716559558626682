"""
Exception hierarchy for Waypoint.

Discovery itself degrades to empty or negative results; these are raised only
for malformed input, bad configuration and asset staging failures.
"""

from __future__ import annotations


class WaypointError(Exception):
    """Base class for all Waypoint errors."""


class InvalidAddressError(WaypointError, ValueError):
    """Raised when a string is not a usable IPv4 address."""

    def __init__(self, address: str, reason: str | None = None) -> None:
        self.address = address
        message = f"Invalid IPv4 address: {address!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigError(WaypointError):
    """Raised when a configuration file cannot be read or validated."""


class AssetError(WaypointError):
    """Raised when staging or cloning assets fails."""
