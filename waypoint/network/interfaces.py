"""
Local interface inspection for Waypoint

Picks one IPv4 address from the host's interfaces to derive the subnet that
discovery sweeps.
"""
from __future__ import annotations

import socket

from typing import Callable

import psutil
import structlog

logger = structlog.get_logger(__name__)

LOOPBACK_ADDRESS = "127.0.0.1"

InterfaceProvider = Callable[[], dict[str, list[str]]]
SelectionPolicy = Callable[[list[str]], str | None]


def host_ipv4_interfaces() -> dict[str, list[str]]:
    """Return IPv4 addresses bound to each host interface.

    Interface order is whatever the host reports and is not stable.
    """
    interfaces: dict[str, list[str]] = {}
    for name, addrs in psutil.net_if_addrs().items():
        interfaces[name] = [addr.address for addr in addrs if addr.family == socket.AF_INET]
    return interfaces


def first_match(addresses: list[str]) -> str | None:
    """Default selection policy: the first qualifying address wins."""
    return addresses[0] if addresses else None


class InterfaceInspector:
    """Selects a representative non-loopback IPv4 address."""

    def __init__(
        self,
        interfaces: InterfaceProvider | None = None,
        policy: SelectionPolicy | None = None,
    ) -> None:
        """
        Initialize the inspector.

        Args:
            interfaces: Callable returning interface name -> IPv4 addresses
            policy: Callable choosing one address from the qualifying ones
        """
        self.interfaces: InterfaceProvider = interfaces or host_ipv4_interfaces
        self.policy: SelectionPolicy = policy or first_match

    def candidate_addresses(self) -> list[str]:
        """List every non-loopback IPv4 address in enumeration order."""
        try:
            interfaces = self.interfaces()
        except (OSError, RuntimeError) as e:
            logger.warning(
                "Failed to enumerate network interfaces",
                error=f"{e.__class__.__name__}: {e}",
            )
            return []

        qualifying: list[str] = []
        for name, addresses in interfaces.items():
            for address in addresses:
                if address == LOOPBACK_ADDRESS:
                    continue
                logger.debug("Usable interface address", interface=name, address=address)
                qualifying.append(address)
        return qualifying

    def select_local_address(self) -> str | None:
        """Return the chosen LAN address, or None if only loopback exists."""
        address = self.policy(self.candidate_addresses())
        if address is None:
            logger.info("No non-loopback IPv4 address found")
        else:
            logger.debug("Selected local address", address=address)
        return address


def select_local_address(inspector: InterfaceInspector | None = None) -> str | None:
    """Convenience wrapper around InterfaceInspector.select_local_address."""
    return (inspector or InterfaceInspector()).select_local_address()
