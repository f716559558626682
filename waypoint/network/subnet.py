"""
Subnet candidate enumeration for Waypoint

The sweep assumes a /24 network regardless of the interface's real prefix
length: the first three octets of the local address are kept and the fourth is
swept across the configured bounds.
"""
from __future__ import annotations

from ipaddress import AddressValueError, IPv4Address

from waypoint.config.settings import SubnetBounds
from waypoint.exceptions import InvalidAddressError


def subnet_prefix(local: str) -> tuple[int, int, int]:
    """Return the first three octets of an IPv4 address."""
    try:
        octets = IPv4Address(local.strip()).packed
    except (AddressValueError, AttributeError) as e:
        raise InvalidAddressError(str(local), str(e)) from e
    return octets[0], octets[1], octets[2]


def enumerate_candidates(local: str, bounds: SubnetBounds | None = None) -> list[str]:
    """Build the candidate addresses sharing local's first three octets.

    Args:
        local: LAN address of this host
        bounds: Fourth-octet range to sweep, defaults to [0, 255)

    Returns:
        Candidate addresses in ascending fourth-octet order
    """
    bounds = bounds or SubnetBounds()
    a, b, c = subnet_prefix(local)
    return [f"{a}.{b}.{c}.{d}" for d in range(bounds.lower, bounds.upper)]
