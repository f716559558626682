"""
Waypoint Network Module

Local interface inspection and subnet candidate enumeration.
"""

from .interfaces import InterfaceInspector, first_match, host_ipv4_interfaces, select_local_address
from .subnet import enumerate_candidates, subnet_prefix

__all__ = [
    "InterfaceInspector",
    "first_match",
    "host_ipv4_interfaces",
    "select_local_address",
    "enumerate_candidates",
    "subnet_prefix",
]
