"""Enumerations for network simulation.

This module defines enumerations used throughout the network simulator.
"""

from enum import Enum


class Fabric(Enum):
    """Enum for the transport fabrics a node can be attached to.

    Attributes:
        OCB: 802.11p wireless medium operating outside the context of a BSS.
        CSMA: Shared wired bus.
    """

    OCB = 1
    CSMA = 2


class AddressFamily(Enum):
    """Enum for address families known to the simulator.

    Attributes:
        INET: IPv4 address plus UDP port.
        MAC: 48-bit hardware address.
        PACKET: Raw packet socket address.
    """

    INET = 1
    MAC = 2
    PACKET = 3


class GeneratorState(Enum):
    """Enum for the traffic generator state machine."""

    ACTIVE = 1
    CLOSED = 2
