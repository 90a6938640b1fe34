"""Socket addresses for network simulation.

Only InetSocketAddress is decoded by the receive tracers; any other family
is carried around as a generic Address.
"""

from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import Union

from wave_sim.core.enums import AddressFamily

BROADCAST = IPv4Address("255.255.255.255")
ANY = IPv4Address("0.0.0.0")


@dataclass(frozen=True)
class Address:
    """Opaque address of an arbitrary family.

    Attributes:
        family: Address family tag.
        raw: Serialized address bytes.
    """

    family: AddressFamily
    raw: bytes = b""

    def __str__(self) -> str:
        return f"{self.family.name.lower()}:{self.raw.hex(':')}"


@dataclass(frozen=True)
class InetSocketAddress:
    """IPv4 address and UDP port pair.

    Attributes:
        ip: IPv4 address.
        port: UDP port number.
    """

    ip: IPv4Address
    port: int = 0

    def __post_init__(self):
        """Coerce string addresses into IPv4Address."""
        if not isinstance(self.ip, IPv4Address):
            object.__setattr__(self, "ip", IPv4Address(self.ip))

    @property
    def family(self) -> AddressFamily:
        return AddressFamily.INET

    @staticmethod
    def is_matching_type(address: "AnyAddress") -> bool:
        """Check whether an address belongs to the Inet family.

        Args:
            address: Address to classify, possibly None.

        Returns:
            True if the address can be decoded as an InetSocketAddress.
        """
        return isinstance(address, InetSocketAddress)

    def is_broadcast(self) -> bool:
        return self.ip == BROADCAST

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


AnyAddress = Union[Address, InetSocketAddress]
