"""Packet class for network simulation.

This module defines the Packet class, an immutable byte payload carried
through the simulated network.
"""

import itertools
from dataclasses import dataclass, field

_uids = itertools.count(1)


@dataclass(frozen=True)
class Packet:
    """Represents an application packet.

    Attributes:
        data: Packet payload, fixed at construction.
        uid: Process-unique identifier for the packet.
    """

    data: bytes = b""
    uid: int = field(default_factory=lambda: next(_uids), compare=False)

    @classmethod
    def filled(cls, size: int, fill: int = 0) -> "Packet":
        """Create a packet of a given size made of a single filler byte.

        Args:
            size: Size of packet in bytes.
            fill: Value of every byte (default: 0).

        Returns:
            The created Packet.
        """
        return cls(bytes([fill]) * size)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Packet":
        """Create a packet holding a copy of explicit payload bytes."""
        return cls(bytes(data))

    @property
    def size(self) -> int:
        return len(self.data)

    def copy_data(self, size: int) -> bytes:
        """Copy at most size bytes of the payload.

        Args:
            size: Maximum number of bytes to copy.

        Returns:
            A copy of the leading payload bytes.
        """
        return self.data[:size]

    def __repr__(self) -> str:
        return f"Packet(uid={self.uid}, size={self.size})"
