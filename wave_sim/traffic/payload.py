"""Reusable outgoing payload."""

from wave_sim.core.packet import Packet
from wave_sim.core.socket import UdpSocket


class PayloadBuffer:
    """Holds the current outgoing message as NUL-terminated bytes.

    The storage is only reallocated when the length of the content changes,
    so repeated fills of the same length reuse one buffer. A second set_fill
    before send overwrites the pending content.

    Attributes:
        size: Buffer size in bytes, len(content) + 1 after a fill.
        data: Buffer storage.
    """

    def __init__(self) -> None:
        self.size = 0
        self.data = bytearray()

    def set_fill(self, content: str) -> None:
        """Copy content plus a terminator into the buffer.

        Args:
            content: Text to send next.
        """
        encoded = content.encode("utf-8")
        needed = len(encoded) + 1

        if needed != self.size:
            self.data = bytearray(needed)
            self.size = needed

        self.data[:] = encoded + b"\0"

    def send(self, socket: UdpSocket) -> Packet:
        """Send the buffer contents once on a socket.

        Args:
            socket: Connected socket to send on.

        Returns:
            The packet that was sent.
        """
        packet = Packet.from_bytes(self.data)
        socket.send(packet)
        return packet

    def text(self) -> str:
        return self.data[: max(self.size - 1, 0)].decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"PayloadBuffer(size={self.size}, {bytes(self.data)!r})"
