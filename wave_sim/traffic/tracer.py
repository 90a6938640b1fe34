"""Receive tracers.

Two ways of observing arrivals, both printing one line per packet:

- ReceiveTracer.receive_packet is a socket receive callback that drains the
  socket and reports the node that received each packet;
- ReceiveTracer.two_address_trace is connected to the RxWithAddresses trace
  source of packet sinks and reports the address the sink socket is bound
  to.

Payloads are read as NUL-terminated text. Only Inet addresses are decoded;
other address families produce a generic line.
"""

from typing import List, Optional

from wave_sim.core.address import AnyAddress, InetSocketAddress
from wave_sim.core.packet import Packet
from wave_sim.core.simulator import Simulator
from wave_sim.core.socket import UdpSocket


def decode_text(packet: Packet) -> str:
    """Read a packet payload as a NUL-terminated string.

    The payload is copied into a buffer one byte longer than the packet
    with the last byte set to NUL, so unterminated payloads stay in bounds.

    Args:
        packet: Received packet; it is not modified.

    Returns:
        The text up to the first NUL byte.
    """
    buffer = bytearray(packet.size + 1)
    buffer[: packet.size] = packet.copy_data(packet.size)
    buffer[packet.size] = 0
    return buffer[: buffer.index(0)].decode("utf-8", errors="replace")


def describe_source(packet: Packet, source: Optional[AnyAddress]) -> str:
    if InetSocketAddress.is_matching_type(source):
        return f"received one packet from {source.ip}. data: {decode_text(packet)}"
    return "received one packet!"


def print_received_packet(
    now: float, socket: UdpSocket, packet: Packet, source: Optional[AnyAddress]
) -> str:
    """Format the line for one packet taken from a socket.

    Args:
        now: Current virtual time in seconds.
        socket: Socket the packet was read from.
        packet: Received packet.
        source: Source address returned with the packet.

    Returns:
        The formatted line.
    """
    return f"{now:g} node {socket.node.id} {describe_source(packet, source)}"


class ReceiveTracer:
    """Prints arrivals observed on a simulator.

    Attributes:
        simulator: Simulator providing the virtual time.
        lines: Every line printed so far.
    """

    def __init__(self, simulator: Simulator) -> None:
        self.simulator = simulator
        self.lines: List[str] = []

    def _emit(self, line: str) -> None:
        print(line)
        self.lines.append(line)

    def receive_packet(self, socket: UdpSocket) -> None:
        """Drain a socket, printing one line per packet."""
        while True:
            received = socket.recv_from()
            if received is None:
                break
            packet, source = received
            self._emit(print_received_packet(self.simulator.now, socket, packet, source))

    def two_address_trace(
        self,
        context: str,
        packet: Packet,
        source: Optional[AnyAddress],
        destination: Optional[AnyAddress],
    ) -> None:
        """Print the line for one packet reported with both addresses.

        Args:
            context: Trace path the callback was connected through; not printed.
            packet: Received packet.
            source: Address of the sender.
            destination: Address the receiving socket is bound to.
        """
        line = f"{self.simulator.now:g}"
        if InetSocketAddress.is_matching_type(destination):
            line += f" {destination.ip}"
        self._emit(f"{line} {describe_source(packet, source)}")
