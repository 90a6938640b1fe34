"""Traffic generators for network simulation.

This module provides the timed traffic generator, which sends a fixed number
of filler packets at a constant interval and then closes its socket, and the
one-shot sender, which sends the text in a payload buffer once.
"""

import logging

import simpy

from wave_sim.core.enums import GeneratorState
from wave_sim.core.packet import Packet
from wave_sim.core.simulator import Simulator
from wave_sim.core.socket import UdpSocket
from wave_sim.traffic.payload import PayloadBuffer

logger = logging.getLogger(__name__)


class TrafficGenerator:
    """Constant bit rate sender bound to one socket.

    Each invocation of generate either sends one packet and schedules the
    next invocation interval seconds later, or, once the count is used up,
    closes the socket and moves to CLOSED.

    Attributes:
        simulator: Simulator used for rescheduling.
        socket: Connected socket the packets go out on.
        packet_size: Size of every packet in bytes.
        remaining: Packets still to send.
        interval: Time between packets in seconds.
        state: ACTIVE until the socket has been closed.
        packets_sent: Number of packets sent so far.
    """

    def __init__(
        self,
        simulator: Simulator,
        socket: UdpSocket,
        packet_size: int,
        count: int,
        interval: float,
    ) -> None:
        """Initialize a traffic generator.

        Args:
            simulator: Simulator used for rescheduling.
            socket: Connected socket to send on.
            packet_size: Size of packets in bytes.
            count: Number of packets to send.
            interval: Time between packets in seconds.
        """
        self.simulator = simulator
        self.socket = socket
        self.packet_size = packet_size
        self.remaining = count
        self.interval = interval
        self.state = GeneratorState.ACTIVE
        self.packets_sent = 0

    def start(self, delay: float = 0.0) -> simpy.Timeout:
        """Schedule the first invocation delay seconds from now."""
        return self.simulator.schedule(delay, self.generate)

    def generate(self) -> None:
        if self.state is GeneratorState.CLOSED:
            return

        if self.remaining > 0:
            self.socket.send(Packet.filled(self.packet_size))
            self.packets_sent += 1
            self.remaining -= 1
            self.simulator.schedule(self.interval, self.generate)
        else:
            self.socket.close()
            self.state = GeneratorState.CLOSED
            logger.debug(
                "%.6f generator on node %d closed after %d packets",
                self.simulator.now, self.socket.node.id, self.packets_sent,
            )

    def __repr__(self) -> str:
        return (
            f"TrafficGenerator({self.socket.node}, {self.packet_size}B, "
            f"remaining={self.remaining}, {self.state.name})"
        )


def generate_traffic(
    simulator: Simulator,
    socket: UdpSocket,
    packet_size: int,
    count: int,
    interval: float,
    delay: float = 0.0,
) -> TrafficGenerator:
    """Create a traffic generator and schedule its first invocation.

    Args:
        simulator: Simulator to schedule on.
        socket: Connected socket to send on.
        packet_size: Size of packets in bytes.
        count: Number of packets to send.
        interval: Time between packets in seconds.
        delay: Time until the first packet in seconds (default: 0).

    Returns:
        The started TrafficGenerator.
    """
    generator = TrafficGenerator(simulator, socket, packet_size, count, interval)
    generator.start(delay)
    return generator


def send_data(
    payload: PayloadBuffer, socket: UdpSocket, text: str
) -> Packet:
    """Fill the payload buffer with text and send it once.

    Args:
        payload: Buffer owned by the caller.
        socket: Connected socket to send on; it is left open.
        text: Message to send.

    Returns:
        The packet that was sent.
    """
    payload.set_fill(text)
    logger.debug("node %d sends %r", socket.node.id, payload.text())
    return payload.send(socket)
