"""Packet sink application.

A PacketSink binds a UDP socket on its node, drains it on every arrival and
fires its Rx and RxWithAddresses trace sources. A zero-length datagram ends
the read loop.
"""

import logging
from typing import Dict, Optional

from wave_sim.core.address import InetSocketAddress
from wave_sim.core.simulator import Simulator, TracedCallback
from wave_sim.core.socket import UdpSocket

logger = logging.getLogger(__name__)


class PacketSink:
    """Receives and counts datagrams on a local address.

    Trace sources:
        Rx(packet, source)
        RxWithAddresses(packet, source, local), local being the bound address

    Attributes:
        simulator: Simulator the sink is scheduled on.
        node_id: ID of the node the sink runs on.
        local: Local address to bind to.
        socket: Listening socket, once started.
        total_rx: Number of bytes received.
    """

    def __init__(
        self, simulator: Simulator, node_id: int, local: InetSocketAddress
    ) -> None:
        self.simulator = simulator
        self.node_id = node_id
        self.local = local
        self.socket: Optional[UdpSocket] = None
        self.total_rx = 0
        self.trace_sources: Dict[str, TracedCallback] = {
            "Rx": TracedCallback(),
            "RxWithAddresses": TracedCallback(),
        }
        self.index = simulator.node(node_id).add_application(self)

    def start(self, at: float = 0.0) -> None:
        """Schedule the sink to start listening at a virtual time."""
        self.simulator.schedule(at - self.simulator.now, self._start)

    def _start(self) -> None:
        self.socket = self.simulator.create_socket(self.node_id)
        self.socket.bind(self.local)
        self.socket.set_recv_callback(self.handle_read)
        logger.debug("%.6f sink on node %d listening on %s", self.simulator.now, self.node_id, self.local)

    def handle_read(self, socket: UdpSocket) -> None:
        while True:
            message = socket.recv_message()
            if message is None or message.packet.size == 0:
                break
            self.total_rx += message.packet.size
            self.trace_sources["Rx"](message.packet, message.source)
            self.trace_sources["RxWithAddresses"](
                message.packet, message.source, socket.local
            )


def install_packet_sinks(
    simulator: Simulator, local: InetSocketAddress, start_time: float = 0.0
) -> Dict[int, PacketSink]:
    """Install and start a PacketSink on every node.

    Args:
        simulator: Simulator holding the nodes.
        local: Local address every sink binds to.
        start_time: Virtual time the sinks start listening.

    Returns:
        Sinks keyed by node ID.
    """
    sinks = {}
    for node_id in simulator.nodes:
        sink = PacketSink(simulator, node_id, local)
        sink.start(start_time)
        sinks[node_id] = sink
    return sinks
