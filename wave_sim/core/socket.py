"""UDP socket for network simulation.

This module defines UdpSocket, the endpoint applications send and receive
datagrams through.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Deque, Optional, Tuple

from wave_sim.core.address import ANY, BROADCAST, InetSocketAddress
from wave_sim.core.channel import Frame
from wave_sim.core.errors import SocketError
from wave_sim.core.packet import Packet

if TYPE_CHECKING:
    from wave_sim.core.node import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    """A received datagram.

    Attributes:
        packet: Received packet.
        source: Address of the sending socket.
        destination: Local address the datagram arrived on.
    """

    packet: Packet
    source: InetSocketAddress
    destination: InetSocketAddress


class UdpSocket:
    """Connectionless datagram socket bound to a node.

    Attributes:
        node: Owning node.
        local: Bound local address, or None before bind.
        remote: Default destination set by connect, or None.
        allow_broadcast: Whether sends to broadcast addresses are allowed.
        closed: Whether the socket has been closed.
    """

    def __init__(self, node: "Node") -> None:
        self.node = node
        self.local: Optional[InetSocketAddress] = None
        self.remote: Optional[InetSocketAddress] = None
        self.allow_broadcast = False
        self.closed = False
        self.rx_queue: Deque[Message] = deque()
        self._recv_callback: Optional[Callable[["UdpSocket"], None]] = None
        node.sockets.append(self)

    def _check_open(self) -> None:
        if self.closed:
            raise SocketError(f"Socket on node {self.node.id} is closed")

    def bind(self, local: Optional[InetSocketAddress] = None) -> None:
        """Bind to a local address; port 0 or None picks an ephemeral port.

        Args:
            local: Local address to bind to (default: any address).
        """
        self._check_open()
        if local is None:
            local = InetSocketAddress(ANY, 0)
        if local.port == 0:
            local = InetSocketAddress(local.ip, self.node.allocate_port())
        for other in self.node.sockets:
            if other is not self and not other.closed and other.local == local:
                raise SocketError(f"Address {local} already in use on node {self.node.id}")
        self.local = local

    def connect(self, remote: InetSocketAddress) -> None:
        """Set the default destination, binding first if needed."""
        self._check_open()
        if self.local is None:
            self.bind()
        self.remote = remote

    def set_allow_broadcast(self, allow: bool) -> None:
        self.allow_broadcast = allow

    def set_recv_callback(self, callback: Callable[["UdpSocket"], None]) -> None:
        """Register a function called with the socket whenever data arrives."""
        self._recv_callback = callback

    def send(self, packet: Packet) -> int:
        """Send a packet to the connected remote address.

        Args:
            packet: Packet to send.

        Returns:
            Number of bytes sent.
        """
        if self.remote is None:
            raise SocketError(f"Socket on node {self.node.id} is not connected")
        return self.send_to(packet, self.remote)

    def send_to(self, packet: Packet, remote: InetSocketAddress) -> int:
        """Send a packet to an explicit remote address.

        Args:
            packet: Packet to send.
            remote: Destination address.

        Returns:
            Number of bytes sent.
        """
        self._check_open()
        if self.local is None:
            self.bind()

        devices = self.node.devices_for(remote.ip)
        if not devices:
            raise SocketError(f"No route from node {self.node.id} to {remote.ip}")
        broadcast = remote.ip == BROADCAST or any(
            remote.ip == d.interface.network.broadcast_address for d in devices
        )
        if broadcast and not self.allow_broadcast:
            raise SocketError(f"Broadcast to {remote} not allowed on node {self.node.id}")

        for device in devices:
            source = InetSocketAddress(device.ip, self.local.port)
            logger.debug(
                "%.6f node %d sends %d bytes %s -> %s",
                self.node.simulator.now, self.node.id, packet.size, source, remote,
            )
            device.send(Frame(packet, source, remote))
        return packet.size

    def is_listening_on(self, local: InetSocketAddress) -> bool:
        """Check whether a datagram arriving on local belongs to this socket."""
        if self.closed or self.local is None or self.local.port != local.port:
            return False
        return self.local.ip in (ANY, local.ip)

    def enqueue(self, frame: Frame, local: InetSocketAddress) -> None:
        """Queue an arriving datagram and notify the receive callback."""
        self.rx_queue.append(Message(frame.packet, frame.source, local))
        if self._recv_callback is not None:
            self._recv_callback(self)

    def recv_message(self) -> Optional[Message]:
        """Pop the oldest received datagram, or None when none is queued."""
        if not self.rx_queue:
            return None
        return self.rx_queue.popleft()

    def recv_from(self) -> Optional[Tuple[Packet, InetSocketAddress]]:
        """Pop the oldest received packet and its source address.

        Returns:
            (packet, source) or None when no datagram is queued.
        """
        message = self.recv_message()
        if message is None:
            return None
        return message.packet, message.source

    def close(self) -> None:
        self._check_open()
        self.closed = True
        self._recv_callback = None
        logger.debug("node %d socket %s closed", self.node.id, self.local)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"UdpSocket(node={self.node.id}, {self.local} -> {self.remote}, {state})"
