"""Node class for network simulation.

This module defines the Node class, an addressable host in the simulated
network, and the NetDevice that attaches it to a channel.
"""

import math
from ipaddress import IPv4Address, IPv4Interface
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from wave_sim.core.address import BROADCAST, InetSocketAddress
from wave_sim.core.channel import Channel, Frame
from wave_sim.core.enums import Fabric

if TYPE_CHECKING:
    from wave_sim.core.simulator import Simulator
    from wave_sim.core.socket import UdpSocket

Position = Tuple[float, float, float]


class NetDevice:
    """Attachment of a node to a channel.

    Attributes:
        node: Owning node.
        channel: Channel the device transmits on.
        index: Index of the device on its node.
        interface: IPv4 interface address, once assigned.
    """

    def __init__(self, node: "Node", channel: Channel, index: int) -> None:
        self.node = node
        self.channel = channel
        self.index = index
        self.interface: Optional[IPv4Interface] = None

    @property
    def fabric(self) -> Fabric:
        return self.channel.fabric

    @property
    def ip(self) -> Optional[IPv4Address]:
        return self.interface.ip if self.interface is not None else None

    def accepts(self, destination: InetSocketAddress) -> bool:
        """Check whether a frame addressed to destination is for this device."""
        if self.interface is None:
            return False
        return destination.ip in (
            self.interface.ip,
            self.interface.network.broadcast_address,
            BROADCAST,
        )

    def send(self, frame: Frame) -> None:
        self.channel.transmit(self, frame)

    def receive(self, frame: Frame) -> None:
        self.node.deliver(frame, self)

    def __repr__(self) -> str:
        return f"NetDevice(node={self.node.id}, {self.fabric.name}, {self.interface})"


class Node:
    """Represents a network host.

    Attributes:
        simulator: Simulator the node lives in.
        id: Unique identifier for the node.
        position: Constant (x, y, z) position in metres.
        devices: Net devices, in installation order.
        applications: Installed applications, in installation order.
        sockets: Sockets created on this node.
    """

    EPHEMERAL_PORT_START = 49153

    def __init__(
        self,
        simulator: "Simulator",
        node_id: int,
        position: Position = (0.0, 0.0, 0.0),
    ) -> None:
        self.simulator = simulator
        self.id = node_id
        self.position = position
        self.devices: List[NetDevice] = []
        self.applications: List[Any] = []
        self.sockets: List["UdpSocket"] = []
        self._next_port = self.EPHEMERAL_PORT_START

    def add_device(self, channel: Channel) -> NetDevice:
        """Attach the node to a channel.

        Args:
            channel: Channel to attach to.

        Returns:
            The created NetDevice.
        """
        device = NetDevice(self, channel, len(self.devices))
        self.devices.append(device)
        channel.attach(device)
        return device

    def add_application(self, application: Any) -> int:
        """Install an application and return its index on the node."""
        self.applications.append(application)
        return len(self.applications) - 1

    def allocate_port(self) -> int:
        port = self._next_port
        self._next_port += 1
        return port

    def distance_to(self, other: "Node") -> float:
        return math.dist(self.position, other.position)

    def devices_for(self, destination: IPv4Address) -> List[NetDevice]:
        """Pick the outgoing devices for a destination address.

        Limited broadcast leaves through every addressed device; any other
        destination goes out of the first device whose subnet contains it.

        Args:
            destination: Destination IPv4 address.

        Returns:
            The outgoing devices, empty if no device reaches the destination.
        """
        addressed = [d for d in self.devices if d.interface is not None]
        if destination == BROADCAST:
            return addressed
        for device in addressed:
            if destination in device.interface.network:
                return [device]
        return []

    def deliver(self, frame: Frame, device: NetDevice) -> None:
        """Hand an arriving frame to every socket bound to its port.

        Args:
            frame: Arriving frame.
            device: Device the frame arrived on.
        """
        local = InetSocketAddress(device.ip, frame.destination.port)
        listeners = [s for s in self.sockets if s.is_listening_on(local)]
        if not listeners:
            self.simulator.packet_dropped(frame, self, "No listening socket")
            return

        self.simulator.packet_received(frame, self)
        for socket in listeners:
            socket.enqueue(frame, local)

    def __repr__(self) -> str:
        return f"Node({self.id})"
