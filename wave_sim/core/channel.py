"""Channel classes for network simulation.

This module defines the two transport fabrics nodes are attached to: an OCB
wireless medium with a single reachability threshold, and a wired CSMA bus.
Neither models medium access; every frame is delivered after its
transmission plus propagation delay.
"""

import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from wave_sim.core.address import InetSocketAddress
from wave_sim.core.enums import Fabric
from wave_sim.core.packet import Packet

if TYPE_CHECKING:
    from wave_sim.core.node import NetDevice
    from wave_sim.core.simulator import Simulator

SPEED_OF_LIGHT = 299792458.0

# Log-distance loss, exponent 3, 46.6777 dB at 1 m
REFERENCE_LOSS_DB = 46.6777
PATH_LOSS_EXPONENT = 3.0
RX_THRESHOLD_DBM = -96.0

_PHY_MODE_RATE = re.compile(r"Rate(\d+(?:_\d+)?)Mbps")


def parse_phy_mode(phy_mode: str) -> float:
    """Extract the data rate from a phy mode name.

    Args:
        phy_mode: Mode name such as "OfdmRate6MbpsBW10MHz" or
            "OfdmRate4_5MbpsBW10MHz".

    Returns:
        Data rate in bits per second.
    """
    match = _PHY_MODE_RATE.search(phy_mode)
    if match is None:
        raise ValueError(f"Cannot parse a data rate from phy mode {phy_mode!r}")
    return float(match.group(1).replace("_", ".")) * 1e6


@dataclass(frozen=True)
class Frame:
    """A UDP datagram in flight on a channel.

    Attributes:
        packet: Application payload.
        source: Sending socket address.
        destination: Destination socket address as given by the sender.
    """

    packet: Packet
    source: InetSocketAddress
    destination: InetSocketAddress


class Channel:
    """Base class for a shared medium between net devices.

    Attributes:
        simulator: Simulator the channel schedules deliveries on.
        fabric: Fabric this channel implements.
        capacity: Data rate in bits per second.
        devices: Net devices attached to the channel.
        packets_sent: Number of frames transmitted on this channel.
        bytes_sent: Number of payload bytes transmitted on this channel.
    """

    fabric: Fabric

    def __init__(self, simulator: "Simulator", capacity: float) -> None:
        self.simulator = simulator
        self.capacity = capacity
        self.devices: List["NetDevice"] = []
        self.packets_sent = 0
        self.bytes_sent = 0

    def attach(self, device: "NetDevice") -> None:
        self.devices.append(device)

    def calculate_transmission_delay(self, packet_size: int) -> float:
        """Calculate transmission delay based on packet size and capacity.

        Args:
            packet_size: Size of the packet in bytes.

        Returns:
            Transmission delay in seconds.
        """
        return (packet_size * 8) / self.capacity

    def propagation_delay(self, sender: "NetDevice", receiver: "NetDevice") -> float:
        raise NotImplementedError

    def reachable(self, sender: "NetDevice", receiver: "NetDevice") -> bool:
        raise NotImplementedError

    def transmit(self, sender: "NetDevice", frame: Frame) -> None:
        """Put a frame on the medium.

        Every other device that is addressed by the frame and reachable from
        the sender gets it after the total delay.

        Args:
            sender: Transmitting device.
            frame: Frame to deliver.
        """
        self.packets_sent += 1
        self.bytes_sent += frame.packet.size
        self.simulator.packet_sent(frame, sender)
        transmission_delay = self.calculate_transmission_delay(frame.packet.size)

        for receiver in self.devices:
            if receiver is sender or not receiver.accepts(frame.destination):
                continue
            if not self.reachable(sender, receiver):
                self.simulator.packet_dropped(frame, receiver.node, "Out of range")
                continue
            delay = transmission_delay + self.propagation_delay(sender, receiver)
            self.simulator.schedule(delay, receiver.receive, frame)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.devices)} devices, {self.capacity/1000000:.1f}Mbps)"


class WirelessChannel(Channel):
    """OCB wireless medium.

    A receiver hears a frame when the log-distance received power is at
    least the reception threshold.

    Attributes:
        tx_power: Transmit power in dBm, same for every device.
        rx_threshold: Minimum received power in dBm.
    """

    fabric = Fabric.OCB

    def __init__(
        self,
        simulator: "Simulator",
        phy_mode: str = "OfdmRate6MbpsBW10MHz",
        tx_power: float = 29.0,
        rx_threshold: float = RX_THRESHOLD_DBM,
    ) -> None:
        super().__init__(simulator, parse_phy_mode(phy_mode))
        self.phy_mode = phy_mode
        self.tx_power = tx_power
        self.rx_threshold = rx_threshold

    def received_power(self, distance: float) -> float:
        """Received power in dBm at a distance in metres."""
        if distance <= 1.0:
            return self.tx_power - REFERENCE_LOSS_DB
        return (
            self.tx_power
            - REFERENCE_LOSS_DB
            - 10 * PATH_LOSS_EXPONENT * math.log10(distance)
        )

    def propagation_delay(self, sender: "NetDevice", receiver: "NetDevice") -> float:
        return sender.node.distance_to(receiver.node) / SPEED_OF_LIGHT

    def reachable(self, sender: "NetDevice", receiver: "NetDevice") -> bool:
        distance = sender.node.distance_to(receiver.node)
        return self.received_power(distance) >= self.rx_threshold


class CsmaChannel(Channel):
    """Wired bus; every attached device is reachable.

    Attributes:
        delay: Fixed propagation delay in seconds.
    """

    fabric = Fabric.CSMA

    def __init__(
        self, simulator: "Simulator", capacity: float = 5e6, delay: float = 0.002
    ) -> None:
        super().__init__(simulator, capacity)
        self.delay = delay

    def propagation_delay(self, sender: "NetDevice", receiver: "NetDevice") -> float:
        return self.delay

    def reachable(self, sender: "NetDevice", receiver: "NetDevice") -> bool:
        return True

