"""Simulator class for network simulation.

This module defines the Simulator class, which owns the SimPy clock, the
nodes and channels of the topology, and the hook and trace-path
subscriptions the harness attaches to.
"""

import fnmatch
import functools
import logging
from collections import defaultdict
from ipaddress import IPv4Interface, IPv4Network
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import networkx as nx
import simpy

from wave_sim.core.channel import Channel, CsmaChannel, Frame, WirelessChannel
from wave_sim.core.errors import TopologyError
from wave_sim.core.node import NetDevice, Node, Position
from wave_sim.core.socket import UdpSocket

logger = logging.getLogger(__name__)


class TracedCallback:
    """A trace source applications fire and harness code subscribes to."""

    def __init__(self) -> None:
        self.callbacks: List[Callable[..., Any]] = []

    def connect(self, callback: Callable[..., Any]) -> None:
        self.callbacks.append(callback)

    def __call__(self, *args: Any) -> None:
        for callback in self.callbacks:
            callback(*args)


class Simulator:
    """Network simulation environment.

    Attributes:
        env: SimPy environment.
        graph: NetworkX multigraph of the topology, one edge key per fabric.
        nodes: Node objects keyed by node ID.
        channels: Channels in installation order.
        metrics: Per-run counters, filled in by calculate_metrics.
        destroyed: Whether destroy has been called.
    """

    def __init__(self, env: Optional[simpy.Environment] = None) -> None:
        """Initialize the simulator.

        Args:
            env: SimPy environment (default: a fresh one).
        """
        self.env = env if env is not None else simpy.Environment()
        self.graph = nx.MultiGraph()
        self.nodes: Dict[int, Node] = {}
        self.channels: List[Channel] = []
        self.stop_time: Optional[float] = None
        self.destroyed = False

        self.packets_sent: Dict[int, int] = defaultdict(int)
        self.packets_received: Dict[int, int] = defaultdict(int)
        self.packets_dropped: Dict[int, int] = defaultdict(int)
        self.metrics: Dict[str, Any] = {}

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "packet_sent": [],  # frame put on a channel
            "packet_received": [],  # frame delivered to a listening socket
            "packet_dropped": [],  # out of range or nobody listening
            "sim_end": [],  # the simulation ends
        }

    @property
    def now(self) -> float:
        return self.env.now

    # Topology

    def create_nodes(self, count: int) -> List[Node]:
        """Create nodes with consecutive IDs.

        Args:
            count: Number of nodes to create.

        Returns:
            The created Node objects.
        """
        created = []
        for _ in range(count):
            node = Node(self, len(self.nodes))
            self.nodes[node.id] = node
            self.graph.add_node(node.id, pos=node.position)
            created.append(node)
        return created

    def node(self, node_id: int) -> Node:
        if node_id not in self.nodes:
            raise TopologyError(f"Node {node_id} does not exist")
        return self.nodes[node_id]

    def set_positions(self, positions: Sequence[Position]) -> None:
        """Place nodes at constant positions, in node ID order."""
        if len(positions) > len(self.nodes):
            raise TopologyError(
                f"{len(positions)} positions given for {len(self.nodes)} nodes"
            )
        for node_id, position in enumerate(positions):
            node = self.node(node_id)
            node.position = tuple(float(c) for c in position)
            self.graph.nodes[node_id]["pos"] = node.position
        self._update_graph()

    def _install(
        self, channel: Channel, node_ids: Optional[Iterable[int]]
    ) -> List[NetDevice]:
        if node_ids is None:
            node_ids = list(self.nodes)
        self.channels.append(channel)
        return [self.node(node_id).add_device(channel) for node_id in node_ids]

    def install_wireless(
        self,
        node_ids: Optional[Iterable[int]] = None,
        phy_mode: str = "OfdmRate6MbpsBW10MHz",
        tx_power: float = 29.0,
    ) -> List[NetDevice]:
        """Attach nodes to a new OCB wireless channel.

        Args:
            node_ids: Nodes to attach (default: all nodes).
            phy_mode: Data and control mode name.
            tx_power: Transmit power in dBm.

        Returns:
            The created devices.
        """
        channel = WirelessChannel(self, phy_mode, tx_power)
        devices = self._install(channel, node_ids)
        logger.debug("Installed %r", channel)
        return devices

    def install_csma(
        self,
        node_ids: Optional[Iterable[int]] = None,
        capacity: float = 5e6,
        delay: float = 0.002,
    ) -> List[NetDevice]:
        """Attach nodes to a new CSMA bus.

        Args:
            node_ids: Nodes to attach (default: all nodes).
            capacity: Bus data rate in bits per second.
            delay: Propagation delay in seconds.

        Returns:
            The created devices.
        """
        channel = CsmaChannel(self, capacity, delay)
        devices = self._install(channel, node_ids)
        logger.debug("Installed %r", channel)
        return devices

    def assign_addresses(
        self, devices: Sequence[NetDevice], network: str
    ) -> List[IPv4Interface]:
        """Assign consecutive host addresses of a network to devices.

        Args:
            devices: Devices to address, in order.
            network: Network in CIDR notation, e.g. "10.1.1.0/24".

        Returns:
            The assigned interface addresses.
        """
        subnet = IPv4Network(network)
        hosts = subnet.hosts()
        assigned = []
        for device in devices:
            try:
                ip = next(hosts)
            except StopIteration:
                raise TopologyError(f"Network {network} has no address left") from None
            device.interface = IPv4Interface(f"{ip}/{subnet.prefixlen}")
            assigned.append(device.interface)
        logger.debug("Assigned %s to %d devices", network, len(assigned))
        self._update_graph()
        return assigned

    def _update_graph(self) -> None:
        """Rebuild the per-fabric edges between addressed, reachable devices."""
        self.graph.remove_edges_from(list(self.graph.edges(keys=True)))
        for channel in self.channels:
            addressed = [d for d in channel.devices if d.interface is not None]
            for i, a in enumerate(addressed):
                for b in addressed[i + 1:]:
                    if channel.reachable(a, b):
                        self.graph.add_edge(
                            a.node.id, b.node.id, key=channel.fabric.name,
                            fabric=channel.fabric,
                        )

    def create_socket(self, node_id: int) -> UdpSocket:
        return UdpSocket(self.node(node_id))

    # Scheduling

    def schedule(
        self, delay: float, action: Callable[..., Any], *args: Any
    ) -> simpy.Timeout:
        """Run an action once, delay seconds from now.

        Events fire in time order; events at the same time fire in the order
        they were scheduled.

        Args:
            delay: Non-negative delay in seconds.
            action: Function to call.
            *args: Arguments passed to the action.

        Returns:
            The SimPy event carrying the action.
        """
        event = self.env.timeout(delay)
        event.callbacks.append(lambda _: action(*args))
        return event

    def stop(self, at: float) -> None:
        """Set the time horizon used by run."""
        self.stop_time = at

    # Trace paths

    def connect(self, pattern: str, callback: Callable[..., Any]) -> int:
        """Subscribe a callback to every trace source whose path matches.

        Paths have the form
        "/NodeList/<node>/ApplicationList/<index>/$<Type>/<Source>" and the
        pattern may use shell wildcards. The callback receives the matched
        path followed by the trace source arguments. Only sources that exist
        at call time are matched.

        Args:
            pattern: Path pattern, e.g.
                "/NodeList/*/ApplicationList/*/$PacketSink/RxWithAddresses".
            callback: Function to subscribe.

        Returns:
            Number of trace sources connected.
        """
        connected = 0
        for node in self.nodes.values():
            for index, application in enumerate(node.applications):
                for name, source in application.trace_sources.items():
                    path = (
                        f"/NodeList/{node.id}/ApplicationList/{index}"
                        f"/${type(application).__name__}/{name}"
                    )
                    if fnmatch.fnmatchcase(path, pattern):
                        source.connect(functools.partial(callback, path))
                        connected += 1
        logger.debug("Connected %d trace sources to %s", connected, pattern)
        return connected

    # Packet events

    def packet_sent(self, frame: Frame, device: NetDevice) -> None:
        self.packets_sent[device.node.id] += 1
        self.call_hooks("packet_sent", frame, device, self.now)

    def packet_received(self, frame: Frame, node: Node) -> None:
        logger.debug(
            "%.6f node %d received %d bytes from %s",
            self.now, node.id, frame.packet.size, frame.source,
        )
        self.packets_received[node.id] += 1
        self.call_hooks("packet_received", frame, node, self.now)

    def packet_dropped(self, frame: Frame, node: Node, reason: str) -> None:
        logger.debug(
            "%.6f node %d dropped packet %d from %s: %s",
            self.now, node.id, frame.packet.uid, frame.source, reason,
        )
        self.packets_dropped[node.id] += 1
        self.call_hooks("packet_dropped", frame, node, reason, self.now)

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type.

        Args:
            event_type: The type of event that occurred.
            *args, **kwargs: Arguments to pass to the callback functions.
        """
        if event_type in self.hooks:
            for callback in self.hooks[event_type]:
                callback(*args, **kwargs)

    # Running

    def calculate_metrics(self) -> Dict[str, Any]:
        """Summarize packet counters for the run so far.

        Returns:
            Dictionary of calculated metrics.
        """
        sent = sum(self.packets_sent.values())
        received = sum(self.packets_received.values())
        dropped = sum(self.packets_dropped.values())
        self.metrics = {
            "end_time": self.now,
            "packets_sent": sent,
            "packets_received": received,
            "packets_dropped": dropped,
            "sent_per_node": dict(sorted(self.packets_sent.items())),
            "received_per_node": dict(sorted(self.packets_received.items())),
            "dropped_per_node": dict(sorted(self.packets_dropped.items())),
        }
        return self.metrics

    def run(self, until: Optional[float] = None) -> Dict[str, Any]:
        """Run the simulation up to a time horizon.

        Args:
            until: Horizon in seconds (default: the stop time, or until no
                event is left).

        Returns:
            Dictionary of calculated metrics.
        """
        if until is None:
            until = self.stop_time
        self.env.run(until=until)
        self.calculate_metrics()
        self.call_hooks("sim_end", self.metrics)
        return self.metrics

    def destroy(self) -> None:
        """Close every socket still open and release the topology."""
        for node in self.nodes.values():
            for socket in node.sockets:
                if not socket.closed:
                    socket.close()
        for hooks in self.hooks.values():
            hooks.clear()
        self.destroyed = True
        logger.debug("Simulator destroyed at %.6f", self.now)
