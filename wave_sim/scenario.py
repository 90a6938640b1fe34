"""Three-node 802.11p OCB broadcast experiment.

Node 0 broadcasts "haha" at 2 s over the OCB wireless channel; packet sinks
on every node print what they received. Optional flows add a unicast from
node 2 to node 1 and a constant bit rate generator from node 0.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from wave_sim.config import SimulationConfig
from wave_sim.core.address import ANY, BROADCAST, InetSocketAddress
from wave_sim.core.simulator import Simulator
from wave_sim.traffic.generators import TrafficGenerator, generate_traffic, send_data
from wave_sim.traffic.payload import PayloadBuffer
from wave_sim.traffic.sink import PacketSink, install_packet_sinks
from wave_sim.traffic.tracer import ReceiveTracer
from wave_sim.utils.metrics import log_metrics

logger = logging.getLogger(__name__)

SINK_PORT = 80
GENERATOR_PORT = 1234
SINK_START = 0.01
BROADCAST_TIME = 2.0
GENERATOR_START = 1.0
RX_WITH_ADDRESSES = "/NodeList/*/ApplicationList/*/$PacketSink/RxWithAddresses"


@dataclass
class Scenario:
    """Everything built for one run, kept for inspection after it.

    Attributes:
        simulator: Simulator the scenario runs on.
        tracer: Tracer printing every reception.
        payload: Buffer the one-shot messages are sent from.
        sinks: Packet sinks keyed by node ID.
        generator: Traffic generator, when enabled.
        metrics: Metrics returned by the run.
    """

    simulator: Simulator
    tracer: ReceiveTracer
    payload: PayloadBuffer = field(default_factory=PayloadBuffer)
    sinks: Dict[int, PacketSink] = field(default_factory=dict)
    generator: Optional[TrafficGenerator] = None
    metrics: Dict = field(default_factory=dict)


def build_topology(simulator: Simulator, config: SimulationConfig) -> None:
    """Three nodes on an OCB wireless channel and an unaddressed CSMA bus.

    Args:
        simulator: Empty simulator.
        config: Run parameters (phy mode, transmit power, distance).
    """
    simulator.create_nodes(3)
    simulator.set_positions([
        (0.0, 0.0, 0.0),
        (config.distance, 0.0, 0.0),
        (600.0, 0.0, 0.0),
    ])

    wireless = simulator.install_wireless(phy_mode=config.phyMode, tx_power=config.txp)
    simulator.install_csma(capacity=5e6, delay=0.002)

    simulator.assign_addresses(wireless, "10.1.1.0/24")


def build_scenario(config: SimulationConfig) -> Scenario:
    """Build the topology, attach tracers and schedule all flows.

    Args:
        config: Run parameters.

    Returns:
        The scenario, ready to run.
    """
    simulator = Simulator()
    simulator.stop(config.stop_time)
    scenario = Scenario(simulator, ReceiveTracer(simulator))

    build_topology(simulator, config)

    scenario.sinks = install_packet_sinks(
        simulator, InetSocketAddress(ANY, SINK_PORT), SINK_START
    )
    simulator.connect(RX_WITH_ADDRESSES, scenario.tracer.two_address_trace)

    source = simulator.create_socket(0)
    source.set_allow_broadcast(True)
    source.connect(InetSocketAddress(BROADCAST, SINK_PORT))
    simulator.schedule(BROADCAST_TIME, send_data, scenario.payload, source, "haha")

    if config.unicast:
        node1 = simulator.node(1).devices[0].ip
        source1 = simulator.create_socket(2)
        source1.set_allow_broadcast(True)
        source1.connect(InetSocketAddress(node1, SINK_PORT))
        simulator.schedule(
            1 + config.intervalTime, send_data, scenario.payload, source1, "test"
        )

    if config.generate:
        for node_id in simulator.nodes:
            recv_sink = simulator.create_socket(node_id)
            recv_sink.bind(InetSocketAddress(ANY, GENERATOR_PORT))
            recv_sink.set_recv_callback(scenario.tracer.receive_packet)

        generator_socket = simulator.create_socket(0)
        generator_socket.set_allow_broadcast(True)
        generator_socket.connect(InetSocketAddress(BROADCAST, GENERATOR_PORT))
        scenario.generator = generate_traffic(
            simulator,
            generator_socket,
            config.packetSize,
            config.numPackets,
            config.interval,
            delay=GENERATOR_START,
        )

    return scenario


def run_scenario(config: SimulationConfig) -> Scenario:
    """Build, run to the horizon and tear down one scenario."""
    scenario = build_scenario(config)
    logger.info(
        "Running %d nodes until %gs", len(scenario.simulator.nodes), config.stop_time
    )

    if config.visualize:
        from wave_sim.utils.visualization import save_network_visualization

        save_network_visualization(scenario.simulator)

    scenario.metrics = scenario.simulator.run()
    log_metrics(scenario.metrics)
    scenario.simulator.destroy()
    return scenario


def main(argv: Optional[List[str]] = None) -> int:
    """Run the experiment from the command line."""
    config = SimulationConfig.from_args(argv)
    config.configure_logging()
    run_scenario(config)
    return 0
