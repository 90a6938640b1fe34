from wave_sim.core.address import InetSocketAddress
from wave_sim.core.packet import Packet
from wave_sim.scenario import RX_WITH_ADDRESSES
from wave_sim.traffic.sink import PacketSink, install_packet_sinks
from wave_sim.traffic.tracer import ReceiveTracer


def _unicast_to_node1(simulator, *packets):
    source = simulator.create_socket(0)
    source.connect(InetSocketAddress("10.1.1.2", 80))
    for at, packet in packets:
        simulator.schedule(at, source.send, packet)


def test_zero_length_datagram_is_not_traced(line_of_nodes):
    simulator = line_of_nodes
    tracer = ReceiveTracer(simulator)
    sinks = install_packet_sinks(simulator, InetSocketAddress("0.0.0.0", 80))
    simulator.connect(RX_WITH_ADDRESSES, tracer.two_address_trace)

    _unicast_to_node1(
        simulator,
        (1.0, Packet.filled(0)),
        (1.5, Packet.from_bytes(b"next\0")),
    )
    simulator.run(until=2.0)

    assert len(tracer.lines) == 1
    assert tracer.lines[0].endswith("data: next")
    assert sinks[1].total_rx == 5


def test_trace_reports_the_bound_address(line_of_nodes):
    simulator = line_of_nodes
    tracer = ReceiveTracer(simulator)
    sink = PacketSink(simulator, 1, InetSocketAddress("10.1.1.2", 80))
    sink.start()
    simulator.connect(RX_WITH_ADDRESSES, tracer.two_address_trace)

    _unicast_to_node1(simulator, (1.0, Packet.from_bytes(b"hi\0")))
    simulator.run(until=2.0)

    assert [line.split()[1] for line in tracer.lines] == ["10.1.1.2"]


def test_rx_trace_source_reports_the_sender(line_of_nodes):
    simulator = line_of_nodes
    received = []
    sinks = install_packet_sinks(simulator, InetSocketAddress("0.0.0.0", 80))
    sinks[1].trace_sources["Rx"].connect(lambda packet, source: received.append(source))

    _unicast_to_node1(simulator, (1.0, Packet.filled(3)))
    simulator.run(until=2.0)

    assert [source.ip for source in received] == [InetSocketAddress("10.1.1.1").ip]


def test_socket_message_keeps_the_arrival_address(line_of_nodes):
    simulator = line_of_nodes
    listener = simulator.create_socket(1)
    listener.bind(InetSocketAddress("0.0.0.0", 80))

    _unicast_to_node1(simulator, (1.0, Packet.filled(3)))
    simulator.run(until=2.0)

    message = listener.recv_message()
    assert message.destination == InetSocketAddress("10.1.1.2", 80)
    assert listener.recv_message() is None
