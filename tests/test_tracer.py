from wave_sim.core.address import Address, InetSocketAddress
from wave_sim.core.enums import AddressFamily
from wave_sim.core.packet import Packet
from wave_sim.traffic.tracer import ReceiveTracer, decode_text, print_received_packet

MAC = Address(AddressFamily.MAC, bytes.fromhex("00000000000b"))


def test_decode_text_stops_at_terminator():
    assert decode_text(Packet.from_bytes(b"haha\0junk")) == "haha"


def test_decode_text_terminates_unterminated_payload():
    packet = Packet.from_bytes(b"haha")

    assert decode_text(packet) == "haha"
    assert packet.data == b"haha"


def test_decode_text_of_filler_packet_is_empty():
    assert decode_text(Packet.filled(1000)) == ""


def test_subscription_line_with_both_addresses(simulator, capsys):
    tracer = ReceiveTracer(simulator)
    simulator.schedule(
        2.0,
        tracer.two_address_trace,
        "/NodeList/1/ApplicationList/0/$PacketSink/RxWithAddresses",
        Packet.from_bytes(b"haha\0"),
        InetSocketAddress("10.1.1.1", 49153),
        InetSocketAddress("10.1.1.2", 80),
    )
    simulator.run()

    expected = "2 10.1.1.2 received one packet from 10.1.1.1. data: haha"
    assert tracer.lines == [expected]
    assert capsys.readouterr().out == expected + "\n"


def test_subscription_falls_back_for_unknown_source(simulator, capsys):
    tracer = ReceiveTracer(simulator)
    tracer.two_address_trace("ctx", Packet.from_bytes(b"haha\0"), MAC, None)

    assert tracer.lines == ["0 received one packet!"]
    assert "haha" not in capsys.readouterr().out


def test_subscription_prints_destination_even_for_unknown_source(simulator):
    tracer = ReceiveTracer(simulator)
    tracer.two_address_trace(
        "ctx", Packet.from_bytes(b"x"), MAC, InetSocketAddress("10.1.1.3", 80)
    )

    assert tracer.lines == ["0 10.1.1.3 received one packet!"]


def test_polling_tracer_drains_socket(line_of_nodes, capsys):
    simulator = line_of_nodes
    tracer = ReceiveTracer(simulator)
    sink = simulator.create_socket(1)
    sink.bind(InetSocketAddress("0.0.0.0", 1234))

    source = simulator.create_socket(0)
    source.connect(InetSocketAddress("10.1.1.2", 1234))
    simulator.schedule(1.0, source.send, Packet.from_bytes(b"one\0"))
    simulator.schedule(1.0, source.send, Packet.from_bytes(b"two"))
    simulator.run(until=2.0)

    tracer.receive_packet(sink)
    tracer.receive_packet(sink)

    assert [line.split(" ", 1)[1] for line in tracer.lines] == [
        "node 1 received one packet from 10.1.1.1. data: one",
        "node 1 received one packet from 10.1.1.1. data: two",
    ]
    assert sink.recv_from() is None
    assert len(capsys.readouterr().out.splitlines()) == 2


def test_polling_line_for_unknown_source(line_of_nodes):
    socket = line_of_nodes.create_socket(2)

    line = print_received_packet(3.5, socket, Packet.from_bytes(b"haha"), MAC)

    assert line == "3.5 node 2 received one packet!"
