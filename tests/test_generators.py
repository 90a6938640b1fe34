import pytest

from wave_sim.core.enums import GeneratorState
from wave_sim.traffic.generators import TrafficGenerator, generate_traffic


def test_generator_sends_count_packets_then_closes(simulator, fake_socket):
    generator = generate_traffic(simulator, fake_socket, 1000, 3, 0.5, delay=1.0)
    simulator.run(until=10)

    times = [t for t, _ in fake_socket.sent]
    assert times == pytest.approx([1.0, 1.5, 2.0])
    assert all(p.size == 1000 for _, p in fake_socket.sent)
    assert fake_socket.close_times == pytest.approx([2.5])
    assert generator.state is GeneratorState.CLOSED
    assert generator.packets_sent == 3
    assert generator.remaining == 0


def test_zero_count_generator_closes_immediately(simulator, fake_socket):
    generate_traffic(simulator, fake_socket, 1000, 0, 0.5, delay=1.0)
    simulator.run(until=10)

    assert fake_socket.sent == []
    assert fake_socket.close_times == [1.0]


def test_closed_generator_ignores_further_invocations(simulator, fake_socket):
    generator = TrafficGenerator(simulator, fake_socket, 10, 1, 1.0)
    generator.start()
    simulator.run(until=5)

    generator.generate()
    generator.generate()

    assert len(fake_socket.sent) == 1
    assert len(fake_socket.close_times) == 1


def test_generator_stays_active_until_horizon(simulator, fake_socket):
    generator = generate_traffic(simulator, fake_socket, 100, 20, 1.0)
    simulator.run(until=5.5)

    assert len(fake_socket.sent) == 6
    assert generator.state is GeneratorState.ACTIVE
    assert not fake_socket.closed
