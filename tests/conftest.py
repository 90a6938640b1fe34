from types import SimpleNamespace

import pytest

from wave_sim.core.simulator import Simulator


class FakeSocket:
    """Records sends and closes with the virtual time they happened at."""

    def __init__(self, simulator: Simulator, node_id: int = 0) -> None:
        self.simulator = simulator
        self.node = SimpleNamespace(id=node_id, simulator=simulator)
        self.sent = []
        self.close_times = []
        self.closed = False

    def send(self, packet):
        assert not self.closed, "send after close"
        self.sent.append((self.simulator.now, packet))
        return packet.size

    def close(self):
        self.closed = True
        self.close_times.append(self.simulator.now)


@pytest.fixture
def simulator():
    return Simulator()


@pytest.fixture
def fake_socket(simulator):
    return FakeSocket(simulator)


@pytest.fixture
def line_of_nodes(simulator):
    """Three nodes 50 m apart on one addressed OCB channel."""
    simulator.create_nodes(3)
    simulator.set_positions([(0, 0, 0), (50, 0, 0), (100, 0, 0)])
    devices = simulator.install_wireless()
    simulator.assign_addresses(devices, "10.1.1.0/24")
    return simulator
