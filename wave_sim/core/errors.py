"""Exceptions raised by the simulated network environment."""


class SimulationError(Exception):
    """Base class for simulation environment errors."""


class SocketError(SimulationError):
    """Raised for invalid socket operations (closed, unconnected, ...)."""


class TopologyError(SimulationError):
    """Raised when the topology is built or addressed incorrectly."""
