"""OCB communication test harness on top of a SimPy discrete-event network."""

__version__ = "0.1.0"
