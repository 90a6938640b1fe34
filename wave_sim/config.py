"""Command-line configuration for the OCB harness.

Option names use the ns-3 camelCase form ("--phyMode", "--packetSize",
...). Values are only type-coerced; out of range values are passed on to
the simulated channels unchanged.
"""

import argparse
import logging
from dataclasses import dataclass, fields
from typing import List, Optional

from wave_sim.core.channel import parse_phy_mode


def str2bool(value: str) -> bool:
    """Coerce a command-line boolean ("1", "true", "yes", ...)."""
    lowered = str(value).strip().lower()
    if lowered in ("1", "true", "t", "yes", "y", "on"):
        return True
    if lowered in ("0", "false", "f", "no", "n", "off"):
        return False
    raise argparse.ArgumentTypeError(f"Not a boolean: {value!r}")


def phy_mode(value: str) -> str:
    """Accept a phy mode name that carries a data rate."""
    try:
        parse_phy_mode(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return value


@dataclass
class SimulationConfig:
    """Parameters of one harness run.

    Attributes:
        phyMode: Wifi data and control mode.
        packetSize: Size of generated packets in bytes.
        numPackets: Number of packets a traffic generator sends.
        interval: Time between generated packets in seconds.
        verbose: Turn on debug logging of the simulated network.
        txp: Wireless transmit power in dBm.
        distance: Distance between node 0 and node 1 in metres.
        intervalTime: Broadcast interval time in seconds.
        generate: Run a traffic generator from node 0 to polling sinks.
        unicast: Send a second message from node 2 to node 1.
        visualize: Show the topology before running.
        stop_time: Simulation horizon in seconds.
    """

    phyMode: str = "OfdmRate6MbpsBW10MHz"
    packetSize: int = 1000
    numPackets: int = 20
    interval: float = 1.0
    verbose: bool = False
    txp: float = 29.0
    distance: float = 29.0
    intervalTime: float = 0.1
    generate: bool = False
    unicast: bool = False
    visualize: bool = False
    stop_time: float = 110.0

    @classmethod
    def from_args(cls, argv: Optional[List[str]] = None) -> "SimulationConfig":
        """Parse a configuration from command-line arguments.

        Args:
            argv: Arguments without the program name (default: sys.argv[1:]).

        Returns:
            The parsed SimulationConfig.
        """
        parser = build_parser()
        args = parser.parse_args(argv)
        return cls(**{f.name: getattr(args, f.name) for f in fields(cls)})

    def configure_logging(self) -> None:
        """Send framework logging to stderr; debug level when verbose."""
        logging.basicConfig(
            level=logging.DEBUG if self.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(
        description="802.11p OCB broadcast test harness"
    )
    parser.add_argument("--phyMode", type=phy_mode, default=defaults.phyMode, help="Wifi Phy mode")
    parser.add_argument(
        "--packetSize", type=int, default=defaults.packetSize,
        help="size of application packet sent",
    )
    parser.add_argument(
        "--numPackets", type=int, default=defaults.numPackets,
        help="number of packets generated",
    )
    parser.add_argument(
        "--interval", type=float, default=defaults.interval,
        help="interval (seconds) between packets",
    )
    parser.add_argument("--txp", type=float, default=defaults.txp, help="transmit power (dBm)")
    parser.add_argument(
        "--distance", type=float, default=defaults.distance,
        help="distance (m) between node 0 and node 1",
    )
    parser.add_argument(
        "--intervalTime", type=float, default=defaults.intervalTime,
        help="broadcast interval time",
    )
    parser.add_argument(
        "--stop-time", dest="stop_time", type=float, default=defaults.stop_time,
        help="simulation horizon (seconds)",
    )

    for name, default, help_text in (
        ("verbose", defaults.verbose, "turn on all simulator log components"),
        ("generate", defaults.generate, "run a traffic generator from node 0"),
        ("unicast", defaults.unicast, "also send a unicast message from node 2 to node 1"),
        ("visualize", defaults.visualize, "show the topology before running"),
    ):
        parser.add_argument(
            f"--{name}", type=str2bool, nargs="?", const=True, default=default,
            help=help_text,
        )
    return parser
