#!/usr/bin/env python3
"""Run the 802.11p OCB broadcast experiment.

Example:
    python main.py --distance=100 --generate --numPackets=3
"""

import sys

from wave_sim.scenario import main

if __name__ == "__main__":
    sys.exit(main())
