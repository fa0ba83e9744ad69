#!/usr/bin/env python3
"""kmoni command runner.

Usage:
    python scripts/run_kmoni.py analyze scripts/user_config.py
    python scripts/run_kmoni.py analyze scripts/user_config.py --time 2024-01-01T16:10:30+09:00
    python scripts/run_kmoni.py convert points.csv points.pbf

Equivalent to the installed ``kmoni`` console script.
"""

import sys

from kmoni.cli.run_kmoni import main


if __name__ == "__main__":
    sys.exit(main())
