"""
Command-line interface for the route optimisation driver.

Usage:
    python -m routeopt
    python -m routeopt --config scenario.yaml [--output-dir DIR] [--no-console]
"""

import sys

from .runner import main

if __name__ == "__main__":
    sys.exit(main())
