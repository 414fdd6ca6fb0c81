"""
Run the route optimisation scenario.

Usage:
    python run_simulation.py
    python run_simulation.py --config experiments/route_optimiz.yaml --output-dir output
"""

import sys

from routeopt import main


if __name__ == "__main__":
    sys.exit(main())
