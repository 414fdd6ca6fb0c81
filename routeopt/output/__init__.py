"""
Output module.

Provides console and CSV output of simulation results.
"""

from .trips import TripsOutputAdapter, format_duration

__all__ = ["TripsOutputAdapter", "format_duration"]
