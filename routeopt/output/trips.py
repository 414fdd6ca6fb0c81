"""
Trip result output for traveler agents.

Formats one line per traveler for the console and collects trips into a
pandas DataFrame for CSV export.
"""

import logging
import sys
from collections.abc import Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import TextIO

import pandas as pd

logger = logging.getLogger(__name__)

TRIP_COLUMNS = [
    "traveler_id",
    "has_car",
    "reached_goal",
    "start_time",
    "end_time",
    "duration_s",
    "distance_m",
    "legs",
    "traffic_lights",
]


def format_duration(value: timedelta) -> str:
    """Format as ``HH:MM:SS`` with microseconds when non-zero."""
    total = value.total_seconds()
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(int(total), 3600)
    minutes, seconds = divmod(rest, 60)
    micros = round((total - int(total)) * 1_000_000)
    if micros >= 1_000_000:
        micros = 999_999
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if micros:
        text += f".{micros:06d}"
    return text


def _format_time(value: datetime | None) -> str:
    return value.isoformat(timespec="seconds") if value is not None else "-"


class TripsOutputAdapter:
    """Console and CSV output of traveler trips."""

    @staticmethod
    def format_trip_result(traveler) -> str:
        """
        One-line summary of a traveler's trip.

        Example:
            >>> TripsOutputAdapter.format_trip_result(traveler)
            'Traveler 1 | reached | start 2020-01-01T04:00:00 | end ...'
        """
        trip = traveler.trip
        if trip is None:
            return f"Traveler {traveler.id} | no route"

        status = "reached" if trip.reached_goal else "unfinished"
        duration = (
            format_duration(trip.duration) if trip.duration is not None else "-"
        )
        legs = " ".join(
            f"{leg.mode.value}({leg.distance:.1f} m)" for leg in trip.legs
        ) or "-"
        return (
            f"Traveler {traveler.id} | {status}"
            f" | start {_format_time(trip.start_time)}"
            f" | end {_format_time(trip.end_time)}"
            f" | duration {duration}"
            f" | distance {trip.distance:.1f} m"
            f" | legs {legs}"
            f" | traffic lights {trip.traffic_lights}"
        )

    @staticmethod
    def print_trip_results(
        travelers: Iterable, stream: TextIO | None = None
    ) -> int:
        """
        Print one line per traveler.

        Returns:
            Number of lines printed
        """
        stream = stream or sys.stdout
        count = 0
        for traveler in travelers:
            print(TripsOutputAdapter.format_trip_result(traveler), file=stream)
            count += 1
        return count

    @staticmethod
    def trips_dataframe(travelers: Iterable) -> pd.DataFrame:
        """Collect trips into a DataFrame (one row per traveler)."""
        rows = []
        for traveler in travelers:
            trip = traveler.trip
            rows.append(
                {
                    "traveler_id": traveler.id,
                    "has_car": traveler.has_car,
                    "reached_goal": bool(trip and trip.reached_goal),
                    "start_time": trip.start_time if trip else None,
                    "end_time": trip.end_time if trip else None,
                    "duration_s": (
                        trip.duration.total_seconds()
                        if trip and trip.duration is not None
                        else None
                    ),
                    "distance_m": trip.distance if trip else 0.0,
                    "legs": (
                        ";".join(leg.mode.value for leg in trip.legs)
                        if trip
                        else ""
                    ),
                    "traffic_lights": trip.traffic_lights if trip else 0,
                }
            )
        if not rows:
            return pd.DataFrame({column: [] for column in TRIP_COLUMNS})
        return pd.DataFrame(rows, columns=TRIP_COLUMNS)

    @staticmethod
    def export_trips_csv(
        travelers: Iterable, output_dir: str | Path, name: str
    ) -> Path:
        """
        Export trips to ``<output_dir>/<name>.csv``.

        Returns:
            Path of the written file
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        filepath = output_dir / f"{name}.csv"
        TripsOutputAdapter.trips_dataframe(travelers).to_csv(filepath, index=False)
        logger.info("Exported trips to %s", filepath)
        return filepath
