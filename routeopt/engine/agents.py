"""
Traveler agents, car entities and the trips they record.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

from ..errors import ConfigurationError
from ..scenarios.config import ParameterName, ParameterValue
from .geo import Position, haversine_m, interpolate

DEFAULT_WALKING_SPEED = 1.4  # m/s
DEFAULT_CAR_SPEED = 13.89  # m/s, 50 km/h


class ModalType(Enum):
    """Means of travel of a trip leg."""

    WALKING = "Walking"
    CAR_DRIVING = "CarDriving"


@dataclass
class TripLeg:
    """Part of a trip covered with a single modal type."""

    mode: ModalType
    path: list[Position]
    speed: float
    travelled: float = 0.0
    start_time: datetime | None = None
    end_time: datetime | None = None
    _cumulative: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        segments = [
            haversine_m(a, b) for a, b in zip(self.path, self.path[1:])
        ]
        self._cumulative = np.concatenate(([0.0], np.cumsum(segments)))

    @property
    def distance(self) -> float:
        return float(self._cumulative[-1])

    @property
    def completed(self) -> bool:
        return self.end_time is not None

    def position(self) -> Position:
        """Current position along the path."""
        if self.travelled <= 0.0 or len(self.path) == 1:
            return self.path[0]
        if self.travelled >= self.distance:
            return self.path[-1]
        index = int(np.searchsorted(self._cumulative, self.travelled)) - 1
        index = max(index, 0)
        seg_len = self._cumulative[index + 1] - self._cumulative[index]
        fraction = (
            (self.travelled - self._cumulative[index]) / seg_len
            if seg_len > 0
            else 1.0
        )
        return interpolate(self.path[index], self.path[index + 1], fraction)


@dataclass
class Trip:
    """Recorded journey of one traveler."""

    legs: list[TripLeg] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None
    traffic_lights: int = 0

    @property
    def reached_goal(self) -> bool:
        return self.end_time is not None

    @property
    def distance(self) -> float:
        return sum(leg.distance for leg in self.legs)

    @property
    def duration(self) -> timedelta | None:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time


class Car:
    """Passive vehicle entity, one row of the car table."""

    def __init__(
        self,
        car_type: str = "default",
        max_speed: float = DEFAULT_CAR_SPEED,
        length: float = 4.5,
    ):
        # NaN comes from empty cells in the car table
        if not np.isfinite(max_speed) or max_speed <= 0:
            raise ConfigurationError(
                f"Car {car_type}: max speed must be a positive number, "
                f"got {max_speed}"
            )
        self.car_type = car_type
        self.max_speed = max_speed
        self.length = length

    @classmethod
    def from_row(cls, row: pd.Series) -> "Car":
        return cls(
            car_type=str(row.get("type", "default")),
            max_speed=float(row.get("max_speed", DEFAULT_CAR_SPEED)),
            length=float(row.get("length", 4.5)),
        )

    @classmethod
    def select(cls, table: pd.DataFrame | None, car_type: str | None = None):
        """
        Pick a car from the car table.

        Args:
            table: Car entity table (None or empty = built-in default car)
            car_type: Preferred ``type`` value; first row if not given

        Raises:
            ConfigurationError: If ``car_type`` is not in the table
        """
        if table is None or table.empty:
            return cls()
        if car_type is None:
            return cls.from_row(table.iloc[0])
        if "type" in table.columns:
            matches = table[table["type"].astype(str) == car_type]
            if not matches.empty:
                return cls.from_row(matches.iloc[0])
        raise ConfigurationError(f"Unknown car type: {car_type}")

    def __repr__(self) -> str:
        return f"Car(type={self.car_type!r}, max_speed={self.max_speed})"


def _row_value(row: pd.Series, *columns: str) -> Any:
    for column in columns:
        value = row.get(column)
        if value is not None and not pd.isna(value):
            return value
    return None


def _row_position(row: pd.Series, prefix: str) -> Position | None:
    lon = _row_value(row, f"{prefix}_lon", f"{prefix}X")
    lat = _row_value(row, f"{prefix}_lat", f"{prefix}Y")
    if lon is None or lat is None:
        return None
    return (float(lon), float(lat))


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


class Traveler:
    """
    Agent that travels from a start to a goal position.

    With the travel capability flag set the traveler drives a car to the
    parking spot closest to the goal and walks the rest; otherwise it walks
    the whole way on the road network.
    """

    def __init__(
        self,
        traveler_id: str,
        start: Position,
        goal: Position,
        has_car: bool = False,
        walking_speed: float = DEFAULT_WALKING_SPEED,
        car: Car | None = None,
    ):
        if walking_speed <= 0:
            raise ConfigurationError(
                f"Traveler {traveler_id}: walking speed must be positive"
            )
        self.id = traveler_id
        # Declared agent name; set by the spawning layer
        self.agent_name = type(self).__name__
        self.start = start
        self.goal = goal
        self.has_car = has_car
        self.walking_speed = walking_speed
        self.car = car
        self.position = start
        self.trip: Trip | None = None
        self.routable = True
        self._leg_index = 0

    @classmethod
    def from_row(
        cls,
        row: pd.Series,
        parameters: dict[ParameterName, ParameterValue],
        cars: pd.DataFrame | None = None,
    ) -> "Traveler":
        """
        Create a traveler from one row of the traveler table.

        Individual mapping parameters apply to every traveler and take
        precedence over the row values.
        """
        raw_id = _row_value(row, "id", "Id")
        # iterrows() upcasts integer ids to float in all-numeric rows
        if isinstance(raw_id, float) and raw_id.is_integer():
            raw_id = int(raw_id)
        traveler_id = str(row.name if raw_id is None else raw_id)

        def param(name: ParameterName, fallback):
            if name in parameters:
                return parameters[name].value
            return fallback

        start = param(ParameterName.START, _row_position(row, "start"))
        goal = param(ParameterName.GOAL, _row_position(row, "goal"))
        if start is None or goal is None:
            raise ConfigurationError(
                f"Traveler {traveler_id}: start and goal positions required"
            )

        capability = _row_value(row, "travel_capabilities", "has_car")
        has_car = param(
            ParameterName.TRAVEL_CAPABILITIES,
            _as_bool(capability) if capability is not None else False,
        )
        walking_speed = param(
            ParameterName.WALKING_SPEED,
            _row_value(row, "walking_speed") or DEFAULT_WALKING_SPEED,
        )
        car_type = param(ParameterName.CAR_TYPE, _row_value(row, "car_type"))
        car = Car.select(cars, car_type) if has_car else None

        return cls(
            traveler_id=traveler_id,
            start=tuple(start),
            goal=tuple(goal),
            has_car=bool(has_car),
            walking_speed=float(walking_speed),
            car=car,
        )

    @property
    def finished(self) -> bool:
        if self.trip is None:
            return not self.routable
        return self.trip.reached_goal or not self.routable

    def plan(self, roads, parking=None, traffic_lights=None) -> Trip | None:
        """
        Plan the trip legs on the road network.

        Args:
            roads: CarLayer used for routing
            parking: Optional CarParkingLayer for the car destination
            traffic_lights: Optional TrafficLightLayer to count lights passed

        Returns:
            Planned trip, or None if the goal cannot be reached
        """
        legs = []
        spot = None
        if self.has_car and self.car is not None:
            destination = self.goal
            if parking is not None:
                spot = parking.nearest_free_spot(self.goal)
                if spot is not None:
                    destination = spot.position
            drive = roads.route(self.start, destination)
            if drive is None:
                self.routable = False
                return None
            legs.append(TripLeg(ModalType.CAR_DRIVING, drive, self.car.max_speed))
            walk = roads.route(drive[-1], self.goal, walking=True)
        else:
            walk = roads.route(self.start, self.goal, walking=True)

        if walk is None:
            self.routable = False
            return None
        if len(walk) > 1:
            legs.append(TripLeg(ModalType.WALKING, walk, self.walking_speed))

        # Only a traveler with a complete trip takes the spot
        if spot is not None:
            spot.enter()

        self.trip = Trip(legs=legs)
        if traffic_lights is not None:
            self.trip.traffic_lights = sum(
                traffic_lights.count_on_path(leg.path) for leg in legs
            )
        self._leg_index = 0
        return self.trip

    def tick(self, clock: datetime, delta: timedelta) -> None:
        """Advance along the planned trip for one tick starting at ``clock``."""
        if self.trip is None or self.finished:
            return

        trip = self.trip
        if trip.start_time is None:
            trip.start_time = clock

        step = delta.total_seconds()
        budget = step
        legs = trip.legs
        while budget > 0 and self._leg_index < len(legs):
            leg = legs[self._leg_index]
            if leg.start_time is None:
                leg.start_time = clock + timedelta(seconds=step - budget)
            needed = (leg.distance - leg.travelled) / leg.speed
            if needed <= budget:
                budget -= needed
                leg.travelled = leg.distance
                leg.end_time = clock + timedelta(seconds=step - budget)
                self._leg_index += 1
            else:
                leg.travelled += budget * leg.speed
                budget = 0.0
            self.position = leg.position()

        if self._leg_index >= len(legs):
            trip.end_time = legs[-1].end_time if legs else clock
            self.position = self.goal

    def __repr__(self) -> str:
        return f"Traveler(id={self.id!r}, has_car={self.has_car})"
