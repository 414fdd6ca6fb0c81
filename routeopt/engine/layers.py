"""
Model layers: road network, parking, traffic lights and travelers.

Each layer is initialized from its layer mapping (backing data file) and
ticked once per simulation step.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import networkx as nx
import numpy as np
import pandas as pd

from ..errors import ConfigurationError
from ..scenarios.config import LayerMapping
from .agents import Car
from .geo import Position, haversine_m, haversine_many, nearest_index

logger = logging.getLogger(__name__)


def _node_key(position) -> Position:
    """Graph node key; rounding merges coordinates of shared vertices."""
    return (round(float(position[0]), 7), round(float(position[1]), 7))


def _read_geojson(path: Path) -> list[dict[str, Any]]:
    """
    Read the features of a GeoJSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
        ConfigurationError: If the file is not a GeoJSON FeatureCollection
    """
    if not path.exists():
        raise FileNotFoundError(f"Layer file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise ConfigurationError(f"Not a GeoJSON FeatureCollection: {path}")
    return data.get("features") or []


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "true", "1")
    return bool(value)


class Layer:
    """Base class of all model layers."""

    def __init__(self):
        self.name = type(self).__name__
        self.file: Path | None = None

    def init_layer(self, mapping: LayerMapping | None, context) -> None:
        """
        Load the layer's backing data.

        Args:
            mapping: Layer mapping from the run configuration (may be None)
            context: LayerContext giving access to the model and config
        """
        if mapping is not None and mapping.file:
            self.file = Path(mapping.file)

    def tick(self, clock: datetime, delta: timedelta) -> None:
        """Called once per simulation step."""

    def dispose(self) -> None:
        """Release anything held by the layer."""

    def __repr__(self) -> str:
        return f"{self.name}(file={str(self.file) if self.file else None})"


class CarLayer(Layer):
    """
    Drivable road network loaded from GeoJSON LineStrings.

    Features with a truthy ``oneway`` property are only traversable in
    digitizing direction by car; walking ignores direction.
    """

    def __init__(self):
        super().__init__()
        self.graph = nx.DiGraph()
        self._nodes: list[Position] = []
        self._node_array = np.empty((0, 2))

    def init_layer(self, mapping: LayerMapping | None, context) -> None:
        super().init_layer(mapping, context)
        if self.file is None:
            raise ConfigurationError(f"{self.name} requires a road network file")

        for feature in _read_geojson(self.file):
            geometry = feature.get("geometry") or {}
            properties = feature.get("properties") or {}
            oneway = _is_truthy(properties.get("oneway", False))

            if geometry.get("type") == "LineString":
                lines = [geometry["coordinates"]]
            elif geometry.get("type") == "MultiLineString":
                lines = geometry["coordinates"]
            else:
                continue

            for line in lines:
                self._add_line(line, oneway)

        if self.graph.number_of_nodes() == 0:
            raise ConfigurationError(f"No road geometry found in {self.file}")

        self._nodes = list(self.graph.nodes)
        self._node_array = np.asarray(self._nodes, dtype=float)
        logger.info(
            "Loaded road network %s: %d nodes, %d edges",
            self.file,
            self.graph.number_of_nodes(),
            self.graph.number_of_edges(),
        )

    def _add_line(self, coordinates: list, oneway: bool) -> None:
        points = [_node_key(c) for c in coordinates]
        for a, b in zip(points, points[1:]):
            if a == b:
                continue
            length = haversine_m(a, b)
            self.graph.add_edge(a, b, length=length)
            if not oneway:
                self.graph.add_edge(b, a, length=length)

    def nearest_node(self, position: Position) -> Position:
        return self._nodes[nearest_index(position, self._node_array)]

    def route(
        self, origin: Position, destination: Position, walking: bool = False
    ) -> list[Position] | None:
        """
        Shortest path between two positions over the road network.

        Args:
            origin: (lon, lat) start position
            destination: (lon, lat) end position
            walking: Ignore one-way restrictions

        Returns:
            Polyline from origin via network nodes to destination, or None
            if no path exists
        """
        graph = self.graph.to_undirected(as_view=True) if walking else self.graph
        source = self.nearest_node(origin)
        target = self.nearest_node(destination)
        try:
            nodes = nx.shortest_path(graph, source, target, weight="length")
        except nx.NetworkXNoPath:
            logger.warning("No path from %s to %s", origin, destination)
            return None

        path: list[Position] = []
        for point in [tuple(origin), *nodes, tuple(destination)]:
            if not path or path[-1] != point:
                path.append(point)
        return path

    def dispose(self) -> None:
        self.graph.clear()


@dataclass
class ParkingSpot:
    """Parking area with a fixed number of places."""

    id: str
    position: Position
    capacity: int
    occupied: int = 0

    @property
    def free(self) -> int:
        return self.capacity - self.occupied

    def enter(self) -> None:
        if self.free <= 0:
            raise ValueError(f"Parking spot {self.id} is full")
        self.occupied += 1


def _centroid(geometry: dict[str, Any]) -> Position | None:
    kind = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if not coordinates:
        return None
    if kind == "Point":
        return (float(coordinates[0]), float(coordinates[1]))
    if kind == "Polygon":
        ring = coordinates[0]
    elif kind == "MultiPolygon":
        ring = coordinates[0][0]
    else:
        return None
    # Closed rings repeat their first vertex
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    array = np.asarray(ring, dtype=float)
    return (float(array[:, 0].mean()), float(array[:, 1].mean()))


class CarParkingLayer(Layer):
    """Parking areas loaded from GeoJSON points or polygons."""

    DEFAULT_CAPACITY = 1

    def __init__(self):
        super().__init__()
        self.spots: list[ParkingSpot] = []

    def init_layer(self, mapping: LayerMapping | None, context) -> None:
        super().init_layer(mapping, context)
        if self.file is None:
            return

        for index, feature in enumerate(_read_geojson(self.file)):
            position = _centroid(feature.get("geometry") or {})
            if position is None:
                continue
            properties = feature.get("properties") or {}
            capacity = properties.get("capacity", self.DEFAULT_CAPACITY)
            try:
                capacity = int(capacity)
            except (TypeError, ValueError):
                capacity = self.DEFAULT_CAPACITY
            self.spots.append(
                ParkingSpot(
                    id=str(properties.get("id", index)),
                    position=position,
                    capacity=max(capacity, 0),
                )
            )
        logger.info("Loaded %d parking spots from %s", len(self.spots), self.file)

    def nearest_free_spot(self, position: Position) -> ParkingSpot | None:
        free = [spot for spot in self.spots if spot.free > 0]
        if not free:
            return None
        positions = np.asarray([spot.position for spot in free], dtype=float)
        return free[nearest_index(position, positions)]

    def dispose(self) -> None:
        self.spots = []


class TrafficLightLayer(Layer):
    """Traffic light positions loaded from GeoJSON points."""

    def __init__(self):
        super().__init__()
        self.positions = np.empty((0, 2))

    def init_layer(self, mapping: LayerMapping | None, context) -> None:
        super().init_layer(mapping, context)
        if self.file is None:
            return

        points = []
        for feature in _read_geojson(self.file):
            geometry = feature.get("geometry") or {}
            if geometry.get("type") == "Point":
                lon, lat = geometry["coordinates"][:2]
                points.append((float(lon), float(lat)))
        self.positions = np.asarray(points, dtype=float).reshape(-1, 2)
        logger.info(
            "Loaded %d traffic lights from %s", len(self.positions), self.file
        )

    def count_on_path(self, path: list[Position], radius_m: float = 15.0) -> int:
        """Number of traffic lights within ``radius_m`` of a path vertex."""
        if len(self.positions) == 0 or not path:
            return 0
        near = np.zeros(len(self.positions), dtype=bool)
        for vertex in path:
            near |= haversine_many(vertex, self.positions) <= radius_m
        return int(near.sum())


class TravelerLayer(Layer):
    """
    Spawns travelers from a CSV table and ticks them.

    Every agent type bound to this layer in the model description is
    created once per table row.
    """

    def __init__(self):
        super().__init__()
        self.travelers: dict[str, Any] = {}

    def init_layer(self, mapping: LayerMapping | None, context) -> None:
        super().init_layer(mapping, context)

        if self.file is not None:
            if not self.file.exists():
                raise FileNotFoundError(f"Layer file not found: {self.file}")
            table = pd.read_csv(self.file)
        else:
            table = pd.DataFrame()

        cars = context.entities.get(Car.__name__)
        for declaration in context.agent_declarations(self):
            agent_mapping = context.config.agent_mapping(declaration.name)
            parameters = agent_mapping.parameters() if agent_mapping else {}
            for _, row in table.iterrows():
                agent = declaration.agent_type.from_row(row, parameters, cars)
                agent.agent_name = declaration.name
                if agent.id in self.travelers:
                    raise ConfigurationError(f"Duplicate traveler id: {agent.id}")
                self.travelers[agent.id] = agent

        roads = context.get_layer(CarLayer)
        if roads is None and self.travelers:
            raise ConfigurationError(f"{self.name} requires a {CarLayer.__name__}")
        parking = context.get_layer(CarParkingLayer)
        lights = context.get_layer(TrafficLightLayer)
        for traveler in self.travelers.values():
            traveler.plan(roads, parking, lights)
        logger.info("Spawned %d travelers", len(self.travelers))

    def tick(self, clock: datetime, delta: timedelta) -> None:
        for traveler in self.travelers.values():
            traveler.tick(clock, delta)

    def dispose(self) -> None:
        self.travelers = {}
