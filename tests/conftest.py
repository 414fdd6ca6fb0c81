"""Pytest fixtures for routeopt tests."""

import json
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from routeopt.scenarios.config import (
    AgentMapping,
    EntityMapping,
    Globals,
    IndividualMapping,
    LayerMapping,
    OutputTargetType,
    SimulationConfig,
    TimeSpanUnit,
)
from routeopt.settings import RuntimeSettings

PROJECT_ROOT = Path(__file__).parent.parent

# Small L-shaped street: A -> B -> C heading east, then C -> D north
NODE_A = (10.000, 53.000)
NODE_B = (10.001, 53.000)
NODE_C = (10.002, 53.000)
NODE_D = (10.002, 53.001)
# An isolated street nobody can reach
NODE_X = (10.010, 53.010)
NODE_Y = (10.011, 53.010)


def _line(a, b, **properties):
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "LineString", "coordinates": [list(a), list(b)]},
    }


def _point(position, **properties):
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "Point", "coordinates": list(position)},
    }


def write_geojson(path: Path, features: list) -> Path:
    path.write_text(
        json.dumps({"type": "FeatureCollection", "features": features}),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def road_file(tmp_path):
    """Road network with one one-way segment (C -> D) and an island."""
    return write_geojson(
        tmp_path / "roads.geojson",
        [
            _line(NODE_A, NODE_B, name="first"),
            _line(NODE_B, NODE_C, name="second"),
            _line(NODE_C, NODE_D, name="oneway", oneway="yes"),
            _line(NODE_X, NODE_Y, name="island"),
        ],
    )


@pytest.fixture
def lights_file(tmp_path):
    return write_geojson(
        tmp_path / "lights.geojson",
        [_point(NODE_B, id="tl-b"), _point(NODE_Y, id="tl-y")],
    )


@pytest.fixture
def parking_file(tmp_path):
    return write_geojson(
        tmp_path / "parking.geojson",
        [_point(NODE_C, id="P-C", capacity=1)],
    )


@pytest.fixture
def travelers_file(tmp_path):
    path = tmp_path / "travelers.csv"
    path.write_text(
        "id,start_lon,start_lat,goal_lon,goal_lat,travel_capabilities\n"
        f"walker,{NODE_A[0]},{NODE_A[1]},{NODE_D[0]},{NODE_D[1]},false\n"
        f"driver,{NODE_A[0]},{NODE_A[1]},{NODE_D[0]},{NODE_D[1]},true\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def cars_file(tmp_path):
    path = tmp_path / "cars.csv"
    path.write_text(
        "type,max_speed,length\nGolf,10.0,4.3\nVan,5.0,5.5\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def quiet_settings():
    """Settings without progress bar or log output."""
    return RuntimeSettings(log_level="off", show_progress=False)


@pytest.fixture
def make_config(road_file, lights_file, parking_file, travelers_file, cars_file):
    """Factory for a one hour, minute resolution config over the test files."""

    def _make(
        individual=(),
        delta_t_unit=TimeSpanUnit.MINUTES,
        duration=timedelta(hours=1),
        output_target=OutputTargetType.NONE,
        layers=None,
        agent_name="Traveler",
    ):
        start = datetime(2020, 1, 1, 4, 0, 0)
        if layers is None:
            layers = (
                LayerMapping("CarLayer", str(road_file)),
                LayerMapping("TrafficLightLayer", str(lights_file)),
                LayerMapping("CarParkingLayer", str(parking_file)),
                LayerMapping("TravelerLayer", str(travelers_file)),
            )
        return SimulationConfig(
            simulation_identifier="Test",
            globals=Globals(
                start_point=start,
                end_point=start + duration,
                delta_t_unit=delta_t_unit,
                show_console_progress=False,
                output_target=OutputTargetType.NONE,
            ),
            layer_mappings=tuple(layers),
            agent_mappings=(
                AgentMapping(
                    agent_name,
                    output_target=output_target,
                    individual_mapping=tuple(
                        IndividualMapping.of(name, value)
                        for name, value in individual
                    ),
                ),
            ),
            entity_mappings=(EntityMapping("Car", str(cars_file)),),
        )

    return _make
