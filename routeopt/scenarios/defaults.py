"""
Built-in run configuration used when the driver is started without arguments.
"""

from datetime import datetime, timedelta
from pathlib import Path

from ..engine.agents import Car, Traveler
from ..engine.layers import (
    CarLayer,
    CarParkingLayer,
    TrafficLightLayer,
    TravelerLayer,
)
from .config import (
    AgentMapping,
    EntityMapping,
    Globals,
    IndividualMapping,
    LayerMapping,
    OutputTargetType,
    ParameterName,
    SimulationConfig,
    TimeSpanUnit,
)

DEFAULT_SIMULATION_IDENTIFIER = "RouteOptimiz"
DEFAULT_START_POINT = datetime.fromisoformat("2020-01-01T04:00:00")
DEFAULT_DURATION = timedelta(hours=3)
RESOURCES_DIR = Path("resources")

# Harburg centre, lon/lat
DEFAULT_START = (10.025595724582672, 53.56711503998041)
DEFAULT_GOAL = (10.027395486831665, 53.58051568068171)


def run_suffix(now: datetime | None = None) -> str:
    """Timestamp of a run, minute precision (e.g. ``202001010400``)."""
    return (now or datetime.now()).strftime("%Y%m%d%H%M")


def create_default_config() -> SimulationConfig:
    """
    Build the default configuration of a zero-argument run.

    A three hour window at one second resolution over the Harburg centre
    resources, with one multimodal traveler and no file output.

    Returns:
        SimulationConfig; every value is a literal, so two calls return
        equal objects.
    """
    return SimulationConfig(
        simulation_identifier=DEFAULT_SIMULATION_IDENTIFIER,
        globals=Globals(
            start_point=DEFAULT_START_POINT,
            end_point=DEFAULT_START_POINT + DEFAULT_DURATION,
            delta_t_unit=TimeSpanUnit.SECONDS,
            show_console_progress=True,
            output_target=OutputTargetType.NONE,
        ),
        layer_mappings=(
            LayerMapping(
                name=CarLayer.__name__,
                file=str(RESOURCES_DIR / "harburg_zentrum_drive_graph.geojson"),
            ),
            LayerMapping(
                name=TrafficLightLayer.__name__,
                file=str(RESOURCES_DIR / "traffic_lights_harburg_zentrum.geojson"),
            ),
            LayerMapping(
                name=CarParkingLayer.__name__,
                file=str(RESOURCES_DIR / "Parking_Harburg_zentrum.geojson"),
            ),
            LayerMapping(
                name=TravelerLayer.__name__,
                file=str(RESOURCES_DIR / "OneCar.csv"),
            ),
        ),
        agent_mappings=(
            AgentMapping(
                name=Traveler.__name__,
                output_target=OutputTargetType.NONE,
                individual_mapping=(
                    IndividualMapping.of(ParameterName.START, DEFAULT_START),
                    IndividualMapping.of(ParameterName.GOAL, DEFAULT_GOAL),
                    IndividualMapping.of(
                        ParameterName.TRAVEL_CAPABILITIES, True
                    ),
                ),
            ),
        ),
        entity_mappings=(
            EntityMapping(
                name=Car.__name__,
                file=str(RESOURCES_DIR / "car.csv"),
            ),
        ),
    )
