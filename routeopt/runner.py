"""
Scenario driver: builds the model description, resolves the run
configuration, executes the simulation and reports trip results.
"""

import logging
import sys
import time
from collections.abc import Sequence
from datetime import timedelta
from typing import TextIO

from .description import ModelDescription
from .engine.agents import Car, Traveler
from .engine.container import SimulationContainer
from .engine.layers import (
    CarLayer,
    CarParkingLayer,
    TrafficLightLayer,
    TravelerLayer,
)
from .engine.simulation import SimulationState
from .engine.starter import SimulationStarter
from .output.trips import TripsOutputAdapter, format_duration
from .scenarios.defaults import create_default_config
from .settings import RuntimeSettings, configure_logging

logger = logging.getLogger(__name__)


def build_model_description() -> ModelDescription:
    """
    Declare the layers, agents and entities of the route optimisation model.

    Returns:
        ModelDescription with road network, parking, traffic light and
        traveler layers, the Traveler agent and the Car entity
    """
    description = ModelDescription()

    description.add_layer(CarLayer)
    description.add_layer(CarParkingLayer)
    description.add_layer(TrafficLightLayer)
    description.add_layer(TravelerLayer)

    description.add_agent(Traveler, TravelerLayer)
    description.add_entity(Car)

    return description


def resolve_application(
    args: Sequence[str] | None,
    description: ModelDescription,
    settings: RuntimeSettings | None = None,
) -> SimulationContainer:
    """
    Build the application container from arguments or the default config.

    Any non-empty argument list is handed to the argument-driven builder;
    its errors propagate and there is no fallback to the defaults.

    Args:
        args: Command-line arguments without the program name
        description: Model description of the run
        settings: Process settings (progress display override)

    Example:
        >>> with resolve_application([], build_model_description()) as app:
        ...     state, elapsed = execute_simulation(app)
    """
    settings = settings or RuntimeSettings()
    if args:
        logger.info("Building application from arguments: %s", list(args))
        return SimulationStarter.build_application_from_args(
            description, args, show_progress=settings.show_progress
        )

    logger.info("No arguments given, using default configuration")
    config = create_default_config()
    return SimulationStarter.build_application(
        description, config, show_progress=settings.show_progress
    )


def execute_simulation(
    application: SimulationContainer,
) -> tuple[SimulationState, timedelta]:
    """
    Run the simulation held by ``application`` to completion.

    Returns:
        Final simulation state and the elapsed wall-clock time
    """
    simulation = application.resolve_simulation()

    started = time.perf_counter()
    state = simulation.start_simulation()
    elapsed = timedelta(seconds=time.perf_counter() - started)

    return state, elapsed


def report_results(
    state: SimulationState, elapsed: timedelta, stream: TextIO | None = None
) -> None:
    """
    Print one line per traveler trip followed by the run summary.

    A model without a traveler layer only produces the summary line.
    """
    stream = stream or sys.stdout
    for layer in state.model.layers.values():
        if isinstance(layer, TravelerLayer):
            TripsOutputAdapter.print_trip_results(
                layer.travelers.values(), stream=stream
            )

    print(
        f"Executed iterations {state.iterations} lasted "
        f"{format_duration(elapsed)}",
        file=stream,
    )


def run(
    args: Sequence[str] | None = None,
    settings: RuntimeSettings | None = None,
    stream: TextIO | None = None,
) -> SimulationState:
    """
    Build, configure, execute and report one simulation run.

    The container is released on every exit path; errors are not caught.

    Args:
        args: Command-line arguments (empty/None = default configuration)
        settings: Process settings; read from the environment if None
        stream: Output stream for results (default: stdout)

    Returns:
        Final simulation state (its layers are disposed by then)
    """
    settings = settings or RuntimeSettings.from_env()
    description = build_model_description()

    with resolve_application(args, description, settings) as application:
        state, elapsed = execute_simulation(application)
        report_results(state, elapsed, stream=stream)
    return state


def main(argv: Sequence[str] | None = None) -> int:
    """Console entry point."""
    settings = RuntimeSettings.from_env()
    configure_logging(settings)
    run(sys.argv[1:] if argv is None else argv, settings)
    return 0
