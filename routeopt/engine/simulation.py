"""
Fixed-step scheduler running a model over the configured time window.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd
from tqdm import tqdm

from ..description import AgentDeclaration, ModelDescription
from ..scenarios.config import OutputTargetType, SimulationConfig
from .layers import Layer

logger = logging.getLogger(__name__)


@dataclass
class Model:
    """Layers of a run, keyed by layer name, plus the entity tables."""

    layers: dict[str, Layer] = field(default_factory=dict)
    entities: dict[str, pd.DataFrame] = field(default_factory=dict)

    def get_layer(self, layer_type: type) -> Layer | None:
        for layer in self.layers.values():
            if isinstance(layer, layer_type):
                return layer
        return None


@dataclass
class SimulationState:
    """Outcome of a completed run."""

    model: Model
    iterations: int
    start_point: datetime | None = None
    end_point: datetime | None = None


class LayerContext:
    """What a layer may look at while it is initialized."""

    def __init__(
        self,
        model: Model,
        config: SimulationConfig,
        description: ModelDescription,
    ):
        self.model = model
        self.config = config
        self.description = description

    @property
    def entities(self) -> dict[str, pd.DataFrame]:
        return self.model.entities

    def get_layer(self, layer_type: type) -> Layer | None:
        return self.model.get_layer(layer_type)

    def agent_declarations(self, layer: Layer) -> list[AgentDeclaration]:
        """Agent declarations the description binds to ``layer``."""
        return self.description.agents_of(layer.name)


class StepSimulation:
    """
    Ticks every layer from start to end point in ``delta_t_unit`` steps.

    The run always covers the whole window; travelers that arrive early
    simply stop moving.
    """

    def __init__(
        self,
        model: Model,
        config: SimulationConfig,
        show_progress: bool | None = None,
        trip_writer=None,
    ):
        """
        Args:
            model: Initialized model
            config: Run configuration
            show_progress: Override of ``globals.show_console_progress``
            trip_writer: Callable(travelers, agent_name) used for agent
                         mappings with CSV output (None = no export)
        """
        self.model = model
        self.config = config
        self.show_progress = (
            config.globals.show_console_progress
            if show_progress is None
            else show_progress
        )
        self.trip_writer = trip_writer
        self.iterations = 0

    def start_simulation(self) -> SimulationState:
        """Run to completion and return the final state."""
        globals_ = self.config.globals
        delta = globals_.delta_t_unit.to_timedelta()
        steps = globals_.steps
        clock = globals_.start_point
        self.iterations = 0

        logger.info(
            "Starting %s: %d steps of %s from %s",
            self.config.simulation_identifier,
            steps,
            globals_.delta_t_unit.value,
            clock.isoformat(),
        )

        layers = list(self.model.layers.values())
        with tqdm(
            total=steps,
            desc=self.config.simulation_identifier,
            unit="tick",
            disable=not self.show_progress,
        ) as progress:
            for _ in range(steps):
                for layer in layers:
                    layer.tick(clock, delta)
                clock += delta
                self.iterations += 1
                progress.update(1)

        logger.info("Finished after %d iterations", self.iterations)
        self._write_outputs()

        return SimulationState(
            model=self.model,
            iterations=self.iterations,
            start_point=globals_.start_point,
            end_point=clock,
        )

    def _write_outputs(self) -> None:
        if self.trip_writer is None:
            return
        csv_default = self.config.globals.output_target is OutputTargetType.CSV
        for agent_mapping in self.config.agent_mappings:
            if not (
                csv_default
                or agent_mapping.output_target is OutputTargetType.CSV
            ):
                continue
            agents = [
                agent
                for layer in self.model.layers.values()
                for agent in getattr(layer, "travelers", {}).values()
                if agent.agent_name == agent_mapping.name
            ]
            if agents:
                self.trip_writer(agents, agent_mapping.name)
