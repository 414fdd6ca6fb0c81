"""
Application container owning the model and the resolved simulation.
"""

import logging
from pathlib import Path

import pandas as pd

from ..description import ModelDescription
from ..scenarios.config import SimulationConfig
from .simulation import LayerContext, Model, StepSimulation

logger = logging.getLogger(__name__)


class SimulationContainer:
    """
    Scoped owner of one run's model and simulation.

    Use as a context manager; ``close()`` disposes every layer and runs on
    every exit path, including when the run raises.

    Example:
        >>> with SimulationStarter.build_application(description, config) as app:
        ...     state = app.resolve_simulation().start_simulation()
    """

    def __init__(
        self,
        description: ModelDescription,
        config: SimulationConfig,
        output_dir: str | None = None,
        show_progress: bool | None = None,
    ):
        self.description = description
        self.config = config
        self.output_dir = Path(output_dir) if output_dir else None
        self.show_progress = show_progress
        self._model: Model | None = None
        self._simulation: StepSimulation | None = None
        self._closed = False

    def __enter__(self) -> "SimulationContainer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def resolve_simulation(self) -> StepSimulation:
        """
        Get the runnable simulation, building the model on first use.

        Raises:
            RuntimeError: If the container has been closed
            FileNotFoundError, ConfigurationError, ...: If a layer or entity
                data source cannot be loaded
        """
        if self._closed:
            raise RuntimeError("Simulation container is closed")
        if self._simulation is None:
            self._model = Model()
            self._build_model(self._model)
            self._simulation = StepSimulation(
                self._model,
                self.config,
                show_progress=self.show_progress,
                trip_writer=self._write_trips if self.output_dir else None,
            )
        return self._simulation

    def _build_model(self, model: Model) -> None:
        for name in self.description.entities:
            mapping = self.config.entity_mapping(name)
            if mapping is not None and mapping.file:
                path = Path(mapping.file)
                if not path.exists():
                    raise FileNotFoundError(f"Entity file not found: {path}")
                model.entities[name] = pd.read_csv(path)
                logger.info(
                    "Loaded %d %s entities from %s",
                    len(model.entities[name]), name, path,
                )
            else:
                model.entities[name] = pd.DataFrame()

        context = LayerContext(model, self.config, self.description)
        for name, layer_type in self.description.layers.items():
            layer = layer_type()
            layer.name = name
            # Registered before init so later layers can look it up
            model.layers[name] = layer
            layer.init_layer(self.config.layer_mapping(name), context)

    def _write_trips(self, travelers, agent_name: str) -> None:
        from ..output.trips import TripsOutputAdapter
        from ..scenarios.defaults import run_suffix

        TripsOutputAdapter.export_trips_csv(
            travelers,
            self.output_dir,
            f"{self.config.simulation_identifier}_{agent_name}_{run_suffix()}",
        )

    def close(self) -> None:
        """Dispose all layers. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._model is not None:
            for layer in self._model.layers.values():
                layer.dispose()
            self._model.entities.clear()
        self._simulation = None
        logger.debug("Simulation container closed")
