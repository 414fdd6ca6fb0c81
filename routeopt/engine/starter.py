"""
Builds simulation containers from a model description and a configuration,
either given directly or read from command-line arguments.
"""

import argparse
import logging
from collections.abc import Sequence

from ..description import ModelDescription
from ..errors import ConfigurationError
from ..scenarios.config import SimulationConfig
from ..scenarios.loader import load_config_from_path
from .container import SimulationContainer

logger = logging.getLogger(__name__)


def _check_mappings(
    description: ModelDescription, config: SimulationConfig
) -> None:
    """Every mapping must name a type declared in the description."""
    checks = (
        ("layer", config.layer_mappings, description.layers),
        ("agent", config.agent_mappings, description.agents),
        ("entity", config.entity_mappings, description.entities),
    )
    for kind, mappings, declared in checks:
        seen = set()
        for mapping in mappings:
            if mapping.name not in declared:
                raise ConfigurationError(
                    f"Unknown {kind} '{mapping.name}' in configuration "
                    f"(declared: {', '.join(declared) or 'none'})"
                )
            if mapping.name in seen:
                raise ConfigurationError(
                    f"{kind.capitalize()} '{mapping.name}' mapped twice"
                )
            seen.add(mapping.name)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="routeopt",
        description="Run a route optimisation traffic simulation",
        epilog="Without arguments the built-in default scenario is run.",
    )
    parser.add_argument(
        "-c",
        "--config",
        required=True,
        help="Path to a YAML or JSON run configuration",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for CSV output (default: no file output)",
    )
    parser.add_argument(
        "--no-console",
        action="store_true",
        help="Hide the progress bar regardless of the configuration",
    )
    return parser


class SimulationStarter:
    """Entry points that turn a description plus configuration into a container."""

    @staticmethod
    def build_application(
        description: ModelDescription,
        config: SimulationConfig,
        output_dir: str | None = None,
        show_progress: bool | None = None,
    ) -> SimulationContainer:
        """
        Build a container from an in-memory configuration.

        Args:
            description: Model description; frozen by this call
            config: Run configuration
            output_dir: Directory for CSV output (None = no file output)
            show_progress: Override of the configured progress display

        Raises:
            ConfigurationError: If a mapping names an undeclared type
        """
        description.freeze()
        _check_mappings(description, config)
        logger.info(
            "Building application %s (%s to %s)",
            config.simulation_identifier,
            config.globals.start_point.isoformat(),
            config.globals.end_point.isoformat(),
        )
        return SimulationContainer(
            description,
            config,
            output_dir=output_dir,
            show_progress=show_progress,
        )

    @staticmethod
    def build_application_from_args(
        description: ModelDescription,
        args: Sequence[str],
        show_progress: bool | None = None,
    ) -> SimulationContainer:
        """
        Build a container from command-line arguments.

        Args:
            description: Model description
            args: Arguments without the program name
            show_progress: Progress display override used unless
                           ``--no-console`` is given

        Raises:
            SystemExit: On malformed arguments (argparse exits with status 2)
            FileNotFoundError, yaml.YAMLError, jsonschema.ValidationError,
            ValueError: If the configuration file cannot be used
        """
        options = build_argument_parser().parse_args(list(args))
        config = load_config_from_path(options.config)
        if options.no_console:
            show_progress = False
        return SimulationStarter.build_application(
            description,
            config,
            output_dir=options.output_dir,
            show_progress=show_progress,
        )
