"""
Run configuration module.

Provides the configuration dataclasses and the YAML/JSON loader. The
built-in default configuration lives in ``routeopt.scenarios.defaults``.
"""

from .config import (
    SimulationConfig,
    Globals,
    LayerMapping,
    AgentMapping,
    EntityMapping,
    IndividualMapping,
    ParameterName,
    ParameterValue,
    ValueKind,
    TimeSpanUnit,
    OutputTargetType,
)
from .loader import (
    load_config_from_path,
    save_config_to_path,
    validate_config,
    config_to_dict,
)

__all__ = [
    # Dataclasses
    'SimulationConfig',
    'Globals',
    'LayerMapping',
    'AgentMapping',
    'EntityMapping',
    'IndividualMapping',
    'ParameterName',
    'ParameterValue',
    'ValueKind',
    'TimeSpanUnit',
    'OutputTargetType',
    # Loader functions
    'load_config_from_path',
    'save_config_to_path',
    'validate_config',
    'config_to_dict',
]
