"""
YAML/JSON loader and saver for run configurations with JSON schema validation.
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .config import (
    AgentMapping,
    EntityMapping,
    Globals,
    IndividualMapping,
    LayerMapping,
    OutputTargetType,
    SimulationConfig,
    TimeSpanUnit,
)

DEFAULT_SIMULATION_IDENTIFIER = "Simulation"


def _get_schema_path() -> Path:
    """Get the path to the JSON schema file shipped with the package."""
    return Path(__file__).parent / "schema.json"


def validate_config(
    data: dict[str, Any], schema_path: Path | None = None
) -> None:
    """
    Validate configuration data against JSON schema.

    Args:
        data: Dictionary containing configuration data
        schema_path: Optional path to schema file. If None, uses default.

    Raises:
        jsonschema.ValidationError: If validation fails
        FileNotFoundError: If schema file not found
    """
    if schema_path is None:
        schema_path = _get_schema_path()

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    with open(schema_path, "r", encoding="utf-8") as f:
        schema = json.load(f)

    jsonschema.validate(instance=data, schema=schema)


def _get_field(
    data: dict[str, Any], snake_key: str, camel_key: str, default: Any = None
) -> Any:
    """Get field from dict supporting both snake_case and camelCase."""
    return data.get(snake_key, data.get(camel_key, default))


def _stringify_timestamps(value: Any) -> Any:
    """YAML parses unquoted ISO timestamps into datetimes; undo that."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).isoformat()
    if isinstance(value, dict):
        return {k: _stringify_timestamps(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_timestamps(v) for v in value]
    return value


def _dict_to_globals(data: dict[str, Any]) -> Globals:
    """Convert dictionary to Globals dataclass."""
    return Globals(
        start_point=datetime.fromisoformat(
            _get_field(data, "start_point", "startPoint")
        ),
        end_point=datetime.fromisoformat(
            _get_field(data, "end_point", "endPoint")
        ),
        delta_t_unit=TimeSpanUnit(
            _get_field(data, "delta_t_unit", "deltaTUnit", "seconds")
        ),
        show_console_progress=_get_field(
            data, "show_console_progress", "console", False
        ),
        output_target=OutputTargetType(
            _get_field(data, "output_target", "output", "none")
        ),
    )


def _dict_to_individual_mapping(data: dict[str, Any]) -> IndividualMapping:
    """Convert dictionary to IndividualMapping."""
    return IndividualMapping.of(
        data.get("parameter", data.get("name")), data["value"]
    )


def _dict_to_agent_mapping(data: dict[str, Any]) -> AgentMapping:
    """Convert dictionary to AgentMapping dataclass."""
    individual = _get_field(data, "individual_mapping", "individual", [])
    return AgentMapping(
        name=data["name"],
        output_target=OutputTargetType(
            _get_field(data, "output_target", "output", "none")
        ),
        individual_mapping=tuple(
            _dict_to_individual_mapping(m) for m in individual
        ),
    )


def _dict_to_config(data: dict[str, Any]) -> SimulationConfig:
    """Convert dictionary to SimulationConfig dataclass."""
    layers = _get_field(data, "layer_mappings", "layers", [])
    agents = _get_field(data, "agent_mappings", "agents", [])
    entities = _get_field(data, "entity_mappings", "entities", [])

    return SimulationConfig(
        simulation_identifier=_get_field(
            data, "simulation_identifier", "id", DEFAULT_SIMULATION_IDENTIFIER
        ),
        globals=_dict_to_globals(data["globals"]),
        layer_mappings=tuple(
            LayerMapping(name=m["name"], file=m.get("file")) for m in layers
        ),
        agent_mappings=tuple(_dict_to_agent_mapping(m) for m in agents),
        entity_mappings=tuple(
            EntityMapping(name=m["name"], file=m.get("file")) for m in entities
        ),
    )


def load_config_from_path(path: Path, validate: bool = True) -> SimulationConfig:
    """
    Load a run configuration from a YAML or JSON file.

    Args:
        path: Path to a ``.yaml``/``.yml`` or ``.json`` file
        validate: Whether to validate against JSON schema

    Returns:
        SimulationConfig object

    Raises:
        FileNotFoundError: If file not found
        yaml.YAMLError: If YAML parsing fails
        json.JSONDecodeError: If JSON parsing fails
        jsonschema.ValidationError: If validation fails
        ValueError: If values are invalid (e.g. end point before start point)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if data is None:
        raise ValueError(f"Empty or invalid configuration file: {path}")

    data = _stringify_timestamps(data)
    if validate:
        validate_config(data)

    return _dict_to_config(data)


def _individual_value_to_json(mapping: IndividualMapping) -> Any:
    value = mapping.value.value
    if isinstance(value, tuple):
        return list(value)
    return value


def config_to_dict(config: SimulationConfig) -> dict[str, Any]:
    """Convert SimulationConfig dataclass to dictionary (camelCase keys)."""
    globals_ = config.globals
    return {
        "id": config.simulation_identifier,
        "globals": {
            "startPoint": globals_.start_point.isoformat(),
            "endPoint": globals_.end_point.isoformat(),
            "deltaTUnit": globals_.delta_t_unit.value,
            "console": globals_.show_console_progress,
            "output": globals_.output_target.value,
        },
        "layers": [
            {"name": m.name, "file": m.file} if m.file else {"name": m.name}
            for m in config.layer_mappings
        ],
        "agents": [
            {
                "name": a.name,
                "output": a.output_target.value,
                "individual": [
                    {
                        "parameter": m.name.value,
                        "value": _individual_value_to_json(m),
                    }
                    for m in a.individual_mapping
                ],
            }
            for a in config.agent_mappings
        ],
        "entities": [
            {"name": m.name, "file": m.file} if m.file else {"name": m.name}
            for m in config.entity_mappings
        ],
    }


def save_config_to_path(
    config: SimulationConfig, path: Path, validate: bool = True
) -> None:
    """
    Save a run configuration as YAML (or JSON for ``.json`` paths).

    Args:
        config: SimulationConfig to save
        path: Destination file
        validate: Whether to validate before saving

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    path = Path(path)
    data = config_to_dict(config)

    if validate:
        validate_config(data)

    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            json.dump(data, f, indent=2)
        else:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
