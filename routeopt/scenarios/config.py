"""
Core dataclasses for simulation run configuration.

Defines the declarative contract of one simulation run: time window,
layer/agent/entity data sources and per-agent parameters.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class TimeSpanUnit(Enum):
    """Length of one simulation tick."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"

    def to_timedelta(self) -> timedelta:
        return timedelta(**{self.value: 1})


class OutputTargetType(Enum):
    """Where simulation output is written."""

    NONE = "none"
    CSV = "csv"


class ValueKind(Enum):
    """Kinds of values an individual mapping can carry."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    COORDINATE = "coordinate"
    STRING = "string"


class ParameterName(Enum):
    """Recognized individual mapping parameters."""

    START = "start"
    GOAL = "Goal"
    TRAVEL_CAPABILITIES = "TravelCapabilities"
    WALKING_SPEED = "WalkingSpeed"
    CAR_TYPE = "CarType"

    @property
    def kind(self) -> ValueKind:
        return _PARAMETER_KINDS[self]

    @classmethod
    def parse(cls, name: "str | ParameterName") -> "ParameterName":
        """Look up a parameter by its value, ignoring case."""
        if isinstance(name, cls):
            return name
        for member in cls:
            if member.value.lower() == str(name).lower():
                return member
        known = ", ".join(m.value for m in cls)
        raise ValueError(
            f"Unknown individual mapping parameter '{name}' (known: {known})"
        )


_PARAMETER_KINDS = {
    ParameterName.START: ValueKind.COORDINATE,
    ParameterName.GOAL: ValueKind.COORDINATE,
    ParameterName.TRAVEL_CAPABILITIES: ValueKind.BOOLEAN,
    ParameterName.WALKING_SPEED: ValueKind.NUMBER,
    ParameterName.CAR_TYPE: ValueKind.STRING,
}


@dataclass(frozen=True)
class ParameterValue:
    """Tagged value of an individual mapping."""

    kind: ValueKind
    value: float | bool | tuple[float, float] | str

    @classmethod
    def infer(cls, value) -> "ParameterValue":
        """Build a value, deriving its kind from the Python type."""
        # bool is checked first since it is a subclass of int
        if isinstance(value, bool):
            return cls(ValueKind.BOOLEAN, value)
        if isinstance(value, (int, float)):
            return cls(ValueKind.NUMBER, float(value))
        if isinstance(value, str):
            return cls(ValueKind.STRING, value)
        if isinstance(value, (tuple, list)) and len(value) == 2:
            lon, lat = value
            if isinstance(lon, bool) or isinstance(lat, bool):
                raise ValueError(f"Invalid coordinate: {value!r}")
            return cls(ValueKind.COORDINATE, (float(lon), float(lat)))
        raise ValueError(f"Unsupported individual mapping value: {value!r}")


@dataclass(frozen=True)
class IndividualMapping:
    """Single agent parameter (e.g. start coordinate, goal coordinate)."""

    name: ParameterName
    value: ParameterValue

    def __post_init__(self):
        if self.value.kind is not self.name.kind:
            raise ValueError(
                f"Parameter '{self.name.value}' expects a "
                f"{self.name.kind.value}, got {self.value.kind.value}"
            )

    @classmethod
    def of(cls, name: "str | ParameterName", value) -> "IndividualMapping":
        """Create a mapping from a raw name and a plain Python value."""
        return cls(ParameterName.parse(name), ParameterValue.infer(value))


@dataclass(frozen=True)
class Globals:
    """Global run settings."""

    start_point: datetime
    end_point: datetime
    delta_t_unit: TimeSpanUnit = TimeSpanUnit.SECONDS
    show_console_progress: bool = False
    output_target: OutputTargetType = OutputTargetType.NONE

    def __post_init__(self):
        if self.end_point <= self.start_point:
            raise ValueError(
                f"end_point ({self.end_point.isoformat()}) must be after "
                f"start_point ({self.start_point.isoformat()})"
            )

    @property
    def duration(self) -> timedelta:
        return self.end_point - self.start_point

    @property
    def steps(self) -> int:
        """Number of ticks that fit into the time window."""
        return int(self.duration / self.delta_t_unit.to_timedelta())


@dataclass(frozen=True)
class LayerMapping:
    """Binds a layer to its backing data file."""

    name: str
    file: str | None = None


@dataclass(frozen=True)
class AgentMapping:
    """Output and parameter settings for one agent type."""

    name: str
    output_target: OutputTargetType = OutputTargetType.NONE
    individual_mapping: tuple[IndividualMapping, ...] = field(
        default_factory=tuple
    )

    def parameters(self) -> dict[ParameterName, ParameterValue]:
        """Individual mapping as a dict (later entries win)."""
        return {m.name: m.value for m in self.individual_mapping}


@dataclass(frozen=True)
class EntityMapping:
    """Binds an entity type to its backing data file."""

    name: str
    file: str | None = None


@dataclass(frozen=True)
class SimulationConfig:
    """Complete run configuration."""

    simulation_identifier: str
    globals: Globals
    layer_mappings: tuple[LayerMapping, ...] = field(default_factory=tuple)
    agent_mappings: tuple[AgentMapping, ...] = field(default_factory=tuple)
    entity_mappings: tuple[EntityMapping, ...] = field(default_factory=tuple)

    def layer_mapping(self, name: str) -> LayerMapping | None:
        for mapping in self.layer_mappings:
            if mapping.name == name:
                return mapping
        return None

    def agent_mapping(self, name: str) -> AgentMapping | None:
        for mapping in self.agent_mappings:
            if mapping.name == name:
                return mapping
        return None

    def entity_mapping(self, name: str) -> EntityMapping | None:
        for mapping in self.entity_mappings:
            if mapping.name == name:
                return mapping
        return None
