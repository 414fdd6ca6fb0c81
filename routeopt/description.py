"""
Declaration of the layer, agent and entity types taking part in a run.
"""

from dataclasses import dataclass

from .errors import ModelDescriptionError


@dataclass(frozen=True)
class AgentDeclaration:
    """Agent type bound to the layer that manages it."""

    name: str
    agent_type: type
    layer_name: str


class ModelDescription:
    """
    Ordered set of layer, agent and entity types.

    Names default to the class name. Declaring a name twice, or binding an
    agent to a layer that has not been declared, raises
    ``ModelDescriptionError``. Once frozen no further declarations are
    accepted.
    """

    def __init__(self):
        self.layers: dict[str, type] = {}
        self.agents: dict[str, AgentDeclaration] = {}
        self.entities: dict[str, type] = {}
        self._frozen = False

    def _check_open(self):
        if self._frozen:
            raise ModelDescriptionError(
                "Model description is frozen; declare all types before "
                "building the application"
            )

    def add_layer(self, layer_type: type, name: str | None = None):
        self._check_open()
        name = name or layer_type.__name__
        if name in self.layers:
            raise ModelDescriptionError(f"Layer '{name}' declared twice")
        self.layers[name] = layer_type
        return self

    def add_agent(
        self, agent_type: type, layer_type: type, name: str | None = None
    ):
        self._check_open()
        name = name or agent_type.__name__
        if name in self.agents:
            raise ModelDescriptionError(f"Agent '{name}' declared twice")

        layer_name = next(
            (n for n, t in self.layers.items() if t is layer_type), None
        )
        if layer_name is None:
            raise ModelDescriptionError(
                f"Agent '{name}' references undeclared layer "
                f"'{layer_type.__name__}'"
            )
        self.agents[name] = AgentDeclaration(name, agent_type, layer_name)
        return self

    def add_entity(self, entity_type: type, name: str | None = None):
        self._check_open()
        name = name or entity_type.__name__
        if name in self.entities:
            raise ModelDescriptionError(f"Entity '{name}' declared twice")
        self.entities[name] = entity_type
        return self

    def agents_of(self, layer_name: str) -> list[AgentDeclaration]:
        return [a for a in self.agents.values() if a.layer_name == layer_name]

    def freeze(self) -> "ModelDescription":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __repr__(self) -> str:
        return (
            f"ModelDescription(layers={list(self.layers)}, "
            f"agents={list(self.agents)}, entities={list(self.entities)})"
        )
