from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

SUPPORTED_TYPES = ("string", "number", "integer", "boolean", "array", "object")


@dataclass(frozen=True)
class ParameterSpec:
    """Declared shape of a single tool parameter."""

    type: str = "string"
    description: str = ""
    required: bool = True

    def __post_init__(self):
        if self.type not in SUPPORTED_TYPES:
            raise ValueError(
                f"Unsupported parameter type '{self.type}'. "
                f"Expected one of {SUPPORTED_TYPES}."
            )

    def to_schema(self) -> Dict[str, Any]:
        return {"type": self.type, "description": self.description}


@dataclass(frozen=True)
class ToolDescriptor:
    """
    Declarative contract describing an agent capability.

    A ToolDescriptor defines WHAT action can be performed and which
    arguments it needs. HOW the action runs is the business of the
    handler bound to it in the ToolDispatcher.

        Engine → ToolCall → ArgumentValidator → ToolDispatcher → handler

    Descriptors are immutable once created. The parameter mapping is
    frozen into a read-only view so a registered contract can never be
    edited in place.
    """

    # ------------------------------------------------------------------
    # Core Identity
    # ------------------------------------------------------------------

    name: str
    description: str

    # ------------------------------------------------------------------
    # Contract Layer
    # ------------------------------------------------------------------

    parameters: Mapping[str, ParameterSpec] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Validation Layer
    # ------------------------------------------------------------------

    def __post_init__(self):
        """
        Lightweight invariant checks.

        Raises early if the contract is malformed.
        """

        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool name must be a non-empty string.")

        if not isinstance(self.description, str):
            raise TypeError("Tool description must be a string.")

        if not isinstance(self.parameters, Mapping):
            raise TypeError("parameters must be a mapping.")

        for key, spec in self.parameters.items():
            if not key or not isinstance(key, str):
                raise ValueError(f"Tool '{self.name}' has an invalid parameter name.")
            if not isinstance(spec, ParameterSpec):
                raise TypeError(
                    f"Parameter '{key}' of tool '{self.name}' must be a ParameterSpec."
                )

        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    # ------------------------------------------------------------------
    # Derived Properties
    # ------------------------------------------------------------------

    @property
    def required(self) -> List[str]:
        return [k for k, spec in self.parameters.items() if spec.required]

    # ------------------------------------------------------------------
    # Engine-Facing Schema
    # ------------------------------------------------------------------

    def to_schema(self) -> Dict[str, Any]:
        """
        Engine-facing declaration:

            {"name", "description",
             "parameters": {"type": "object", "properties", "required"}}
        """

        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    key: spec.to_schema() for key, spec in self.parameters.items()
                },
                "required": self.required,
            },
        }

    def to_function(self) -> Dict[str, Any]:
        """OpenAI-style ``tools`` entry, also understood by Ollama."""
        return {"type": "function", "function": self.to_schema()}

    def to_debug_string(self) -> str:
        params = ", ".join(
            f"{k}:{s.type}{'' if s.required else '?'}" for k, s in self.parameters.items()
        )
        return f"[TOOL] {self.name}({params})"


def message_tool(name: str, description: str, message_description: str = "") -> ToolDescriptor:
    """
    Descriptor for a tool taking one required natural-language ``message``.

    This is the shape every agent-as-a-tool shares.
    """

    return ToolDescriptor(
        name=name,
        description=description,
        parameters={
            "message": ParameterSpec(
                type="string",
                description=message_description or "The natural language request message",
            ),
        },
    )
