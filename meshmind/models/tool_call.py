from dataclasses import dataclass, field
from typing import Dict, Any
import uuid


@dataclass(frozen=True)
class ToolCall:
    """
    Represents an engine-proposed request to execute a tool.

    This is the *execution intent packet* passed from the reasoning
    engine to the ToolDispatcher. It contains no execution logic, only
    declarative intent. It is produced for a single turn and consumed
    once.

    Architectural Role
    ------------------
    Engine → Reply → ToolCall → ToolDispatcher
    """

    tool_name: str
    """Name of the tool to invoke."""

    arguments: Dict[str, Any] = field(default_factory=dict)
    """Raw, not yet validated, arguments proposed by the engine."""

    # --- System Metadata ---
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    """
    Identifier pairing this call with its result.

    Engines that return their own call ids (OpenAI-compatible APIs)
    populate it; otherwise a random id is generated.
    """

    # ------------------------------------------------------------------
    # Debug Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"ToolCall(id={self.id[:8]}, tool='{self.tool_name}', "
            f"args={sorted(self.arguments)})"
        )
