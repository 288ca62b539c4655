"""
Error taxonomy for the MeshMind orchestration core.

Every error below aborts the running ``Agent.call_agent`` invocation.
None of them are retried, and none are folded into a textual answer.

    MeshMindError
    ├── NotReadyError
    ├── CycleExceededError
    ├── ToolError
    │   ├── UnhandledToolError
    │   ├── MissingArgumentError
    │   └── TypeMismatchError
    └── TransportError

Domain failures ("no data for this ticker") are NOT errors. Handlers
return them as ordinary text so the reasoning engine can react to them.
"""

from __future__ import annotations

from typing import Optional


class MeshMindError(Exception):
    """Base class for all orchestration failures."""


class NotReadyError(MeshMindError):
    """Raised when an agent is called before a session has been started."""


class CycleExceededError(MeshMindError):
    """Raised when the turn budget is exhausted without a text-only reply."""

    def __init__(self, max_cycles: int) -> None:
        self.max_cycles = max_cycles
        super().__init__(f"message cycles exceeded (max_cycles={max_cycles})")


class ToolError(MeshMindError):
    """
    A tool call could not be satisfied.

    Raised directly by handlers that cannot even attempt their job, and
    used by the dispatcher to wrap unexpected handler exceptions.
    """

    def __init__(self, tool_name: str, message: Optional[str] = None) -> None:
        self.tool_name = tool_name
        super().__init__(message or f"tool '{tool_name}' failed")


class UnhandledToolError(ToolError):
    """The engine proposed a tool that is not registered or has no handler."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"unhandled function name: {tool_name}")


class MissingArgumentError(ToolError):
    """A required parameter was absent from the proposed tool call."""

    def __init__(self, tool_name: str, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(tool_name, f"missing arg: {parameter} (tool '{tool_name}')")


class TypeMismatchError(ToolError):
    """An argument value does not match the declared parameter type."""

    def __init__(self, tool_name: str, parameter: str, expected: str, actual: str) -> None:
        self.parameter = parameter
        self.expected = expected
        self.actual = actual
        super().__init__(
            tool_name,
            f"argument '{parameter}' of tool '{tool_name}' expected {expected}, got {actual}",
        )


class TransportError(MeshMindError):
    """A peer or engine could not be reached, or replied with garbage."""
