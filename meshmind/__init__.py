"""
MeshMind: bounded tool-calling agents composed over HTTP.
"""

from .app import MeshMindApp
from .agent.core import Agent
from .config import AgentConfig
from .errors import (
    CycleExceededError,
    MeshMindError,
    MissingArgumentError,
    NotReadyError,
    ToolError,
    TransportError,
    TypeMismatchError,
    UnhandledToolError,
)

__all__ = [
    "MeshMindApp",
    "Agent",
    "AgentConfig",
    "MeshMindError",
    "NotReadyError",
    "CycleExceededError",
    "ToolError",
    "UnhandledToolError",
    "MissingArgumentError",
    "TypeMismatchError",
    "TransportError",
]
