"""
Core runtime data models for the MeshMind agent.

These dataclasses define the structured information packets that move
between the engine, the session, and the dispatcher.
"""

from .tool_call import ToolCall
from .tool_result import ToolResult
from .reply import Content, Part, Reply, TextPart, ToolCallPart, Turn

__all__ = [
    "ToolCall",
    "ToolResult",
    "Content",
    "Part",
    "Reply",
    "TextPart",
    "ToolCallPart",
    "Turn",
]
