from .schema import ParameterSpec, ToolDescriptor, message_tool
from .registry import ToolRegistry
from .dispatcher import ToolDispatcher, ToolHandler

__all__ = [
    "ParameterSpec",
    "ToolDescriptor",
    "message_tool",
    "ToolRegistry",
    "ToolDispatcher",
    "ToolHandler",
]
