from __future__ import annotations

from typing import Dict, List, Any, Iterable, Iterator
from threading import RLock
import logging

from .schema import ToolDescriptor

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Authoritative, ordered registry of the tools an agent exposes.

    This forms the capability boundary: if a tool is not registered here,
    the engine is never told about it and the dispatcher refuses to run
    it. Each agent owns its own registry; registries are never shared.
    """

    def __init__(self, tools: Iterable[ToolDescriptor] = ()) -> None:
        self._tools: Dict[str, ToolDescriptor] = {}
        self._lock = RLock()

        tools = list(tools)
        if tools:
            self.register_many(tools)
        else:
            logger.debug("[TOOL REGISTRY] Initialized (empty)")

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, tool: ToolDescriptor) -> None:

        if not isinstance(tool, ToolDescriptor):
            raise TypeError("Only ToolDescriptor instances can be registered.")

        with self._lock:
            if tool.name in self._tools:
                raise ValueError(f"Tool '{tool.name}' is already registered.")

            self._tools[tool.name] = tool

            logger.info(
                "[TOOL REGISTRY] Tool registered | total=%d",
                len(self._tools)
            )
            logger.debug(tool.to_debug_string())

    def register_many(self, tools: Iterable[ToolDescriptor]) -> None:

        tools = list(tools)

        with self._lock:
            seen = set(self._tools)
            for tool in tools:
                if not isinstance(tool, ToolDescriptor):
                    raise TypeError("Only ToolDescriptor instances can be registered.")
                if tool.name in seen:
                    raise ValueError(f"Tool '{tool.name}' is already registered.")
                seen.add(tool.name)

            for tool in tools:
                self._tools[tool.name] = tool
                logger.debug("[TOOL REGISTRY] Bulk registered: %s", tool.name)

            logger.info(
                "[TOOL REGISTRY] Bulk registration complete | total=%d",
                len(self._tools)
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tool_name: str) -> ToolDescriptor:

        with self._lock:
            try:
                return self._tools[tool_name]
            except KeyError:
                logger.error(
                    "[TOOL REGISTRY] Lookup FAILED: %s | available=%s",
                    tool_name,
                    list(self._tools.keys())
                )
                raise KeyError(f"Tool '{tool_name}' is not registered.") from None

    def has_tool(self, tool_name: str) -> bool:
        with self._lock:
            return tool_name in self._tools

    def list_tools(self) -> List[ToolDescriptor]:
        """Registered descriptors in registration order."""
        with self._lock:
            return list(self._tools.values())

    def list_tool_names(self) -> List[str]:
        with self._lock:
            return list(self._tools.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def __contains__(self, tool_name: object) -> bool:
        with self._lock:
            return tool_name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self.list_tools())

    # ------------------------------------------------------------------
    # Engine Integration
    # ------------------------------------------------------------------

    def manifest(self) -> List[Dict[str, Any]]:
        """Engine-facing schema of every registered tool, in order."""

        with self._lock:
            manifest = [tool.to_schema() for tool in self._tools.values()]

            logger.debug(
                "[TOOL REGISTRY] Manifest generated | count=%d",
                len(manifest)
            )

            return manifest
