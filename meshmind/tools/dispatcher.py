from __future__ import annotations

import time
import logging
from concurrent.futures import ThreadPoolExecutor
from threading import RLock
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .registry import ToolRegistry
from .validator import ArgumentValidator
from ..errors import MeshMindError, ToolError, UnhandledToolError
from ..models import ToolCall, ToolResult

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Mapping[str, Any]], str]


class ToolDispatcher:
    """
    Routes tool calls by name to their handlers.

    The dispatcher guarantees only routing and argument validation.
    Side effects (network calls, file reads, database queries) belong
    entirely to the handlers. Handlers report domain failures as text;
    anything they raise aborts the agent call.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        handlers: Optional[Mapping[str, ToolHandler]] = None,
        max_workers: int = 1,
    ) -> None:

        if max_workers < 1:
            raise ValueError("max_workers must be at least 1.")

        self._registry = registry
        self._handlers: Dict[str, ToolHandler] = {}
        self._lock = RLock()
        self._validator = ArgumentValidator()
        self._max_workers = max_workers

        for name, handler in (handlers or {}).items():
            self.bind(name, handler)

    # ============================================================
    # HANDLER BINDING
    # ============================================================

    def bind(self, tool_name: str, handler: ToolHandler) -> None:

        if not callable(handler):
            raise TypeError(f"Handler for '{tool_name}' must be callable.")

        if not self._registry.has_tool(tool_name):
            raise ValueError(f"Cannot bind handler: tool '{tool_name}' is not registered.")

        with self._lock:
            self._handlers[tool_name] = handler

        logger.debug("[DISPATCH] Handler bound: %s", tool_name)

    def is_bound(self, tool_name: str) -> bool:
        with self._lock:
            return tool_name in self._handlers

    # ============================================================
    # MAIN DISPATCH
    # ============================================================

    def dispatch(self, call: ToolCall) -> ToolResult:
        handler, args = self._prepare(call)
        return self._execute(call, handler, args)

    def _prepare(self, call: ToolCall) -> Tuple[ToolHandler, Dict[str, Any]]:
        """Route and decode a call without running its handler."""

        # ------------------------------------------------------------
        # Routing
        # ------------------------------------------------------------
        if not self._registry.has_tool(call.tool_name):
            logger.error("[DISPATCH] Unknown tool: %s", call.tool_name)
            raise UnhandledToolError(call.tool_name)

        tool = self._registry.get(call.tool_name)

        with self._lock:
            handler = self._handlers.get(call.tool_name)

        if handler is None:
            logger.error("[DISPATCH] No handler bound for tool: %s", call.tool_name)
            raise UnhandledToolError(call.tool_name)

        # ------------------------------------------------------------
        # Argument Decode
        # ------------------------------------------------------------
        return handler, self._validator.decode(tool, call.arguments)

    def _execute(self, call: ToolCall, handler: ToolHandler, args: Dict[str, Any]) -> ToolResult:

        start = time.monotonic()

        logger.info("[DISPATCH] Calling tool: %s", call.tool_name)
        logger.debug("[DISPATCH INPUT] Tool=%s, Args=%s", call.tool_name, args)

        # ------------------------------------------------------------
        # Execution
        # ------------------------------------------------------------
        try:
            output = handler(args)
        except MeshMindError:
            raise
        except Exception as e:
            logger.exception("[DISPATCH] Handler failed: %s", call.tool_name)
            raise ToolError(call.tool_name, f"tool '{call.tool_name}' failed: {e}") from e

        if not isinstance(output, str):
            raise ToolError(
                call.tool_name,
                f"tool '{call.tool_name}' returned {type(output).__name__}, expected text",
            )

        result = ToolResult(
            tool_name=call.tool_name,
            output=output,
            call_id=call.id,
            latency_ms=self._latency_ms(start),
        )

        logger.info(
            "[DISPATCH] %s done | latency_ms=%d | result (capped): %s",
            call.tool_name,
            result.latency_ms,
            result.preview(),
        )

        return result

    # ============================================================
    # BATCH DISPATCH
    # ============================================================

    def dispatch_batch(self, calls: Sequence[ToolCall]) -> List[ToolResult]:
        """
        Run every call of one engine turn.

        Every call is routed and decoded before any handler runs, so an
        unknown tool or a bad argument anywhere in the batch aborts it
        with no side effects.

        Results keep the order of ``calls``. With ``max_workers > 1`` the
        handlers run concurrently; the first failing call (in call order)
        is re-raised.
        """

        prepared = [(call, *self._prepare(call)) for call in calls]

        if self._max_workers == 1 or len(prepared) < 2:
            return [self._execute(call, handler, args) for call, handler, args in prepared]

        workers = min(self._max_workers, len(prepared))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="meshmind-tool") as pool:
            futures = [
                pool.submit(self._execute, call, handler, args)
                for call, handler, args in prepared
            ]
            return [f.result() for f in futures]

    @staticmethod
    def _latency_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def registry(self) -> ToolRegistry:
        return self._registry
