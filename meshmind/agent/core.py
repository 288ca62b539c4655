import logging
import threading
import time
from typing import List, Optional

from ..config import DEFAULT_MAX_CYCLES
from ..errors import CycleExceededError, MeshMindError, TransportError
from ..models import Content, Reply, ToolResult
from ..tools.dispatcher import ToolDispatcher
from ..tools.registry import ToolRegistry
from .llm.llm_client import LLMClient
from .session import Session, SessionState

logger = logging.getLogger(__name__)


class Agent:
    """
    Orchestration unit: one Session plus one ToolDispatcher.

    ``call_agent`` drives a request to completion by alternating between
    the reasoning engine and the tools it asks for, bounded by
    ``max_cycles`` engine round-trips.

    Only one ``call_agent`` runs at a time per Agent. Concurrent callers
    (e.g. the HTTP server's worker threads) queue on an internal lock,
    since interleaved turns would corrupt the conversation.
    """

    def __init__(
        self,
        engine: LLMClient,
        dispatcher: ToolDispatcher,
        *,
        name: str = "agent",
        system_prompt: Optional[str] = None,
        max_cycles: int = DEFAULT_MAX_CYCLES,
    ):
        if max_cycles < 1:
            raise ValueError("max_cycles must be at least 1.")

        self.name = name
        self.engine = engine
        self.dispatcher = dispatcher
        self.max_cycles = max_cycles

        self.registry: ToolRegistry = dispatcher.registry
        self.session = Session(
            engine=engine,
            tools=tuple(self.registry.list_tools()),
            system_prompt=system_prompt,
        )

        self._lock = threading.Lock()

    # ============================================================
    # SESSION LIFECYCLE
    # ============================================================

    def new_session(self) -> None:
        with self._lock:
            self.session.tools = tuple(self.registry.list_tools())
            self.session.start()

    def end_session(self) -> None:
        with self._lock:
            self.session.close()

    @property
    def state(self) -> SessionState:
        return self.session.state

    # ============================================================
    # PUBLIC ENTRY POINT
    # ============================================================

    def call_agent(self, request: str) -> str:
        """
        Run the bounded tool-calling loop for one request.

        Raises
        ------
        NotReadyError
            No active session.
        ToolError
            A tool call was unknown, malformed, or its handler failed.
        TransportError
            The engine or a peer could not be reached.
        CycleExceededError
            ``max_cycles`` replies all asked for more tool calls.
        """

        with self._lock:
            total_start = time.time()
            logger.info("====================================================")
            logger.info("[AGENT %s] New request: %s", self.name, request)
            logger.info("====================================================")

            # tools registered since the last call are advertised too
            self.session.tools = tuple(self.registry.list_tools())
            mark = self.session.checkpoint()

            try:
                answer = self._run_loop(request)
            except MeshMindError as e:
                logger.error("[AGENT %s] Call aborted: %s", self.name, e)
                self._rewind(mark)
                raise
            except BaseException:
                logger.exception("[AGENT %s] Call failed unexpectedly", self.name)
                self._rewind(mark)
                raise

            logger.info("[AGENT %s] Reply: %s", self.name, answer)
            logger.info("[TOTAL CALL] %.2fs", time.time() - total_start)

            return answer

    def _rewind(self, mark: int) -> None:
        # history must never end on unanswered tool calls
        if self.session.is_active:
            self.session.rewind(mark)

    # ============================================================
    # ORCHESTRATION LOOP
    # ============================================================

    def _run_loop(self, request: str) -> str:

        content: Content = request

        for cycle in range(1, self.max_cycles + 1):

            reply = self._ask_engine(content, cycle)

            if reply.is_empty:
                raise TransportError(f"engine {self.engine.name} returned an empty reply")

            # Text is only final when nothing else is pending in the same reply
            if reply.is_terminal:
                return reply.final_text

            if reply.texts:
                logger.info("[AGENT %s] Narration: %s", self.name, " ".join(reply.texts))

            if cycle == self.max_cycles:
                break

            content = self._run_tools(reply)

        logger.warning("[AGENT %s] Turn budget exhausted | max_cycles=%d", self.name, self.max_cycles)
        raise CycleExceededError(self.max_cycles)

    # ============================================================
    # SINGLE STEPS
    # ============================================================

    def _ask_engine(self, content: Content, cycle: int) -> Reply:

        t0 = time.time()
        reply = self.session.send(content)
        logger.info("[ENGINE] cycle=%d | %.2fs", cycle, time.time() - t0)

        return reply

    def _run_tools(self, reply: Reply) -> List[ToolResult]:

        calls = reply.tool_calls

        for call in calls:
            logger.info("[TOOL CALL] Tool=%s Args=%s", call.tool_name, call.arguments)

        t0 = time.time()
        results = self.dispatcher.dispatch_batch(calls)
        logger.info("[DISPATCHER] %d calls | %.2fs", len(calls), time.time() - t0)

        return results
