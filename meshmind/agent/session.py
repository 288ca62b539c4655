from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..errors import NotReadyError, TransportError
from ..models import Content, Reply, Turn
from ..tools.schema import ToolDescriptor
from .llm.llm_client import LLMClient

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    TERMINATED = "terminated"


@dataclass
class Session:
    """
    Conversation with the reasoning engine.

    Holds the ordered turn history and advances the engine by exactly
    one reply per ``send``. This is short-term state only: it lives and
    dies with the owning process.

    A Session is owned by exactly one Agent and is NOT thread-safe;
    the Agent serializes access to it.
    """

    engine: LLMClient
    tools: Sequence[ToolDescriptor] = ()
    system_prompt: Optional[str] = None

    # ------------------------------------------------------------------
    # Conversation Context
    # ------------------------------------------------------------------

    state: SessionState = SessionState.UNINITIALIZED
    turns: List[Turn] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start a fresh session, dropping any previous history."""
        self.turns.clear()
        self.state = SessionState.ACTIVE
        logger.info("[SESSION] Started | engine=%s | tools=%d", self.engine.name, len(self.tools))

    def close(self) -> None:
        self.state = SessionState.TERMINATED
        logger.info("[SESSION] Terminated after %d turns", len(self.turns))

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def send(self, content: Content) -> Reply:
        """Submit user text or one batch of tool results; return the next reply."""

        if not self.is_active:
            raise NotReadyError(
                f"no session configured (state={self.state.value}); start a new session first"
            )

        reply = self.engine.generate(
            system_prompt=self.system_prompt,
            history=list(self.turns),
            content=content,
            tools=self.tools,
        )

        if not isinstance(reply, Reply):
            raise TransportError(
                f"engine {self.engine.name} returned {type(reply).__name__}, expected Reply"
            )

        self.turns.append(Turn(sent=content, reply=reply))

        logger.debug(
            "[SESSION] Turn %d | texts=%d | tool_calls=%d",
            len(self.turns),
            len(reply.texts),
            len(reply.tool_calls),
        )

        return reply

    # ------------------------------------------------------------------
    # History Helpers
    # ------------------------------------------------------------------

    def checkpoint(self) -> int:
        """Mark the current end of history."""
        return len(self.turns)

    def rewind(self, mark: int) -> None:
        """Drop every turn recorded after ``mark``."""
        dropped = len(self.turns) - mark
        if dropped > 0:
            del self.turns[mark:]
            logger.info("[SESSION] Rewound %d turns", dropped)

    def __len__(self) -> int:
        return len(self.turns)
