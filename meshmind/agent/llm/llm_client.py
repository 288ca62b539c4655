from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ...models import Content, Reply, Turn
from ...tools.schema import ToolDescriptor


class LLMClient(ABC):
    """
    Abstract reasoning-engine transport.

    Responsible only for:
        • Sending the conversation so far plus the new content
        • Declaring the available tools
        • Returning the engine's structured reply
    """

    @property
    def name(self) -> str:
        """Return backend identity."""
        return self.__class__.__name__

    @abstractmethod
    def generate(
        self,
        system_prompt: Optional[str],
        history: Sequence[Turn],
        content: Content,
        tools: Sequence[ToolDescriptor],
    ) -> Reply:
        """
        Advance the conversation by exactly one engine reply.

        Parameters
        ----------
        system_prompt : str | None
            Agent-level instruction sent ahead of the conversation.

        history : Sequence[Turn]
            Every earlier round-trip of the session, oldest first.

        content : str | Sequence[ToolResult]
            User text, or the batch of tool results answering the
            tool calls of the last reply in ``history``.

        tools : Sequence[ToolDescriptor]
            Tools the engine may call. Defines the action space.

        Returns
        -------
        Reply
            Ordered text and tool-call parts.

        Raises
        ------
        TransportError
            The backend is unreachable or its reply cannot be decoded.
        """
        raise NotImplementedError
