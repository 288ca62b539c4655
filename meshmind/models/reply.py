"""
Engine reply model.

A Reply is the structured answer of one engine round-trip: an ordered
list of parts, each either free text or a proposed tool call.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from .tool_call import ToolCall
from .tool_result import ToolResult


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ToolCallPart:
    call: ToolCall


Part = Union[TextPart, ToolCallPart]

# What can be submitted to a session: user text or one batch of results.
Content = Union[str, Sequence[ToolResult]]


@dataclass(frozen=True)
class Reply:
    """
    Ordered engine reply.

    Terminal when it holds no tool calls at all. Text that arrives
    next to tool calls is narration, never the final answer.
    """

    parts: List[Part] = field(default_factory=list)

    @property
    def texts(self) -> List[str]:
        return [p.text for p in self.parts if isinstance(p, TextPart)]

    @property
    def tool_calls(self) -> List[ToolCall]:
        return [p.call for p in self.parts if isinstance(p, ToolCallPart)]

    @property
    def is_empty(self) -> bool:
        return not self.parts

    @property
    def is_terminal(self) -> bool:
        return bool(self.parts) and not self.tool_calls

    @property
    def final_text(self) -> Optional[str]:
        """First text part of a terminal reply, else None."""
        if not self.is_terminal:
            return None
        texts = self.texts
        return texts[0] if texts else None

    @classmethod
    def of(cls, *parts: Union[str, ToolCall, Part]) -> "Reply":
        """Build a reply from plain strings and ToolCalls."""
        normalized: List[Part] = []
        for part in parts:
            if isinstance(part, str):
                normalized.append(TextPart(part))
            elif isinstance(part, ToolCall):
                normalized.append(ToolCallPart(part))
            else:
                normalized.append(part)
        return cls(parts=normalized)


@dataclass(frozen=True)
class Turn:
    """One round-trip: what was sent and what the engine answered."""

    sent: Content
    reply: Reply

    @property
    def sent_results(self) -> List[ToolResult]:
        if isinstance(self.sent, str):
            return []
        return list(self.sent)
