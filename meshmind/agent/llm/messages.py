"""
Chat-message translation shared by the chat-completion backends.

Converts a session (system prompt, earlier turns, new content) into the
``messages`` list of an OpenAI-style chat API, and decodes the
assistant message of a response back into a Reply.

Two dialects are supported:
- "openai": tool-call arguments travel as JSON strings, results are
  paired with calls through ``tool_call_id`` (OpenAI, Groq).
- "ollama": arguments travel as objects, results carry ``tool_name``.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ...errors import TransportError
from ...models import Content, Reply, TextPart, ToolCall, ToolCallPart, ToolResult, Turn

logger = logging.getLogger(__name__)

OPENAI = "openai"
OLLAMA = "ollama"


# ------------------------------------------------------------
# Outgoing
# ------------------------------------------------------------

def build_messages(
    system_prompt: Optional[str],
    history: Sequence[Turn],
    content: Content,
    dialect: str = OPENAI,
) -> List[Dict[str, Any]]:

    messages: List[Dict[str, Any]] = []

    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})

    for turn in history:
        messages.extend(_content_messages(turn.sent, dialect))
        messages.append(_assistant_message(turn.reply, dialect))

    messages.extend(_content_messages(content, dialect))

    return messages


def _content_messages(content: Content, dialect: str) -> List[Dict[str, Any]]:

    if isinstance(content, str):
        return [{"role": "user", "content": content}]

    return [_tool_message(result, dialect) for result in content]


def _tool_message(result: ToolResult, dialect: str) -> Dict[str, Any]:

    if dialect == OLLAMA:
        return {"role": "tool", "tool_name": result.tool_name, "content": result.output}

    return {
        "role": "tool",
        "tool_call_id": result.call_id,
        "name": result.tool_name,
        "content": result.output,
    }


def _assistant_message(reply: Reply, dialect: str) -> Dict[str, Any]:

    text = "\n".join(reply.texts)
    calls = reply.tool_calls

    message: Dict[str, Any] = {"role": "assistant", "content": text}

    if not calls:
        return message

    if dialect == OLLAMA:
        message["tool_calls"] = [
            {"function": {"name": c.tool_name, "arguments": dict(c.arguments)}}
            for c in calls
        ]
        return message

    message["content"] = text or None
    message["tool_calls"] = [
        {
            "id": c.id,
            "type": "function",
            "function": {"name": c.tool_name, "arguments": json.dumps(c.arguments)},
        }
        for c in calls
    ]
    return message


# ------------------------------------------------------------
# Incoming
# ------------------------------------------------------------

def parse_assistant_message(message: Any) -> Reply:
    """
    Decode an assistant message into a Reply.

    Text (if any) comes first, followed by the tool calls in the order
    the engine listed them.
    """

    if not isinstance(message, dict):
        raise TransportError(f"Unexpected assistant message format: {message!r}")

    parts = []

    text = message.get("content")
    if isinstance(text, str) and text.strip():
        parts.append(TextPart(text))

    for raw in message.get("tool_calls") or []:
        parts.append(ToolCallPart(_parse_tool_call(raw)))

    return Reply(parts=parts)


def _parse_tool_call(raw: Any) -> ToolCall:

    try:
        function = raw["function"]
        name = function["name"]
        arguments = function.get("arguments") or {}
    except (KeyError, TypeError) as e:
        raise TransportError(f"Malformed tool call in engine reply: {raw!r}") from e

    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments) if arguments.strip() else {}
        except ValueError as e:
            raise TransportError(
                f"Tool call '{name}' has undecodable arguments: {arguments!r}"
            ) from e

    if not isinstance(arguments, dict):
        raise TransportError(f"Tool call '{name}' arguments must be an object: {arguments!r}")

    call_id = raw.get("id")
    if call_id:
        return ToolCall(tool_name=name, arguments=arguments, id=str(call_id))

    return ToolCall(tool_name=name, arguments=arguments)
