import logging
from typing import Optional, Sequence

import openai
from openai import OpenAI

from .llm_client import LLMClient
from ...config import DEFAULT_ENGINE_TIMEOUT_SECONDS
from .messages import OPENAI, build_messages, parse_assistant_message
from ...errors import TransportError
from ...models import Content, Reply, Turn
from ...tools.schema import ToolDescriptor

logger = logging.getLogger(__name__)


class OpenAIClient(LLMClient):
    """
    OpenAI chat completions backend (official SDK).

    The API key is read by the SDK from OPENAI_API_KEY unless given.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0.0,
        timeout_seconds: Optional[float] = DEFAULT_ENGINE_TIMEOUT_SECONDS,
        client: Optional[OpenAI] = None,
    ):
        self.client = client or OpenAI(timeout=timeout_seconds)
        self.model = model
        self.temperature = temperature

    def generate(
        self,
        system_prompt: Optional[str],
        history: Sequence[Turn],
        content: Content,
        tools: Sequence[ToolDescriptor],
    ) -> Reply:

        kwargs = {
            "model": self.model,
            "messages": build_messages(system_prompt, history, content, dialect=OPENAI),
            "temperature": self.temperature,
        }

        if tools:
            kwargs["tools"] = [t.to_function() for t in tools]

        try:
            response = self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            raise TransportError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise TransportError("OpenAI returned no choices")

        message = response.choices[0].message.model_dump()

        logger.debug("[OPENAI CLIENT] finish_reason=%s", response.choices[0].finish_reason)

        return parse_assistant_message(message)
