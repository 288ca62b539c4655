import os
import requests
import logging
from typing import Optional, Sequence

from .llm_client import LLMClient
from ...config import DEFAULT_ENGINE_TIMEOUT_SECONDS
from .messages import OPENAI, build_messages, parse_assistant_message
from ...errors import TransportError
from ...models import Content, Reply, Turn
from ...tools.schema import ToolDescriptor

logger = logging.getLogger(__name__)


class GroqClient(LLMClient):
    """
    Groq transport over its OpenAI-compatible chat completions API.
    """

    def __init__(
        self,
        model: str = "llama-3.1-8b-instant",
        temperature: float = 0.0,
        timeout_seconds: Optional[float] = DEFAULT_ENGINE_TIMEOUT_SECONDS,
        api_key: Optional[str] = None,
    ):
        self.model = model
        self.url = "https://api.groq.com/openai/v1/chat/completions"
        self.temperature = temperature
        self.timeout = timeout_seconds

        self.api_key = api_key or os.getenv("GROQ_API_KEY")

        if not self.api_key:
            raise RuntimeError(
                "GROQ_API_KEY environment variable not set"
            )

    def generate(
        self,
        system_prompt: Optional[str],
        history: Sequence[Turn],
        content: Content,
        tools: Sequence[ToolDescriptor],
    ) -> Reply:

        payload = {
            "model": self.model,
            "messages": build_messages(system_prompt, history, content, dialect=OPENAI),
            "temperature": self.temperature,
        }

        if tools:
            payload["tools"] = [t.to_function() for t in tools]
            payload["tool_choice"] = "auto"

        logger.debug(
            "[GROQ CLIENT] model=%s | messages=%d | tools=%d",
            self.model,
            len(payload["messages"]),
            len(tools),
        )

        try:
            response = requests.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )

            response.raise_for_status()

        except requests.RequestException as e:
            raise TransportError(f"Groq request failed: {e}") from e

        try:
            data = response.json()
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise TransportError(f"Unexpected Groq response format: {e}") from e

        return parse_assistant_message(message)
