import logging
import requests
from typing import Optional, Sequence

from .llm_client import LLMClient
from ...config import DEFAULT_ENGINE_TIMEOUT_SECONDS
from .messages import OLLAMA, build_messages, parse_assistant_message
from ...errors import TransportError
from ...models import Content, Reply, Turn
from ...tools.schema import ToolDescriptor

logger = logging.getLogger(__name__)


class OllamaClient(LLMClient):
    """
    Ollama LLM transport client.
    Local model backend with native tool calling.
    """

    def __init__(
        self,
        model: str = "llama3.1",
        base_url: str = "http://localhost:11434",
        temperature: float = 0.0,
        timeout_seconds: Optional[float] = DEFAULT_ENGINE_TIMEOUT_SECONDS,
    ):
        self.model = model
        self.url = base_url.rstrip("/") + "/api/chat"
        self.temperature = temperature
        self.timeout = timeout_seconds

    # ---------------------------------------------------------
    # Main Chat Interface
    # ---------------------------------------------------------

    def generate(
        self,
        system_prompt: Optional[str],
        history: Sequence[Turn],
        content: Content,
        tools: Sequence[ToolDescriptor],
    ) -> Reply:

        payload = {
            "model": self.model,
            "messages": build_messages(system_prompt, history, content, dialect=OLLAMA),
            "stream": False,
            "options": {
                "temperature": self.temperature,
            },
        }

        if tools:
            payload["tools"] = [t.to_function() for t in tools]

        logger.debug(
            "[OLLAMA CLIENT] model=%s | messages=%d | tools=%d",
            self.model,
            len(payload["messages"]),
            len(tools),
        )

        try:
            response = requests.post(
                self.url,
                json=payload,
                timeout=self.timeout,
            )

            response.raise_for_status()

        except requests.Timeout as e:
            raise TransportError("Ollama request timed out") from e

        except requests.RequestException as e:
            raise TransportError(f"Ollama request failed: {e}") from e

        try:
            data = response.json()
            message = data["message"]
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(
                f"Unexpected Ollama response format: {e}"
            ) from e

        return parse_assistant_message(message)
