"""
Reasoning-engine transport layer.

Exposes:
- LLMClient (abstract interface)
- OllamaClient (local backend)
- GroqClient (remote backend)
- create_llm_client (config-driven factory)

OpenAIClient lives in ``openai_client`` and is imported lazily by the
factory so the SDK is only loaded when selected.
"""

from .llm_client import LLMClient
from .ollama_client import OllamaClient
from .groq_client import GroqClient
from .factory import create_llm_client

__all__ = [
    "LLMClient",
    "OllamaClient",
    "GroqClient",
    "create_llm_client",
]
