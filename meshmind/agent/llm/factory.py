from .llm_client import LLMClient
from ...config import AgentConfig


def create_llm_client(config: AgentConfig) -> LLMClient:
    """
    Factory for constructing the reasoning-engine transport.

    Backend selection is driven by configuration:
    - "ollama" → local Ollama server
    - "groq"   → Groq OpenAI-compatible API
    - "openai" → OpenAI SDK
    """

    backend = config.llm_backend

    # Lazy imports prevent unnecessary dependency loading
    if backend == "ollama":
        from .ollama_client import OllamaClient
        return OllamaClient(
            model=config.model,
            base_url=config.ollama_url,
            temperature=config.temperature,
            timeout_seconds=config.engine_timeout_seconds,
        )

    if backend == "groq":
        from .groq_client import GroqClient
        return GroqClient(
            model=config.model,
            temperature=config.temperature,
            timeout_seconds=config.engine_timeout_seconds,
        )

    if backend == "openai":
        from .openai_client import OpenAIClient
        return OpenAIClient(
            model=config.model,
            temperature=config.temperature,
            timeout_seconds=config.engine_timeout_seconds,
        )

    raise ValueError(
        f"Unsupported llm_backend: {backend}"
    )
