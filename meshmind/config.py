import os
from typing import Mapping, Optional

DEFAULT_MAX_CYCLES = 25

DEFAULT_ENGINE_TIMEOUT_SECONDS = 120

SUPPORTED_BACKENDS = {"ollama", "groq", "openai"}

DEFAULT_MODELS = {
    "ollama": "llama3.1",
    "groq": "llama-3.1-8b-instant",
    "openai": "gpt-4o-mini",
}


class AgentConfig:
    """
    Central configuration object for agent behavior.
    Controls the engine backend and the orchestration loop bounds.
    """

    def __init__(
        self,
        name: str = "agent",
        llm_backend: str = "ollama",     # "ollama", "groq", or "openai"
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        max_cycles: int = DEFAULT_MAX_CYCLES,
        temperature: float = 0.0,
        max_tool_workers: int = 1,       # >1 dispatches a turn's tool calls concurrently
        engine_timeout_seconds: Optional[float] = DEFAULT_ENGINE_TIMEOUT_SECONDS,
        ollama_url: str = "http://localhost:11434",
    ):
        self.name = name
        self.llm_backend = llm_backend
        self.model = model or DEFAULT_MODELS.get(llm_backend)
        self.system_prompt = system_prompt
        self.max_cycles = max_cycles
        self.temperature = temperature
        self.max_tool_workers = max_tool_workers
        self.engine_timeout_seconds = engine_timeout_seconds
        self.ollama_url = ollama_url

        self._validate()

    def _validate(self):
        if self.llm_backend not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported llm_backend: {self.llm_backend}")

        if not self.model:
            raise ValueError("An engine model name is required")

        if not isinstance(self.max_cycles, int) or self.max_cycles < 1:
            raise ValueError(f"max_cycles must be a positive integer: {self.max_cycles}")

        if not isinstance(self.max_tool_workers, int) or self.max_tool_workers < 1:
            raise ValueError(f"max_tool_workers must be a positive integer: {self.max_tool_workers}")

        if self.temperature < 0:
            raise ValueError(f"temperature cannot be negative: {self.temperature}")

    # ------------------------------------------------------------------
    # Environment Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_env(
        cls,
        prefix: str = "MESHMIND",
        environ: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "AgentConfig":
        """
        Build a config from ``<PREFIX>_*`` environment variables.

        Keyword overrides win over the environment.
        """

        env = os.environ if environ is None else environ

        def get(key: str) -> Optional[str]:
            value = env.get(f"{prefix}_{key}")
            return value if value not in (None, "") else None

        values = {}

        if get("LLM_BACKEND"):
            values["llm_backend"] = get("LLM_BACKEND").lower()
        if get("MODEL"):
            values["model"] = get("MODEL")
        if get("OLLAMA_URL"):
            values["ollama_url"] = get("OLLAMA_URL")

        for key, field, cast in (
            ("MAX_CYCLES", "max_cycles", int),
            ("MAX_TOOL_WORKERS", "max_tool_workers", int),
            ("TEMPERATURE", "temperature", float),
            ("ENGINE_TIMEOUT_SECONDS", "engine_timeout_seconds", float),
        ):
            raw = get(key)
            if raw is None:
                continue
            try:
                values[field] = cast(raw)
            except ValueError:
                raise ValueError(f"Invalid {prefix}_{key}: {raw!r}") from None

        values.update(overrides)

        return cls(**values)

    def __repr__(self) -> str:
        return (
            f"AgentConfig(name={self.name!r}, backend={self.llm_backend!r}, "
            f"model={self.model!r}, max_cycles={self.max_cycles})"
        )


def peer_url_from_env(prefix: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Base URL of a peer agent from ``<PREFIX>_HOSTNAME`` / ``<PREFIX>_PORT``.
    """

    env = os.environ if environ is None else environ

    hostname = env.get(f"{prefix}_HOSTNAME")
    if not hostname:
        raise RuntimeError(f"environment variable {prefix}_HOSTNAME not set")

    port = env.get(f"{prefix}_PORT")
    if not port:
        raise RuntimeError(f"environment variable {prefix}_PORT not set")

    return f"http://{hostname}:{port}"
