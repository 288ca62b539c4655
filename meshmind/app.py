from typing import Mapping, Optional

from .agent.core import Agent
from .agent.llm import LLMClient, create_llm_client
from .config import AgentConfig
from .tools.dispatcher import ToolDispatcher, ToolHandler
from .tools.registry import ToolRegistry


class MeshMindApp:
    """
    Top-level facade for constructing a MeshMind Agent.

    This class hides internal wiring and enforces a clean separation
    between:

        • Framework-owned orchestration (agent loop, session, dispatch)
        • Consumer-owned capabilities (tool descriptors and handlers)

    The framework never invents tools. The returned Agent is fully wired,
    has an active session, and is ready for ``call_agent()``.
    """

    @staticmethod
    def create(
        *,
        config: AgentConfig,
        registry: ToolRegistry,
        handlers: Mapping[str, ToolHandler],
        engine: Optional[LLMClient] = None,
    ) -> Agent:
        """
        Construct and return a fully initialized Agent.

        Parameters
        ----------
        config : AgentConfig
            Engine backend, system prompt and loop bounds.

        registry : ToolRegistry
            Tools the agent exposes to its engine. Owned by this agent
            alone.

        handlers : Mapping[str, ToolHandler]
            One handler per registered tool name.

        engine : LLMClient, optional
            Pre-built engine transport. Built from ``config`` when absent.
        """

        engine = engine or create_llm_client(config)

        dispatcher = ToolDispatcher(
            registry,
            handlers=handlers,
            max_workers=config.max_tool_workers,
        )

        agent = Agent(
            engine,
            dispatcher,
            name=config.name,
            system_prompt=config.system_prompt,
            max_cycles=config.max_cycles,
        )

        # A freshly assembled agent always starts with a new session
        agent.new_session()

        return agent
