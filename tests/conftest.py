import pytest

from meshmind.agent.core import Agent
from meshmind.tools import ToolDispatcher, ToolRegistry

from helpers import ADD_TOOL, ECHO_TOOL


@pytest.fixture
def registry():
    return ToolRegistry([ECHO_TOOL, ADD_TOOL])


@pytest.fixture
def invocations():
    """Every handler invocation, in order, as (tool_name, args)."""
    return []


@pytest.fixture
def handlers(invocations):

    def echo(args):
        invocations.append(("echo", dict(args)))
        return args["text"]

    def add(args):
        invocations.append(("add", dict(args)))
        return str(args["a"] + args["b"])

    return {"echo": echo, "add": add}


@pytest.fixture
def dispatcher(registry, handlers):
    return ToolDispatcher(registry, handlers)


@pytest.fixture
def make_agent(dispatcher):
    """Build an agent around the shared dispatcher with a given engine."""

    def _make(engine, max_cycles=25, start=True, system_prompt=None):
        agent = Agent(
            engine,
            dispatcher,
            name="test",
            system_prompt=system_prompt,
            max_cycles=max_cycles,
        )
        if start:
            agent.new_session()
        return agent

    return _make
