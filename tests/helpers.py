import socket
import threading
import time
from typing import Callable, List, Optional, Sequence

from meshmind.agent.llm import LLMClient
from meshmind.models import Reply, ToolCall
from meshmind.tools import ParameterSpec, ToolDescriptor


class ScriptedEngine(LLMClient):
    """Engine that plays back prepared replies and records every request."""

    def __init__(
        self,
        replies: Sequence[Reply] = (),
        default: Optional[Callable[[], Reply]] = None,
        delay: float = 0.0,
    ):
        self.replies: List[Reply] = list(replies)
        self.default = default
        self.delay = delay
        self.requests = []
        self.started = threading.Event()
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def generate(self, system_prompt, history, content, tools):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.requests.append({
                "system_prompt": system_prompt,
                "history": list(history),
                "content": content,
                "tools": [t.name for t in tools],
            })
        self.started.set()

        try:
            if self.delay:
                time.sleep(self.delay)
            with self._lock:
                if self.replies:
                    return self.replies.pop(0)
            if self.default is not None:
                return self.default()
            raise AssertionError("engine script exhausted")
        finally:
            with self._lock:
                self.active -= 1

    @property
    def round_trips(self) -> int:
        return len(self.requests)


def call(name: str, **arguments) -> ToolCall:
    return ToolCall(tool_name=name, arguments=arguments)


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


ECHO_TOOL = ToolDescriptor(
    name="echo",
    description="Echo back text",
    parameters={"text": ParameterSpec(type="string", description="Text to echo")},
)

ADD_TOOL = ToolDescriptor(
    name="add",
    description="Add two numbers",
    parameters={
        "a": ParameterSpec(type="number"),
        "b": ParameterSpec(type="number"),
        "label": ParameterSpec(type="string", required=False),
    },
)
