import json
from types import SimpleNamespace

import openai
import pytest
import requests

from meshmind.agent.llm import GroqClient, OllamaClient, create_llm_client
from meshmind.agent.llm.messages import OLLAMA, OPENAI, build_messages, parse_assistant_message
from meshmind.agent.llm.openai_client import OpenAIClient
from meshmind.config import DEFAULT_ENGINE_TIMEOUT_SECONDS, AgentConfig
from meshmind.errors import TransportError
from meshmind.models import Reply, ToolCall, ToolResult, Turn

from helpers import ECHO_TOOL


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


@pytest.fixture
def history():
    echo = ToolCall(tool_name="echo", arguments={"text": "hi"}, id="call-1")
    return [
        Turn(sent="say hi", reply=Reply.of("checking", echo)),
        Turn(
            sent=[ToolResult(tool_name="echo", output="hi", call_id="call-1")],
            reply=Reply.of("hi"),
        ),
    ]


# ------------------------------------------------------------
# Message translation
# ------------------------------------------------------------

def test_openai_dialect_messages(history):
    messages = build_messages("be brief", history, "again", dialect=OPENAI)

    assert [m["role"] for m in messages] == [
        "system", "user", "assistant", "tool", "assistant", "user",
    ]

    assistant = messages[2]
    assert assistant["content"] == "checking"
    assert assistant["tool_calls"][0]["id"] == "call-1"
    assert json.loads(assistant["tool_calls"][0]["function"]["arguments"]) == {"text": "hi"}

    assert messages[3] == {
        "role": "tool",
        "tool_call_id": "call-1",
        "name": "echo",
        "content": "hi",
    }


def test_ollama_dialect_messages(history):
    messages = build_messages(None, history, "again", dialect=OLLAMA)

    assert messages[0]["role"] == "user"
    assert messages[1]["tool_calls"][0]["function"]["arguments"] == {"text": "hi"}
    assert messages[2] == {"role": "tool", "tool_name": "echo", "content": "hi"}


def test_parse_text_then_calls_in_order():
    reply = parse_assistant_message({
        "content": "narration",
        "tool_calls": [
            {"id": "a", "function": {"name": "echo", "arguments": '{"text": "x"}'}},
            {"function": {"name": "add", "arguments": {"a": 1, "b": 2}}},
        ],
    })

    assert reply.texts == ["narration"]
    assert [(c.tool_name, c.arguments) for c in reply.tool_calls] == [
        ("echo", {"text": "x"}),
        ("add", {"a": 1, "b": 2}),
    ]
    assert reply.tool_calls[0].id == "a"


def test_parse_blank_content_yields_empty_reply():
    assert parse_assistant_message({"content": "   "}).is_empty


def test_parse_rejects_undecodable_arguments():
    with pytest.raises(TransportError):
        parse_assistant_message({
            "content": None,
            "tool_calls": [{"function": {"name": "echo", "arguments": "{not json"}}],
        })


# ------------------------------------------------------------
# Ollama
# ------------------------------------------------------------

def test_ollama_posts_chat_request(monkeypatch):
    seen = {}

    def fake_post(url, json=None, timeout=None):
        seen.update(url=url, json=json, timeout=timeout)
        return FakeResponse({"message": {"content": "hello"}})

    monkeypatch.setattr(requests, "post", fake_post)

    client = OllamaClient(model="llama3.1", base_url="http://ollama:11434/", timeout_seconds=5)
    reply = client.generate("sys", [], "hi", [ECHO_TOOL])

    assert reply.final_text == "hello"
    assert seen["url"] == "http://ollama:11434/api/chat"
    assert seen["timeout"] == 5
    assert seen["json"]["stream"] is False
    assert seen["json"]["tools"] == [ECHO_TOOL.to_function()]


def test_ollama_timeout_is_a_transport_error(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(requests, "post", fake_post)

    with pytest.raises(TransportError):
        OllamaClient().generate(None, [], "hi", [])


def test_ollama_bad_payload_is_a_transport_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({"unexpected": True}))

    with pytest.raises(TransportError):
        OllamaClient().generate(None, [], "hi", [])


# ------------------------------------------------------------
# Groq
# ------------------------------------------------------------

def test_groq_requires_api_key(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    with pytest.raises(RuntimeError):
        GroqClient()


def test_groq_parses_tool_calls(monkeypatch):
    seen = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        seen.update(headers=headers, json=json)
        return FakeResponse({
            "choices": [{
                "message": {
                    "content": None,
                    "tool_calls": [{
                        "id": "c1",
                        "type": "function",
                        "function": {"name": "echo", "arguments": '{"text": "x"}'},
                    }],
                },
            }],
        })

    monkeypatch.setattr(requests, "post", fake_post)

    reply = GroqClient(api_key="secret").generate(None, [], "hi", [ECHO_TOOL])

    assert seen["headers"]["Authorization"] == "Bearer secret"
    assert seen["json"]["tool_choice"] == "auto"
    assert reply.tool_calls[0].id == "c1"
    assert not reply.is_terminal


def test_groq_http_error_is_a_transport_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({}, status_code=503))

    with pytest.raises(TransportError):
        GroqClient(api_key="secret").generate(None, [], "hi", [])


# ------------------------------------------------------------
# OpenAI
# ------------------------------------------------------------

class FakeMessage:
    def __init__(self, data):
        self.data = data

    def model_dump(self):
        return dict(self.data)


def _fake_openai(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_openai_client_uses_sdk():
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        choice = SimpleNamespace(message=FakeMessage({"content": "done"}), finish_reason="stop")
        return SimpleNamespace(choices=[choice])

    client = OpenAIClient(model="gpt-4o-mini", client=_fake_openai(create))
    reply = client.generate("sys", [], "hi", [ECHO_TOOL])

    assert reply.final_text == "done"
    assert seen["model"] == "gpt-4o-mini"
    assert seen["messages"][0] == {"role": "system", "content": "sys"}
    assert seen["tools"] == [ECHO_TOOL.to_function()]


def test_openai_sdk_error_is_a_transport_error():
    def create(**kwargs):
        raise openai.OpenAIError("no key")

    with pytest.raises(TransportError):
        OpenAIClient(client=_fake_openai(create)).generate(None, [], "hi", [])


def test_openai_empty_choices_is_a_transport_error():
    client = OpenAIClient(client=_fake_openai(lambda **kwargs: SimpleNamespace(choices=[])))

    with pytest.raises(TransportError):
        client.generate(None, [], "hi", [])


# ------------------------------------------------------------
# Factory
# ------------------------------------------------------------

def test_factory_builds_configured_backend(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "secret")

    ollama = create_llm_client(AgentConfig(llm_backend="ollama", ollama_url="http://box:1"))
    groq = create_llm_client(AgentConfig(llm_backend="groq"))

    assert isinstance(ollama, OllamaClient)
    assert ollama.url == "http://box:1/api/chat"
    assert isinstance(groq, GroqClient)
    assert groq.model == "llama-3.1-8b-instant"


def test_factory_rejects_unknown_backend():
    config = AgentConfig()
    config.llm_backend = "mystery"

    with pytest.raises(ValueError):
        create_llm_client(config)


def test_engine_timeouts_share_one_default(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "secret")

    built = create_llm_client(AgentConfig(llm_backend="groq"))

    assert built.timeout == DEFAULT_ENGINE_TIMEOUT_SECONDS
    assert GroqClient().timeout == DEFAULT_ENGINE_TIMEOUT_SECONDS
    assert OllamaClient().timeout == DEFAULT_ENGINE_TIMEOUT_SECONDS
    assert AgentConfig().engine_timeout_seconds == DEFAULT_ENGINE_TIMEOUT_SECONDS
