"""Tests for the model client adapter and the Ollama backend."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from conftest import ScriptedBackend, reply, tool_call
from ollama_agent.agent import Message, ModelClient, ModelInvocationError, OllamaBackend
from ollama_agent.agent.model_client import (
    IMAGE_PLACEHOLDER,
    flatten_content,
    needs_system_prompt,
    normalize_tool_calls,
)
from ollama_agent.utils.config import OllamaConfig


def test_flatten_plain_string():
    assert flatten_content("hello") == "hello"


def test_flatten_none():
    assert flatten_content(None) == ""


def test_flatten_segments():
    content = [
        {"type": "text", "text": "Here is"},
        {"type": "image_url", "image_url": {"url": "http://x/cat.png"}},
        "plain",
        {"type": "audio", "data": "abc"},
    ]
    assert flatten_content(content) == (
        f'Here is {IMAGE_PLACEHOLDER} plain {{"type": "audio", "data": "abc"}}'
    )


def test_flatten_other_structures():
    assert flatten_content({"answer": 4}) == '{"answer": 4}'


def test_needs_system_prompt():
    user = Message(role="user", content="Hi")
    assert needs_system_prompt([user])
    assert not needs_system_prompt([Message(role="system", content="s"), user])
    assert not needs_system_prompt([Message(role="assistant", content="Hello")])
    assert not needs_system_prompt([user, Message(role="assistant", content="Hello")])


def test_normalize_keeps_ids_and_order():
    calls = normalize_tool_calls([
        tool_call("calculator", {"operation": "add", "a": 1, "b": 2}, "c1"),
        tool_call("weather", '{"location": "Oslo"}', "c2"),
    ])
    assert [(c.id, c.name) for c in calls] == [("c1", "calculator"), ("c2", "weather")]
    assert calls[1].args == {"location": "Oslo"}


def test_normalize_synthesizes_unique_ids():
    calls = normalize_tool_calls([
        tool_call("weather", {"location": "A"}),
        tool_call("weather", {"location": "B"}),
        tool_call("weather", {"location": "C"}, "dup"),
        tool_call("weather", {"location": "D"}, "dup"),
    ])
    ids = [c.id for c in calls]
    assert all(ids)
    assert len(set(ids)) == 4
    assert ids[2] == "dup"


def test_normalize_bad_arguments_become_empty():
    calls = normalize_tool_calls([
        tool_call("calculator", "{not json", "c1"),
        tool_call("calculator", "[1, 2]", "c2"),
        tool_call("calculator", None, "c3"),
    ])
    assert [c.args for c in calls] == [{}, {}, {}]


@pytest.mark.asyncio
async def test_first_call_injects_system_prompt(registry):
    backend = ScriptedBackend(reply("4"))
    client = ModelClient(backend)

    result = await client.invoke([Message(role="user", content="What is 2 + 2?")], registry)

    sent = backend.calls[0]["messages"]
    assert sent[0]["role"] == "system"
    for name in registry.list_names():
        assert name in sent[0]["content"]
    assert sent[1] == {"role": "user", "content": "What is 2 + 2?"}
    assert result.system_message is not None
    assert result.system_message.content == sent[0]["content"]
    assert backend.calls[0]["tools"] == registry.get_openai_functions()


@pytest.mark.asyncio
async def test_later_calls_do_not_inject(registry):
    backend = ScriptedBackend(reply("done"))
    client = ModelClient(backend)
    history = [
        Message(role="user", content="What is 2 + 2?"),
        Message(role="assistant", content=""),
        Message(role="tool", content="The result of 2 add 2 is 4", name="calculator"),
    ]

    result = await client.invoke(history, registry)

    sent = backend.calls[0]["messages"]
    assert [m["role"] for m in sent] == ["user", "assistant", "tool"]
    assert sent[2]["name"] == "calculator"
    assert result.system_message is None


@pytest.mark.asyncio
async def test_invoke_normalizes_reply(registry):
    backend = ScriptedBackend(
        reply([{"type": "text", "text": "Checking"}], tool_call("weather", '{"location": "Rome"}'))
    )
    result = await ModelClient(backend).invoke([Message(role="user", content="Weather?")], registry)

    assert result.text == "Checking"
    assert len(result.tool_calls) == 1
    assert result.tool_calls[0].name == "weather"
    assert result.tool_calls[0].args == {"location": "Rome"}
    assert result.tool_calls[0].id


@pytest.mark.asyncio
async def test_backend_failure_becomes_model_invocation_error(registry):
    backend = ScriptedBackend(ConnectionError("refused"))
    client = ModelClient(backend)

    with pytest.raises(ModelInvocationError) as exc_info:
        await client.invoke([Message(role="user", content="Hi")], registry)

    assert exc_info.value.model == "scripted"
    assert isinstance(exc_info.value.cause, ConnectionError)


def _ollama_config():
    return OllamaConfig(
        base_url="http://ollama:11434",
        model_name="mistral:latest",
        api_key="ollama",
        temperature=0.1,
        timeout=5.0,
    )


class FakeCompletions:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []

    async def create(self, **params):
        self.requests.append(params)
        if self.error:
            raise self.error
        return self.result


def _fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_openai_base_url():
    assert _ollama_config().openai_base_url == "http://ollama:11434/v1"


@pytest.mark.asyncio
async def test_ollama_backend_translates_response():
    message = SimpleNamespace(
        content=None,
        tool_calls=[
            SimpleNamespace(
                id="call_1",
                function=SimpleNamespace(name="calculator", arguments='{"operation": "add", "a": 2, "b": 2}'),
            )
        ],
    )
    completions = FakeCompletions(result=SimpleNamespace(choices=[SimpleNamespace(message=message)]))
    backend = OllamaBackend(_ollama_config(), client=_fake_client(completions))

    tools = [{"type": "function", "function": {"name": "calculator"}}]
    result = await backend.complete([{"role": "user", "content": "2+2"}], tools=tools)

    assert result["content"] is None
    assert result["tool_calls"] == [
        {"id": "call_1", "name": "calculator", "arguments": '{"operation": "add", "a": 2, "b": 2}'}
    ]
    request = completions.requests[0]
    assert request["model"] == "mistral:latest"
    assert request["temperature"] == 0.1
    assert request["tools"] == tools


@pytest.mark.asyncio
async def test_ollama_backend_wraps_transport_errors():
    error = openai.APIConnectionError(request=httpx.Request("POST", "http://ollama:11434/v1"))
    backend = OllamaBackend(_ollama_config(), client=_fake_client(FakeCompletions(error=error)))

    with pytest.raises(ModelInvocationError) as exc_info:
        await backend.complete([{"role": "user", "content": "Hi"}])

    assert exc_info.value.cause is error
