"""Shared test fixtures."""

import pytest

from ollama_agent.agent import AgentLoop, Message, ModelClient
from ollama_agent.tools import ToolRegistry
from ollama_agent.tools.calculator import calculator_tool
from ollama_agent.tools.weather import weather_tool


class ScriptedBackend:
    """Backend that replays canned responses and records every request."""

    model = "scripted"

    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls: list[dict] = []

    async def complete(self, messages, tools=None):
        self.calls.append({"messages": messages, "tools": tools})
        if not self._responses:
            raise AssertionError("ScriptedBackend ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def reply(content="", *tool_calls):
    """Build a backend response dict."""
    response = {"role": "assistant", "content": content}
    if tool_calls:
        response["tool_calls"] = list(tool_calls)
    return response


def tool_call(name, arguments, call_id=None):
    return {"id": call_id, "name": name, "arguments": arguments}


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture
def registry():
    """Fresh, frozen registry with the built-in tools."""
    return ToolRegistry([calculator_tool, weather_tool]).freeze()


@pytest.fixture
def make_loop(registry):
    """Build an AgentLoop around a ScriptedBackend."""

    def _make(*responses, max_round_trips=None):
        backend = ScriptedBackend(*responses)
        loop = AgentLoop(ModelClient(backend), registry, max_round_trips=max_round_trips)
        return loop, backend

    return _make


@pytest.fixture
def question():
    return [Message(role="user", content="What is 2 + 2?")]
