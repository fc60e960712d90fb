"""Tests for the terminal chat shell."""

import io

import pytest
from rich.console import Console

from conftest import reply, tool_call
from ollama_agent.agent import Message, SimpleAgent
from ollama_agent.cli.shell import THEME, ChatShell, format_role, new_messages


@pytest.fixture
def make_shell(make_loop):
    """Build a ChatShell writing to an in-memory console."""

    def _make(*responses):
        loop, backend = make_loop(*responses)
        output = io.StringIO()
        console = Console(file=output, theme=THEME, width=200, color_system=None)
        return ChatShell(SimpleAgent(loop), console=console), backend, output

    return _make


def test_format_role():
    assert format_role(Message(role="user", content="Hi")) == "USER"
    assert format_role(Message(role="tool", content="4", name="calculator")) == "TOOL (calculator)"


def test_new_messages_skips_injected_system_prompt():
    seed = [Message(role="user", content="Hi")]
    history = [
        Message(role="system", content="prompt"),
        Message(role="user", content="Hi"),
        Message(role="assistant", content="Hello!"),
    ]
    assert new_messages(seed, history) == [history[2]]


def test_new_messages_with_existing_context():
    seed = [
        Message(role="system", content="prompt"),
        Message(role="user", content="Hi"),
        Message(role="assistant", content="Hello!"),
        Message(role="user", content="Again"),
    ]
    history = seed + [Message(role="assistant", content="Hello again!")]
    assert new_messages(seed, history) == [history[-1]]


@pytest.mark.asyncio
async def test_ask_prints_conversation(make_shell):
    shell, _, output = make_shell(
        reply("", tool_call("calculator", {"operation": "add", "a": 2, "b": 2})),
        reply("2 + 2 is 4."),
    )

    history = await shell.ask("What is 2 + 2?")

    text = output.getvalue()
    assert "=== Conversation ===" in text
    assert "USER: What is 2 + 2?" in text
    assert "TOOL (calculator): The result of 2 add 2 is 4" in text
    assert "ASSISTANT: 2 + 2 is 4." in text
    assert len(history) == 5


@pytest.mark.asyncio
async def test_handle_line_prints_answer_and_tools(make_shell):
    shell, _, output = make_shell(
        reply("", tool_call("weather", {"location": "Oslo"})),
        reply("It is mild in Oslo."),
    )

    assert await shell.handle_line("Weather in Oslo?") is True

    text = output.getvalue()
    assert "TOOL (weather): The weather in Oslo is currently" in text
    assert "Assistant: It is mild in Oslo." in text
    assert "SYSTEM" not in text


@pytest.mark.asyncio
async def test_conversation_carries_over(make_shell):
    shell, backend, _ = make_shell(reply("Hello!"), reply("You said hi."))

    await shell.handle_line("Hi")
    await shell.handle_line("What did I say?")

    second = backend.calls[1]["messages"]
    assert [m["role"] for m in second] == ["system", "user", "assistant", "user"]
    assert second[-1]["content"] == "What did I say?"
    assert [m.role for m in shell.history] == ["system", "user", "assistant", "user", "assistant"]


@pytest.mark.asyncio
@pytest.mark.parametrize("command", ["exit", "QUIT", "  exit  "])
async def test_exit_commands(make_shell, command):
    shell, backend, output = make_shell()

    assert await shell.handle_line(command) is False
    assert "Goodbye!" in output.getvalue()
    assert backend.calls == []


@pytest.mark.asyncio
async def test_blank_line_is_ignored(make_shell):
    shell, backend, _ = make_shell()

    assert await shell.handle_line("   ") is True
    assert backend.calls == []


@pytest.mark.asyncio
async def test_failed_run_keeps_history(make_shell):
    shell, _, output = make_shell(reply("Hello!"), ConnectionError("ollama is down"))

    await shell.handle_line("Hi")
    before = list(shell.history)

    assert await shell.handle_line("Still there?") is True

    assert "Error:" in output.getvalue()
    assert shell.history == before


@pytest.mark.asyncio
async def test_run_stops_on_exit(make_shell, monkeypatch):
    shell, backend, output = make_shell(reply("Hello!"))
    lines = iter(["Hi", "exit"])
    monkeypatch.setattr(shell.console, "input", lambda prompt="": next(lines))

    await shell.run()

    text = output.getvalue()
    assert "Assistant: Hello!" in text
    assert "Goodbye!" in text
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_run_stops_on_end_of_input(make_shell, monkeypatch):
    shell, _, output = make_shell()

    def closed(prompt=""):
        raise EOFError

    monkeypatch.setattr(shell.console, "input", closed)

    await shell.run()

    assert "Goodbye!" in output.getvalue()
