"""Tests for the agent data model."""

import pytest

from ollama_agent.agent import AgentState, Message, Phase, ToolCallRequest, final_answer


def test_message_to_dict_omits_unset_name():
    assert Message(role="user", content="Hi").to_dict() == {"role": "user", "content": "Hi"}
    assert Message(role="tool", content="4", name="calculator").to_dict() == {
        "role": "tool", "content": "4", "name": "calculator"
    }


def test_message_from_dict():
    message = Message.from_dict({"role": "tool", "content": "4", "name": "calculator"})
    assert message == Message(role="tool", content="4", name="calculator")


def test_message_rejects_unknown_role():
    with pytest.raises(ValueError, match="Invalid message role"):
        Message(role="robot", content="beep")


def test_message_rejects_non_string_content():
    with pytest.raises(TypeError):
        Message(role="user", content=42)


def test_only_tool_messages_carry_a_name():
    with pytest.raises(ValueError):
        Message(role="user", content="Hi", name="calculator")


def test_message_is_immutable():
    message = Message(role="user", content="Hi")
    with pytest.raises(AttributeError):
        message.content = "changed"


def test_from_seed_copies_history():
    seed = [Message(role="user", content="Hi")]
    state = AgentState.from_seed(seed)

    state.history.append(Message(role="assistant", content="Hello"))

    assert len(seed) == 1
    assert state.phase is Phase.AWAITING_MODEL
    assert state.pending_tools == []
    assert state.last_tool_call_id is None
    assert not state.is_done


def test_from_seed_accepts_any_iterable():
    state = AgentState.from_seed(m for m in [Message(role="user", content="Hi")])
    assert len(state.history) == 1


def test_from_seed_rejects_empty_seed():
    with pytest.raises(ValueError):
        AgentState.from_seed([])


def test_final_answer():
    history = [
        Message(role="user", content="Hi"),
        Message(role="assistant", content="First"),
        Message(role="tool", content="4", name="calculator"),
        Message(role="assistant", content="Second"),
    ]
    assert final_answer(history).content == "Second"
    assert final_answer(history[:1]) is None


def test_to_dict_links_tool_calls_and_results():
    call = ToolCallRequest(id="t1", name="calculator", args={"operation": "add", "a": 2, "b": 2})

    assistant = Message(role="assistant", content="", tool_calls=(call,))
    result = Message(role="tool", content="The result of 2 add 2 is 4", name="calculator", tool_call_id="t1")

    assert assistant.to_dict()["tool_calls"] == [{
        "id": "t1",
        "type": "function",
        "function": {"name": "calculator", "arguments": '{"operation": "add", "a": 2, "b": 2}'},
    }]
    assert result.to_dict()["tool_call_id"] == "t1"


def test_tool_fields_belong_to_their_roles():
    call = ToolCallRequest(id="t1", name="weather", args={"location": "Oslo"})

    with pytest.raises(ValueError):
        Message(role="user", content="Hi", tool_call_id="t1")
    with pytest.raises(ValueError):
        Message(role="tool", content="Sunny", name="weather", tool_calls=(call,))
