"""
Agent State
===========

The data model threaded through one agent run:

- Message: one immutable, role-tagged entry in the conversation
- ToolCallRequest: one tool invocation asked for by the model
- ModelReply: what the model client hands back for one model call
- AgentState: the mutable record of a run (history, pending tool queue,
  bookkeeping about the last dispatched tool call)
- Phase: where the state machine is (awaiting model, awaiting tool, done)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Literal

Role = Literal["system", "user", "assistant", "tool"]

ROLES: tuple[str, ...] = ("system", "user", "assistant", "tool")


@dataclass(frozen=True)
class Message:
    """
    A single conversation entry.

    Attributes:
        role: One of system, user, assistant, tool
        content: The text payload (always a string)
        name: The producing tool's name; only set on tool messages
        tool_call_id: Id of the request a tool message answers
        tool_calls: Requests an assistant message made, in order

    Raises:
        ValueError: On an unknown role, or tool fields on the wrong role
        TypeError: If content is not a string
    """
    role: Role
    content: str
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: tuple[ToolCallRequest, ...] = ()

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(
                f"Invalid message role: {self.role!r}. Expected one of: {', '.join(ROLES)}"
            )
        if not isinstance(self.content, str):
            raise TypeError(
                f"Message content must be a string, got {type(self.content).__name__}"
            )
        if self.role != "tool" and (self.name is not None or self.tool_call_id is not None):
            raise ValueError("Only tool messages may carry a name or tool_call_id")
        if self.tool_calls and self.role != "assistant":
            raise ValueError("Only assistant messages may carry tool calls")
        object.__setattr__(self, "tool_calls", tuple(self.tool_calls))

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the chat-completions message format.

        Unset optional fields are omitted, so plain messages stay
        {"role", "content"}.
        """
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.name is not None:
            data["name"] = self.name
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            data["tool_calls"] = [call.to_openai() for call in self.tool_calls]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """Build a message from a {"role", "content", "name"?, "tool_call_id"?} mapping."""
        return cls(
            role=data["role"],
            content=data["content"],
            name=data.get("name"),
            tool_call_id=data.get("tool_call_id"),
        )


@dataclass(frozen=True)
class ToolCallRequest:
    """
    A tool invocation requested by the model.

    Attributes:
        id: Identifier, unique within the batch it arrived in
        name: Name of the tool to run
        args: Arguments as given by the model. Not validated against the
            tool's schema; tools report their own argument errors.
    """
    id: str
    name: str
    args: dict[str, Any] = field(default_factory=dict)

    def to_openai(self) -> dict[str, Any]:
        """Render as an entry of an assistant message's tool_calls."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": json.dumps(self.args)},
        }


@dataclass(frozen=True)
class ModelReply:
    """
    One model response, already normalized.

    Attributes:
        text: Assistant text, flattened to a string
        tool_calls: Requested tool calls, in the order the model gave them
        system_message: The system prompt the client injected for this call,
            or None when the history already had context
    """
    text: str
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    system_message: Message | None = None


class Phase(str, Enum):
    """States of the agent loop."""
    AWAITING_MODEL = "awaiting_model"
    AWAITING_TOOL = "awaiting_tool"
    DONE = "done"


@dataclass
class AgentState:
    """
    Mutable record of a single agent run.

    Created fresh from a seed at the start of each run and discarded after.
    The history only grows; the single exception is the system prompt, which
    the first model call puts in front of the seed.

    Attributes:
        history: The conversation so far
        pending_tools: Tool calls still to run for the current model turn
        last_tool_call_id: Id of the most recently executed tool call
        last_tool_call: The most recently executed tool call
        phase: Current state machine phase
        model_calls: Number of model invocations so far
        tool_calls: Number of tool invocations so far
        round_trips: Number of completed model -> tools -> model cycles
    """
    history: list[Message] = field(default_factory=list)
    pending_tools: list[ToolCallRequest] = field(default_factory=list)
    last_tool_call_id: str | None = None
    last_tool_call: ToolCallRequest | None = None
    phase: Phase = Phase.AWAITING_MODEL
    model_calls: int = 0
    tool_calls: int = 0
    round_trips: int = 0

    @classmethod
    def from_seed(cls, seed: Iterable[Message]) -> "AgentState":
        """
        Create the initial state for a run.

        The seed is copied, so the caller's list is never mutated.

        Raises:
            ValueError: If the seed is empty
        """
        history = list(seed)
        if not history:
            raise ValueError("An agent run needs at least one seed message")
        return cls(history=history)

    @property
    def is_done(self) -> bool:
        return self.phase is Phase.DONE


def final_answer(history: Iterable[Message]) -> Message | None:
    """Return the last assistant message in a history, if any."""
    answer = None
    for message in history:
        if message.role == "assistant":
            answer = message
    return answer
