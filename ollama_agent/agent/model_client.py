"""
Model Client
============

Wraps a call to the language model backend.

The client translates the agent's history and tool catalog into a backend
request and the backend's reply back into the agent's data model:

    history + catalog
         │
         ▼
    [first call?] ── yes ──> prepend system prompt listing the tools
         │
         ▼
    backend.complete(messages, tools)
         │
         ▼
    flatten content to a string, normalize tool calls (ids synthesized)
         │
         ▼
    ModelReply(text, tool_calls, system_message)

Backends implement the small ChatBackend protocol. OllamaBackend talks to an
Ollama server through its OpenAI-compatible API; tests plug in scripted fakes.
"""

from __future__ import annotations

import json
import uuid
from typing import TYPE_CHECKING, Any, Protocol, Sequence

from openai import AsyncOpenAI, OpenAIError

from ollama_agent.agent.errors import AgentError, ModelInvocationError
from ollama_agent.agent.state import Message, ModelReply, ToolCallRequest
from ollama_agent.utils.logger import Logger

if TYPE_CHECKING:
    from ollama_agent.tools import ToolRegistry
    from ollama_agent.utils.config import OllamaConfig

logger = Logger("ModelClient")

SYSTEM_PROMPT = """You are a helpful AI assistant that can use tools to answer user queries.
You have access to the following tools:
{tools_description}

Respond directly to the user when you know the answer or when no tool is needed.
When you need to use a tool to answer the user's query, request to use the tool.
Don't make up information or pretend to use tools when you don't need to."""

IMAGE_PLACEHOLDER = "[Image]"


def describe_tools(catalog: Sequence[tuple[str, str]]) -> str:
    """Render (name, description) pairs as one "name: description" line each."""
    return "\n".join(f"{name}: {description}" for name, description in catalog)


def build_system_message(registry: ToolRegistry) -> Message:
    """Build the system prompt with the registry's catalog interpolated."""
    return Message(
        role="system",
        content=SYSTEM_PROMPT.format(tools_description=describe_tools(registry.describe_all())),
    )


def needs_system_prompt(history: Sequence[Message]) -> bool:
    """True iff the history is exactly one user message."""
    return len(history) == 1 and history[0].role == "user"


def flatten_content(content: Any) -> str:
    """
    Reduce model content to a plain string.

    - str: returned unchanged
    - None: empty string
    - list of segments: each segment rendered, joined with a space
        - str segment: as is
        - {"type": "text"}: its text
        - {"type": "image_url"} / {"type": "image"}: "[Image]"
        - anything else: JSON
    - anything else: JSON
    """
    if isinstance(content, str):
        return content
    if content is None:
        return ""
    if isinstance(content, (list, tuple)):
        return " ".join(_flatten_segment(segment) for segment in content)
    return json.dumps(content, default=str)


def _flatten_segment(segment: Any) -> str:
    if isinstance(segment, str):
        return segment
    if isinstance(segment, dict):
        kind = segment.get("type")
        if kind == "text":
            return str(segment.get("text", ""))
        if kind in ("image_url", "image"):
            return IMAGE_PLACEHOLDER
    return json.dumps(segment, default=str)


def synthesize_tool_call_id() -> str:
    """Return a collision-resistant id for a tool call that came without one."""
    return f"tool-{uuid.uuid4().hex}"


def _parse_arguments(name: str, raw: Any) -> dict[str, Any]:
    """
    Turn raw tool-call arguments into a dict.

    OpenAI-style backends send a JSON string; others send a mapping. Arguments
    that cannot be parsed become {} so the tool reports the missing values.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse arguments for {name}: {e}")
            return {}
        if isinstance(parsed, dict):
            return parsed
    logger.warning(f"Ignoring non-object arguments for {name}: {raw!r}")
    return {}


def normalize_tool_calls(raw_calls: Sequence[dict[str, Any]] | None) -> list[ToolCallRequest]:
    """
    Convert backend tool-call dicts into ToolCallRequests.

    Missing ids are synthesized, and an id already used earlier in the same
    batch is replaced, so ids are unique within the batch. Order is kept.
    """
    calls: list[ToolCallRequest] = []
    seen: set[str] = set()

    for raw in raw_calls or []:
        name = str(raw.get("name") or "")
        call_id = raw.get("id") or synthesize_tool_call_id()
        if call_id in seen:
            call_id = synthesize_tool_call_id()
        seen.add(call_id)

        calls.append(ToolCallRequest(
            id=call_id,
            name=name,
            args=_parse_arguments(name, raw.get("arguments"))
        ))

    return calls


class ChatBackend(Protocol):
    """Interface for chat-style model backends."""

    model: str

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """
        Return {"content": str | list | None,
                "tool_calls": [{"id"?, "name", "arguments"}]?}.
        """
        ...


class OllamaBackend:
    """
    Ollama backend via its OpenAI-compatible chat completions API.

    Example:
        backend = OllamaBackend(get_config().ollama)
        reply = await backend.complete([{"role": "user", "content": "Hi"}])
    """

    def __init__(self, config: OllamaConfig, client: AsyncOpenAI | None = None):
        self.config = config
        self.model = config.model_name
        self.client = client or AsyncOpenAI(
            base_url=config.openai_base_url,
            api_key=config.api_key,
            timeout=config.timeout,
        )

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.config.temperature,
        }
        if tools:
            request_params["tools"] = tools

        try:
            response = await self.client.chat.completions.create(**request_params)
        except OpenAIError as e:
            raise ModelInvocationError(self.model, e) from e

        message = response.choices[0].message
        result: dict[str, Any] = {"role": "assistant", "content": message.content}

        if message.tool_calls:
            result["tool_calls"] = [
                {
                    "id": tc.id,
                    "name": tc.function.name,
                    "arguments": tc.function.arguments,
                }
                for tc in message.tool_calls
            ]

        return result

    async def aclose(self) -> None:
        await self.client.close()


class ModelClient:
    """
    Adapter between the agent loop and a ChatBackend.

    Example:
        client = ModelClient(OllamaBackend(config.ollama))
        reply = await client.invoke(
            [Message(role="user", content="What is 2 + 2?")],
            registry
        )
        reply.system_message  # injected prompt (first call only)
        reply.tool_calls      # [ToolCallRequest(name="calculator", ...)]
    """

    def __init__(self, backend: ChatBackend):
        self.backend = backend

    @property
    def model_name(self) -> str:
        return getattr(self.backend, "model", type(self.backend).__name__)

    async def invoke(self, history: Sequence[Message], registry: ToolRegistry) -> ModelReply:
        """
        Call the model with the history and tool catalog.

        Args:
            history: The conversation so far
            registry: The tool catalog to advertise

        Returns:
            The normalized reply. When the history is a single user message,
            reply.system_message holds the system prompt that was sent in
            front of it.

        Raises:
            ModelInvocationError: If the backend fails
        """
        system_message = build_system_message(registry) if needs_system_prompt(history) else None

        messages = list(history)
        if system_message is not None:
            messages.insert(0, system_message)

        payload = [message.to_dict() for message in messages]
        tools = registry.get_openai_functions() or None

        logger.debug(f"Calling {self.model_name} with {len(payload)} messages")

        try:
            response = await self.backend.complete(payload, tools=tools)
        except AgentError:
            raise
        except Exception as e:
            raise ModelInvocationError(self.model_name, e) from e

        reply = ModelReply(
            text=flatten_content(response.get("content")),
            tool_calls=normalize_tool_calls(response.get("tool_calls")),
            system_message=system_message,
        )

        logger.debug(
            f"Model replied with {len(reply.tool_calls)} tool call(s)",
            {"tools": [call.name for call in reply.tool_calls]} if reply.tool_calls else None
        )
        return reply
