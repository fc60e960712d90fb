"""
Tools System
============

Tools are functions the model can ask the agent to run. Each tool has:
- a name the model uses to request it
- a description that goes into the system prompt
- a JSON Schema for its parameters, sent to the model with every call

Execution contract:
    Every tool returns a human-readable string, including on failure. A tool
    catches its own domain errors (bad arguments, division by zero, ...) and
    returns an "Error: ..." string instead of raising, so a failing tool is
    just another tool message the model can react to.

This module provides:
- ToolDefinition: the registry entry for one tool
- ToolRegistry: name -> tool lookup, catalog description and execution
- tool_registry: the process-wide registry the built-in tools register with
- default_registry(): the frozen process-wide registry with all built-ins
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable

from ollama_agent.utils.logger import Logger

if TYPE_CHECKING:
    from ollama_agent.agent.state import ToolCallRequest

logger = Logger("Tools")

ToolFn = Callable[[dict[str, Any]], Awaitable[str]]


@dataclass(frozen=True)
class ToolDefinition:
    """
    Definition of a tool.

    Attributes:
        name: Unique identifier for the tool
        description: What the tool does (shown to the model)
        parameters: JSON Schema for the parameters
        execute: Async function that runs the tool and returns a string

    Example:
        async def _echo(params: dict) -> str:
            return params.get("text", "")

        echo_tool = ToolDefinition(
            name="echo",
            description="Repeat the given text",
            parameters={
                "type": "object",
                "properties": {
                    "text": {"type": "string", "description": "Text to repeat"}
                },
                "required": ["text"]
            },
            execute=_echo
        )
    """
    name: str
    description: str
    parameters: dict
    execute: ToolFn

    def to_openai_function(self) -> dict:
        """Convert to the OpenAI function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters
            }
        }


class ToolRegistry:
    """
    Registry of available tools.

    The registry is filled once at startup and then frozen; runs only read
    from it, so it can be shared across concurrent runs without locking.

    Example:
        registry = ToolRegistry([calculator_tool])
        registry.freeze()

        fn = registry.resolve("calculator")
        result = await registry.execute(
            ToolCallRequest(id="t1", name="calculator",
                            args={"operation": "add", "a": 2, "b": 2})
        )
        # "The result of 2 add 2 is 4"
    """

    def __init__(self, tools: Iterable[ToolDefinition] = ()):
        self._tools: dict[str, ToolDefinition] = {}
        self._frozen = False
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If a tool with this name already exists
            RuntimeError: If the registry has been frozen
        """
        if self._frozen:
            raise RuntimeError(f"Cannot register '{tool.name}': registry is frozen")
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def freeze(self) -> "ToolRegistry":
        """Make the registry read-only. Returns self for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> ToolDefinition | None:
        """Get a tool definition by name, or None if not found."""
        return self._tools.get(name)

    def resolve(self, name: str) -> ToolFn | None:
        """
        Resolve a tool name to its executable function.

        Returns:
            The tool's execute function, or None if no such tool exists
        """
        tool = self._tools.get(name)
        return tool.execute if tool else None

    def get_all(self) -> list[ToolDefinition]:
        """Get all tools in registration order."""
        return list(self._tools.values())

    def list_names(self) -> list[str]:
        """Get the names of all tools in registration order."""
        return list(self._tools.keys())

    def describe_all(self) -> list[tuple[str, str]]:
        """
        Describe the catalog for the system prompt.

        Returns:
            (name, description) pairs in registration order
        """
        return [(tool.name, tool.description) for tool in self._tools.values()]

    def get_openai_functions(self) -> list[dict]:
        """Get all tools in OpenAI function format."""
        return [tool.to_openai_function() for tool in self._tools.values()]

    async def execute(self, call: ToolCallRequest) -> str:
        """
        Execute a tool call.

        Never raises: an unknown tool or an exception escaping the tool is
        turned into an "Error: ..." string.

        Args:
            call: The tool call to run

        Returns:
            The tool's result string
        """
        fn = self.resolve(call.name)
        if fn is None:
            logger.warning(f"Unknown tool requested: {call.name}")
            return f"Error: Unknown tool: {call.name}"

        try:
            logger.info(f"Executing tool: {call.name}")
            return str(await fn(dict(call.args)))
        except Exception as e:
            logger.error(f"Tool execution failed: {call.name}", e)
            return f"Error: {e}"

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


# Process-wide registry; built-in tools register themselves on import
tool_registry = ToolRegistry()


def register_all_tools() -> ToolRegistry:
    """Import the built-in tool modules so they register themselves."""
    from ollama_agent.tools import calculator  # noqa: F401
    from ollama_agent.tools import weather  # noqa: F401

    logger.debug(f"Registered {len(tool_registry)} tools")
    return tool_registry


def default_registry() -> ToolRegistry:
    """Return the process-wide registry with all built-ins, frozen."""
    return register_all_tools().freeze()


__all__ = [
    "ToolDefinition",
    "ToolFn",
    "ToolRegistry",
    "tool_registry",
    "register_all_tools",
    "default_registry",
]
