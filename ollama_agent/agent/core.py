"""
Agent Core
==========

The agent loop: a three-state machine that alternates between consulting the
model and running the tools it asked for.

    AwaitingModel ──(reply has tool calls)──> AwaitingTool
         ▲    │                                  │    ▲
         │    └──(no tool calls)──> Done         │    │
         │                                       │    │ (queue not empty)
         └──────────(queue drained)──────────────┘────┘

- A model step calls the model with the current history, appends the
  assistant message and queues the requested tool calls in order.
- A tool step pops the front of the queue, runs it through the registry and
  appends one tool message with the result.

Tool calls from one model turn are run one at a time, in request order, each
producing its own tool message, before the model is consulted again.

This module owns every transition. Drivers (graph.GraphAgent,
simple_agent.SimpleAgent) only repeat step() or branch on route(state).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Protocol

from ollama_agent.agent.errors import AgentError, MaxRoundTripsExceeded
from ollama_agent.agent.state import AgentState, Message, Phase
from ollama_agent.utils.logger import Logger

if TYPE_CHECKING:
    from ollama_agent.agent.model_client import ModelClient
    from ollama_agent.tools import ToolRegistry

logger = Logger("Agent")


class InvalidTransition(AgentError):
    """Raised when a step is requested in a phase that does not allow it."""


class AgentLoop:
    """
    The agent state machine.

    Stateless between runs: all run data lives in the AgentState passed to
    each step, so one AgentLoop can serve concurrent runs.

    Example:
        loop = AgentLoop(ModelClient(backend), default_registry())
        state = AgentState.from_seed([Message(role="user", content="What is 2 + 2?")])

        while not state.is_done:
            await loop.step(state)

        print(state.history[-1].content)
    """

    def __init__(
        self,
        model: ModelClient,
        registry: ToolRegistry,
        max_round_trips: int | None = None
    ):
        """
        Args:
            model: Client used for model steps
            registry: Read-only tool catalog used for tool steps
            max_round_trips: Maximum model -> tools -> model cycles per run,
                None for no limit
        """
        if max_round_trips is not None and max_round_trips < 1:
            raise ValueError("max_round_trips must be a positive integer or None")

        self.model = model
        self.registry = registry
        self.max_round_trips = max_round_trips

    async def step(self, state: AgentState) -> AgentState:
        """
        Advance the state by one transition.

        A state that is already Done is returned unchanged.
        """
        next_phase = route(state)
        if next_phase is Phase.AWAITING_MODEL:
            return await self.model_step(state)
        if next_phase is Phase.AWAITING_TOOL:
            return await self.tool_step(state)
        return state

    async def model_step(self, state: AgentState) -> AgentState:
        """
        AwaitingModel -> AwaitingTool | Done.

        Raises:
            InvalidTransition: If the state is not awaiting the model
            MaxRoundTripsExceeded: If the model asks for tools after the
                last allowed round trip
            ModelInvocationError: If the model backend fails
        """
        if state.phase is not Phase.AWAITING_MODEL:
            raise InvalidTransition(f"Cannot call the model in phase {state.phase.value}")

        reply = await self.model.invoke(state.history, self.registry)
        state.model_calls += 1

        # The model always gets to answer after the last allowed round trip;
        # only a request for one more round trip fails the run
        if (
            reply.tool_calls
            and self.max_round_trips is not None
            and state.round_trips >= self.max_round_trips
        ):
            logger.error(f"Stopping run after {state.round_trips} round trips")
            raise MaxRoundTripsExceeded(self.max_round_trips)

        if reply.system_message is not None:
            state.history.insert(0, reply.system_message)

        state.history.append(
            Message(role="assistant", content=reply.text, tool_calls=tuple(reply.tool_calls))
        )
        state.pending_tools = list(reply.tool_calls)

        if state.pending_tools:
            state.phase = Phase.AWAITING_TOOL
            logger.info(
                f"Model requested {len(state.pending_tools)} tool call(s): "
                f"{', '.join(call.name for call in state.pending_tools)}"
            )
        else:
            state.phase = Phase.DONE
            logger.info(
                f"Run finished after {state.model_calls} model call(s) "
                f"and {state.tool_calls} tool call(s)"
            )

        return state

    async def tool_step(self, state: AgentState) -> AgentState:
        """
        AwaitingTool -> AwaitingTool | AwaitingModel.

        Tool failures never raise here; they arrive as error strings and are
        recorded like any other result.

        Raises:
            InvalidTransition: If the state is not awaiting a tool
        """
        if state.phase is not Phase.AWAITING_TOOL or not state.pending_tools:
            raise InvalidTransition(f"No tool call to run in phase {state.phase.value}")

        call = state.pending_tools.pop(0)
        logger.debug(f"Dispatching tool call {call.id}", {"name": call.name, "args": call.args})

        result = await self.registry.execute(call)
        state.tool_calls += 1

        state.history.append(
            Message(role="tool", content=result, name=call.name, tool_call_id=call.id)
        )
        state.last_tool_call_id = call.id
        state.last_tool_call = call

        if state.pending_tools:
            state.phase = Phase.AWAITING_TOOL
        else:
            state.phase = Phase.AWAITING_MODEL
            state.round_trips += 1

        return state


def route(state: AgentState) -> Phase:
    """
    The next step for a state: a tool step while the queue has entries,
    otherwise a model step, unless the run is finished.

    This is the same queue check the steps use to set state.phase, so the
    two always agree.
    """
    if state.is_done:
        return Phase.DONE
    return Phase.AWAITING_TOOL if state.pending_tools else Phase.AWAITING_MODEL


class AgentRunner(Protocol):
    """Run-to-completion contract shared by every driver."""

    loop: AgentLoop

    async def run(self, seed: Iterable[Message]) -> AgentState:
        """Run the agent from a seed history until Done and return the final state."""
        ...
