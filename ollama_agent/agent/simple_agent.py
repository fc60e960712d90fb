"""Imperative driver: the agent loop as a plain while loop.

Behaves exactly like graph.GraphAgent, without LangGraph.
"""

from __future__ import annotations

from typing import Iterable

from ollama_agent.agent.core import AgentLoop
from ollama_agent.agent.state import AgentState, Message
from ollama_agent.utils.logger import Logger

logger = Logger("Agent").child("Loop")


class SimpleAgent:
    """Steps the state machine until it reports Done."""

    def __init__(self, loop: AgentLoop):
        self.loop = loop

    async def run(self, seed: Iterable[Message]) -> AgentState:
        state = AgentState.from_seed(seed)
        logger.debug(f"Starting loop run with {len(state.history)} seed message(s)")

        while not state.is_done:
            await self.loop.step(state)

        return state
