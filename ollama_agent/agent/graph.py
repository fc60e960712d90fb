"""
Agent Graph
===========

Declarative driver: a LangGraph StateGraph with two nodes.

    START ──> model ──(route)──> call_tool ──(route)──> model ...
                 │                    │
                 └──(route)──> END    └──(route)──> call_tool

The nodes are thin wrappers around AgentLoop.model_step / tool_step and the
conditional edges map route(state) to a node name, so the graph makes exactly
the decisions the loop makes.
"""

from __future__ import annotations

from typing import Iterable, TypedDict

from langgraph.errors import GraphRecursionError
from langgraph.graph import END, START, StateGraph

from ollama_agent.agent.core import AgentLoop, route
from ollama_agent.agent.errors import AgentError
from ollama_agent.agent.state import AgentState, Message, Phase
from ollama_agent.utils.logger import Logger

logger = Logger("Agent").child("Graph")

MODEL_NODE = "model"
TOOL_NODE = "call_tool"

PHASE_TO_NODE = {
    Phase.AWAITING_MODEL: MODEL_NODE,
    Phase.AWAITING_TOOL: TOOL_NODE,
    Phase.DONE: END,
}

# Counts node executions, not round trips; AgentLoop.max_round_trips
# bounds the run first
DEFAULT_RECURSION_LIMIT = 10_000


class GraphState(TypedDict):
    """Graph channel holding the run's AgentState."""
    agent: AgentState


def next_node(graph_state: GraphState) -> str:
    """Conditional-edge router: the node for the state's current phase."""
    return PHASE_TO_NODE[route(graph_state["agent"])]


def create_agent_graph(loop: AgentLoop):
    """
    Build and compile the agent graph.

    Args:
        loop: The state machine whose steps become the graph's nodes

    Returns:
        A compiled LangGraph graph; invoke with {"agent": AgentState}
    """

    async def model_node(graph_state: GraphState) -> dict:
        return {"agent": await loop.model_step(graph_state["agent"])}

    async def tool_node(graph_state: GraphState) -> dict:
        return {"agent": await loop.tool_step(graph_state["agent"])}

    builder = StateGraph(GraphState)
    builder.add_node(MODEL_NODE, model_node)
    builder.add_node(TOOL_NODE, tool_node)
    builder.add_edge(START, MODEL_NODE)
    builder.add_conditional_edges(
        MODEL_NODE,
        next_node,
        {TOOL_NODE: TOOL_NODE, END: END},
    )
    builder.add_conditional_edges(
        TOOL_NODE,
        next_node,
        {TOOL_NODE: TOOL_NODE, MODEL_NODE: MODEL_NODE},
    )
    return builder.compile()


class GraphAgent:
    """
    Runs the agent loop through the compiled graph.

    Example:
        agent = GraphAgent(loop)
        state = await agent.run([Message(role="user", content="What is 2 + 2?")])
    """

    def __init__(self, loop: AgentLoop, recursion_limit: int = DEFAULT_RECURSION_LIMIT):
        self.loop = loop
        self.recursion_limit = recursion_limit
        self.graph = create_agent_graph(loop)

    async def run(self, seed: Iterable[Message]) -> AgentState:
        state = AgentState.from_seed(seed)
        logger.debug(f"Starting graph run with {len(state.history)} seed message(s)")

        try:
            result = await self.graph.ainvoke(
                {"agent": state},
                config={"recursion_limit": self.recursion_limit},
            )
        except GraphRecursionError as e:
            raise AgentError(
                f"Graph stopped after {self.recursion_limit} steps without finishing"
            ) from e

        return result["agent"]
