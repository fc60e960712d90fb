"""
Agent System
============

The agent alternates between asking the model and running the tools it
requests, until the model answers without asking for tools.

This module provides:
- AgentLoop: the state machine (model step / tool step)
- GraphAgent, SimpleAgent: interchangeable drivers running a loop to completion
- ModelClient, OllamaBackend: the model adapter and its Ollama transport
- AgentState, Message, ToolCallRequest: the run's data model
- create_agent: builds a configured runner
"""

from ollama_agent.agent.core import AgentLoop, AgentRunner, InvalidTransition, route
from ollama_agent.agent.errors import AgentError, MaxRoundTripsExceeded, ModelInvocationError
from ollama_agent.agent.factory import create_agent
from ollama_agent.agent.graph import GraphAgent, create_agent_graph
from ollama_agent.agent.model_client import ChatBackend, ModelClient, OllamaBackend
from ollama_agent.agent.simple_agent import SimpleAgent
from ollama_agent.agent.state import (
    AgentState,
    Message,
    ModelReply,
    Phase,
    ToolCallRequest,
    final_answer,
)

__all__ = [
    "AgentLoop",
    "AgentRunner",
    "InvalidTransition",
    "route",
    "AgentError",
    "MaxRoundTripsExceeded",
    "ModelInvocationError",
    "create_agent",
    "GraphAgent",
    "create_agent_graph",
    "ChatBackend",
    "ModelClient",
    "OllamaBackend",
    "SimpleAgent",
    "AgentState",
    "Message",
    "ModelReply",
    "Phase",
    "ToolCallRequest",
    "final_answer",
]
