"""Assembly of a ready-to-run agent from configuration."""

from __future__ import annotations

from ollama_agent.agent.core import AgentLoop, AgentRunner
from ollama_agent.agent.graph import GraphAgent
from ollama_agent.agent.model_client import ChatBackend, ModelClient, OllamaBackend
from ollama_agent.agent.simple_agent import SimpleAgent
from ollama_agent.tools import ToolRegistry, default_registry
from ollama_agent.utils.config import DRIVERS, Config, get_config
from ollama_agent.utils.logger import Logger

logger = Logger("Factory")


def create_agent(
    config: Config | None = None,
    *,
    backend: ChatBackend | None = None,
    registry: ToolRegistry | None = None,
    driver: str | None = None,
) -> AgentRunner:
    """
    Build an agent runner.

    Args:
        config: Configuration, defaults to get_config()
        backend: Model backend, defaults to an OllamaBackend for config.ollama
        registry: Tool catalog, defaults to the frozen built-in registry
        driver: "graph" or "loop", defaults to config.agent.driver

    Returns:
        A GraphAgent or SimpleAgent

    Raises:
        ValueError: If the driver name is unknown
    """
    config = config or get_config()
    driver = driver or config.agent.driver
    if driver not in DRIVERS:
        raise ValueError(f"Unknown driver: {driver!r}. Expected one of: {', '.join(DRIVERS)}")

    loop = AgentLoop(
        model=ModelClient(backend or OllamaBackend(config.ollama)),
        registry=registry or default_registry(),
        max_round_trips=config.agent.max_round_trips,
    )

    logger.info(
        f"Agent ready: model={loop.model.model_name} driver={driver} "
        f"tools={','.join(loop.registry.list_names())}"
    )
    return GraphAgent(loop) if driver == "graph" else SimpleAgent(loop)
