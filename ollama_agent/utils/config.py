"""
Configuration Management
========================

Centralized configuration for the agent. All environment variables are read
and typed here; nothing else in the package calls os.getenv() directly
(except the logger, which needs its level before configuration loads).

Variables:
    OLLAMA_BASE_URL        Ollama server URL (default http://localhost:11434)
    OLLAMA_MODEL_NAME      Model tag (default mistral:latest)
    OLLAMA_API_KEY         Placeholder key for the OpenAI-compatible API
    OLLAMA_TEMPERATURE     Sampling temperature (default 0.1)
    OLLAMA_TIMEOUT         Request timeout in seconds (default 120)
    MCP_HOST / MCP_PORT    HTTP endpoint bind address (default 0.0.0.0:8000)
    AGENT_MAX_ROUND_TRIPS  Model/tool round-trip cap, 0 disables (default 10)
    AGENT_DRIVER           "graph" or "loop" (default graph)
    LOG_LEVEL              debug | info | warning | error (default info)

Usage:
    from ollama_agent.utils.config import get_config

    config = get_config()
    print(config.ollama.model_name)
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from ollama_agent.utils.logger import Logger

logger = Logger("Config")

DRIVERS = ("graph", "loop")


def _optional(name: str, default: str) -> str:
    """
    Get an optional environment variable with a default.

    Empty values count as unset.
    """
    return os.getenv(name) or default


def _optional_int(name: str, default: int) -> int:
    """
    Get an optional integer environment variable.

    Falls back to the default (with a warning) when the value is not an integer.
    """
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name} is not a valid integer, using default: {default}")
        return default


def _optional_float(name: str, default: float) -> float:
    """Get an optional float environment variable."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"{name} is not a valid number, using default: {default}")
        return default


def _optional_bool(name: str, default: bool) -> bool:
    """True if the value is 'true', '1' or 'yes' (case-insensitive)."""
    value = os.getenv(name)
    if not value:
        return default
    return value.lower() in ("true", "1", "yes")


# ==============================================================================
# Configuration Dataclasses
# ==============================================================================

@dataclass(frozen=True)
class OllamaConfig:
    """Ollama backend configuration."""
    base_url: str       # e.g. http://localhost:11434
    model_name: str     # e.g. mistral:latest
    api_key: str        # Ollama ignores it, the OpenAI client requires one
    temperature: float
    timeout: float      # Seconds

    @property
    def openai_base_url(self) -> str:
        """URL of Ollama's OpenAI-compatible API."""
        base = self.base_url.rstrip("/")
        return base if base.endswith("/v1") else f"{base}/v1"


@dataclass(frozen=True)
class ServerConfig:
    """HTTP endpoint configuration."""
    host: str
    port: int
    access_log: bool


@dataclass(frozen=True)
class AgentConfig:
    """Agent loop configuration."""
    max_round_trips: int | None  # None = unbounded
    driver: str                  # "graph" or "loop"


@dataclass(frozen=True)
class Config:
    """
    Root configuration object.

    Access via:
        config = get_config()
        config.ollama.base_url
        config.server.port
        config.agent.max_round_trips
    """
    ollama: OllamaConfig
    server: ServerConfig
    agent: AgentConfig
    log_level: str


def load_config() -> Config:
    """
    Load and validate all configuration from the environment.

    Loads .env first (without overriding variables already set).

    Raises:
        ValueError: If AGENT_DRIVER names an unknown driver or a numeric
            setting is out of range
    """
    load_dotenv()

    driver = _optional("AGENT_DRIVER", "graph").lower()
    if driver not in DRIVERS:
        raise ValueError(
            f"Invalid AGENT_DRIVER: {driver!r}. Expected one of: {', '.join(DRIVERS)}"
        )

    max_round_trips = _optional_int("AGENT_MAX_ROUND_TRIPS", 10)
    if max_round_trips < 0:
        raise ValueError("AGENT_MAX_ROUND_TRIPS must be >= 0 (0 disables the cap)")

    port = _optional_int("MCP_PORT", 8000)
    if not 0 < port < 65536:
        raise ValueError(f"MCP_PORT out of range: {port}")

    return Config(
        ollama=OllamaConfig(
            base_url=_optional("OLLAMA_BASE_URL", "http://localhost:11434"),
            model_name=_optional("OLLAMA_MODEL_NAME", "mistral:latest"),
            api_key=_optional("OLLAMA_API_KEY", "ollama"),
            temperature=_optional_float("OLLAMA_TEMPERATURE", 0.1),
            timeout=_optional_float("OLLAMA_TIMEOUT", 120.0),
        ),
        server=ServerConfig(
            host=_optional("MCP_HOST", "0.0.0.0"),
            port=port,
            access_log=_optional_bool("MCP_ACCESS_LOG", False),
        ),
        agent=AgentConfig(
            max_round_trips=max_round_trips or None,
            driver=driver,
        ),
        log_level=_optional("LOG_LEVEL", "info"),
    )


# ==============================================================================
# Singleton
# ==============================================================================

_config_instance: Config | None = None


def get_config() -> Config:
    """
    Get the singleton configuration instance.

    Loaded on first access and cached afterwards.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config_instance
    _config_instance = None
