"""
Utilities Module
================

Shared helpers:
- logger: Context-prefixed console logging with levels
- config: Environment-driven configuration
"""

from ollama_agent.utils.logger import Logger, logger, set_level
from ollama_agent.utils.config import get_config, reset_config, Config

__all__ = ["Logger", "logger", "set_level", "get_config", "reset_config", "Config"]
