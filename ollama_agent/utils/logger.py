"""
Logger Utility
==============

Console logging for the agent, the HTTP endpoint and the chat shell.

Features:
1. Log levels (DEBUG, INFO, WARNING, ERROR)
2. Timestamped, context-prefixed output
3. Child loggers for nested components (e.g. [Agent:Loop])
4. Color-coded terminal output, disabled when NO_COLOR is set

The minimum level comes from LOG_LEVEL and can be changed at runtime with
set_level(), which the entry point calls after loading configuration.

Usage:
    from ollama_agent.utils.logger import Logger

    logger = Logger("Agent")
    logger.info("Run started")
    logger.debug("Model reply", {"tool_calls": 2})
"""

import json
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """
    Log levels with numeric values for comparison.
    Higher values = more severe.
    """
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


class Colors:
    """ANSI escape codes for colored terminal output."""
    RESET = "\033[0m"
    DEBUG = "\033[36m"    # Cyan
    INFO = "\033[32m"     # Green
    WARNING = "\033[33m"  # Yellow
    ERROR = "\033[31m"    # Red
    DIM = "\033[2m"


_LEVEL_NAMES = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
}


def parse_level(value: str | None, default: LogLevel = LogLevel.INFO) -> LogLevel:
    """
    Parse a level name such as "debug" or "WARN".

    Args:
        value: The level name (case-insensitive), or None
        default: Level returned for missing or unknown names

    Returns:
        The matching LogLevel
    """
    if not value:
        return default
    return _LEVEL_NAMES.get(value.upper(), default)


# Process-wide minimum level shared by every Logger instance
_min_level: LogLevel = parse_level(os.getenv("LOG_LEVEL"))


def set_level(level: LogLevel | str) -> None:
    """Change the minimum level for all loggers."""
    global _min_level
    _min_level = parse_level(level) if isinstance(level, str) else level


def get_level() -> LogLevel:
    """Return the current minimum level."""
    return _min_level


def _use_color() -> bool:
    return os.getenv("NO_COLOR") is None


class Logger:
    """
    A context-aware logger with colored output.

    Example:
        logger = Logger("Agent")
        logger.info("Starting run")

        tool_logger = logger.child("Tools")
        tool_logger.debug("Dispatching", {"tool": "calculator"})
        # [Agent:Tools] Dispatching
    """

    def __init__(self, context: str = ""):
        """
        Args:
            context: A prefix for all log messages (e.g., "Agent", "Server")
        """
        self.context = context

    def child(self, child_context: str) -> "Logger":
        """
        Create a child logger with additional context.

        Args:
            child_context: Additional context to append

        Returns:
            A new Logger whose context is "<parent>:<child>"
        """
        new_context = f"{self.context}:{child_context}" if self.context else child_context
        return Logger(new_context)

    def _format_message(self, level: str, message: str, color: str) -> str:
        """
        Output format: [TIMESTAMP] [LEVEL] [context] message
        Example: [2024-01-31T10:30:00] [INFO] [Agent] Run finished
        """
        timestamp = datetime.now().isoformat(timespec="seconds")
        context_str = f"[{self.context}] " if self.context else ""

        if not _use_color():
            return f"[{timestamp}] [{level}] {context_str}{message}"

        return (
            f"{Colors.DIM}[{timestamp}]{Colors.RESET} "
            f"{color}[{level}]{Colors.RESET} "
            f"{context_str}{message}"
        )

    def _log(
        self,
        level: LogLevel,
        level_name: str,
        color: str,
        message: str,
        data: dict[str, Any] | None = None
    ) -> None:
        if level < _min_level:
            return

        formatted = self._format_message(level_name, message, color)

        # Warnings and errors go to stderr so they never mix with chat output
        stream = sys.stderr if level >= LogLevel.WARNING else sys.stdout
        print(formatted, file=stream)

        if data:
            data_str = json.dumps(data, indent=2, default=str)
            if _use_color():
                data_str = f"{Colors.DIM}{data_str}{Colors.RESET}"
            print(data_str, file=stream)

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log a debug message. Only shown when LOG_LEVEL=debug."""
        self._log(LogLevel.DEBUG, "DEBUG", Colors.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, "INFO", Colors.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, "WARN", Colors.WARNING, message, data)

    def error(self, message: str, error: BaseException | None = None) -> None:
        """
        Log an error message.

        Args:
            message: The error message
            error: Optional exception to include details from
        """
        data = None
        if error:
            data = {
                "error_type": type(error).__name__,
                "error_message": str(error),
            }
        self._log(LogLevel.ERROR, "ERROR", Colors.ERROR, message, data)


# Default logger instance for general use
logger = Logger("OllamaAgent")
