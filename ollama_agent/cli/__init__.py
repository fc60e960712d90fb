"""Terminal chat shell."""

from ollama_agent.cli.shell import ChatShell

__all__ = ["ChatShell"]
