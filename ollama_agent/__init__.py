"""
Ollama Agent - Tool-Using Chat Agent
====================================

A conversational agent that asks an Ollama-served model for an answer, runs
the tools the model requests, feeds the results back, and repeats until the
model answers without requesting tools.

This package provides:
- Agent loop with graph and plain-loop drivers
- Model client for Ollama's OpenAI-compatible API
- Tool registry with calculator and weather tools
- HTTP endpoint and terminal chat shell
"""

__version__ = "1.0.0"
