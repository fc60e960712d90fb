"""
Ollama Agent - Main Entry Point
===============================

Loads configuration, builds the agent and starts one of the front ends:

    ollama-agent                     interactive chat (default)
    ollama-agent chat                interactive chat
    ollama-agent ask "What is 2+2?"  single question, prints the conversation
    ollama-agent serve               HTTP endpoint (POST /mcp)

Run with:
    python -m ollama_agent.main [command]
"""

import argparse
import asyncio
import sys

from ollama_agent.utils.config import DRIVERS, get_config
from ollama_agent.utils.logger import Logger, set_level

main_logger = Logger("Main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-agent",
        description="Tool-using chat agent backed by an Ollama model."
    )
    parser.add_argument(
        "--driver",
        choices=DRIVERS,
        help="Execution driver (overrides AGENT_DRIVER)"
    )

    commands = parser.add_subparsers(dest="command")
    commands.add_parser("chat", help="Interactive chat in the terminal")
    ask = commands.add_parser("ask", help="Answer a single question and exit")
    ask.add_argument("question", nargs="?", default="What is 2 + 2?")
    commands.add_parser("serve", help="Start the HTTP endpoint")

    return parser


async def main(argv: list[str] | None = None) -> int:
    """
    Async entry point.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    command = args.command or "chat"

    try:
        config = get_config()
    except ValueError as e:
        main_logger.error("Invalid configuration", e)
        return 2

    set_level(config.log_level)

    from ollama_agent.agent import create_agent
    agent = create_agent(config, driver=args.driver)

    if command == "serve":
        from ollama_agent.server import create_app, serve
        await serve(create_app(agent), config.server)
        return 0

    from ollama_agent.cli import ChatShell
    shell = ChatShell(agent)

    if command == "ask":
        try:
            await shell.ask(args.question)
        except Exception as e:
            main_logger.error("Error executing agent", e)
            return 1
        return 0

    await shell.run()
    return 0


def run():
    """
    Synchronous entry point.

    This is called when running the `ollama-agent` command.
    """
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
