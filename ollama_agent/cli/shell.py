"""
Chat Shell
==========

Terminal front end for the agent.

Two modes:
- ask(): run once on a single question and print the whole conversation
- run(): interactive chat; each line is a new user message, the conversation
  carries over between lines, "exit" or "quit" ends the session

Display only: the shell extracts the final assistant message and any new
tool results from each run's history; all decisions stay in the agent.
"""

import asyncio

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

from ollama_agent.agent import AgentRunner, Message, final_answer
from ollama_agent.utils.logger import Logger

logger = Logger("Shell")

EXIT_COMMANDS = ("exit", "quit")

THEME = Theme({
    "system": "grey50",
    "user": "bold white",
    "assistant": "bold cyan",
    "tool": "yellow",
    "error": "bold red",
    "muted": "grey70",
})


def format_role(message: Message) -> str:
    """Header for a message, e.g. "TOOL (calculator)"."""
    label = message.role.upper()
    return f"{label} ({message.name})" if message.name else label


def new_messages(seed: list[Message], history: list[Message]) -> list[Message]:
    """Messages a run appended after its seed (skipping an injected system prompt)."""
    injected = bool(history) and history[0].role == "system" and seed[0].role != "system"
    return history[len(seed) + int(injected):]


class ChatShell:
    """
    Interactive chat around an agent runner.

    Example:
        shell = ChatShell(create_agent())
        await shell.run()
    """

    def __init__(self, agent: AgentRunner, console: Console | None = None):
        self.agent = agent
        self.console = console or Console(theme=THEME, highlight=False)
        # Carried between lines: the previous run's full history
        self.history: list[Message] = []

    def print_message(self, message: Message) -> None:
        self.console.print(
            f"\n[{message.role}]{escape(format_role(message))}:[/{message.role}] "
            f"{escape(message.content)}"
        )

    async def ask(self, question: str) -> list[Message]:
        """
        Single-question mode: run once and print the conversation.

        Returns:
            The run's final history
        """
        state = await self.agent.run([Message(role="user", content=question)])

        self.console.print("\n[muted]=== Conversation ===[/muted]")
        for message in state.history:
            self.print_message(message)
        self.console.print("\n[muted]===================[/muted]")

        return state.history

    async def handle_line(self, line: str) -> bool:
        """
        Process one line of interactive input.

        Returns:
            False when the user asked to leave, True otherwise
        """
        text = line.strip()
        if text.lower() in EXIT_COMMANDS:
            self.console.print("Goodbye!")
            return False
        if not text:
            return True

        seed = self.history + [Message(role="user", content=text)]

        try:
            with self.console.status("Assistant is thinking..."):
                state = await self.agent.run(seed)
        except Exception as e:
            logger.error("Agent run failed", e)
            self.console.print(f"[error]Error:[/error] {escape(str(e))}")
            return True

        added = new_messages(seed, state.history)
        for message in added:
            if message.role == "tool":
                self.print_message(message)

        answer = final_answer(added)
        if answer is not None:
            self.console.print(f"\n[assistant]Assistant:[/assistant] {escape(answer.content)}\n")

        self.history = state.history
        return True

    async def run(self) -> None:
        """Read lines until exit/quit, end of input or Ctrl+C."""
        self.console.print("\n[bold]===== Ollama Agent Terminal =====[/bold]")
        self.console.print("Type your message and press Enter. Type 'exit' to quit.")

        while True:
            try:
                line = await asyncio.to_thread(self.console.input, "[user]You:[/user] ")
            except (EOFError, KeyboardInterrupt):
                self.console.print("\nGoodbye!")
                return

            if not await self.handle_line(line):
                return
