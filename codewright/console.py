"""
Agent console output.

StdoutAgentConsole colours each kind of message with rich;
NullAgentConsole swallows everything (tests, batch runs).
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape


class AgentConsole:
    def assistant(self, message: str) -> None: ...
    def tool(self, message: str) -> None: ...
    def user(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...


class NullAgentConsole(AgentConsole):
    pass


class StdoutAgentConsole(AgentConsole):
    def __init__(self, console: Console | None = None, color: bool = True):
        self.console = console or Console(no_color=not color, highlight=False)

    def assistant(self, message: str) -> None:
        if message.strip():
            self.console.print(f"[blue]{escape(message)}[/]")

    def tool(self, message: str) -> None:
        self.console.print(f"[green]🛠  {escape(message)}[/]")

    def user(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/]")

    def warning(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/]")


def create_agent_console(stdout: bool) -> AgentConsole:
    return StdoutAgentConsole() if stdout else NullAgentConsole()
