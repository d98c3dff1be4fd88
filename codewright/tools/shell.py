"""
Shell, conversation and completion tools.

Commands run through `sh -c` inside the working directory with a
timeout from config. Substrings listed in `blocked_patterns` are refused
before anything is spawned. Follow-up questions are only asked on an
interactive terminal outside CI.
"""

from __future__ import annotations

import os
import subprocess
import sys

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from codewright.errors import ToolError
from codewright.tools.base import (
    Tool,
    ToolExecutionContext,
    ToolExecutionResult,
    ToolId,
    ToolParam,
)


def _check_blocked(context: ToolExecutionContext, command: str) -> None:
    for pattern in context.config.blocked_patterns:
        if pattern and pattern in command:
            raise ToolError(f"Command blocked by policy (matched '{pattern}'): {command}")


def _run(context: ToolExecutionContext, command: str) -> subprocess.CompletedProcess:
    _check_blocked(context, command)
    timeout = context.config.limits.command_timeout
    try:
        return subprocess.run(
            ["sh", "-c", command],
            cwd=context.working_dir,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise ToolError(f"Command timed out after {timeout}s: {command}")


class ExecuteCommandTool(Tool):
    tool_id = ToolId.EXECUTE_COMMAND
    description = "Executes a shell command that does not mutate the file system."
    params = {
        "command": ToolParam(description="The shell command to execute"),
    }

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        command = args.get("command") or args.get("content")
        if not command:
            raise ToolError("Command is required")

        logger.info(f"[TOOL] $ {command}")
        proc = _run(context, command)

        output = ""
        if proc.stderr:
            output += f"Error: {proc.stderr}\n"
        if proc.stdout:
            output += proc.stdout

        if proc.returncode != 0:
            return ToolExecutionResult(
                result=f"{output}Command failed with exit code {proc.returncode}",
                success=False,
            )
        return ToolExecutionResult(
            result=f"Command '{command}' successfully executed.\nOutput:\n{output}",
        )


class AttemptCompletionTool(Tool):
    tool_id = ToolId.ATTEMPT_COMPLETION
    description = (
        "Once the task is complete, present the result to the user. "
        "Optionally provide a command that demonstrates the result."
    )
    params = {
        "result": ToolParam(description="The final result of the task"),
        "command": ToolParam(
            description="A CLI command that shows a live demo of the result",
            optional=True,
        ),
    }
    example = """
<attempt_completion>
<result>The task is complete.</result>
</attempt_completion>
"""

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        result = args.get("result") or args.get("content")
        if not result:
            raise ToolError("Result is required")

        command = args.get("command")
        if command:
            proc = _run(context, command)
            if proc.returncode != 0:
                return ToolExecutionResult(
                    result=(
                        f"Command '{command}' failed with exit code {proc.returncode}.\n"
                        f"Error: {proc.stderr}"
                    ),
                    success=False,
                )
        return ToolExecutionResult(result=result)


class StopTool(Tool):
    tool_id = ToolId.STOP
    description = "Stop the agent."
    params = {
        "message": ToolParam(
            description="Message to display when stopping",
            optional=True,
        ),
    }

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        return ToolExecutionResult(result=args.get("message") or args.get("content") or "")


def _is_interactive() -> bool:
    return sys.stdin.isatty() and os.environ.get("CI") != "true"


class AskFollowupQuestionTool(Tool):
    tool_id = ToolId.ASK_FOLLOWUP_QUESTION
    description = (
        "Ask the user a question to gather additional information needed to complete the task. "
        "Use this when you encounter ambiguities, need clarification, or require more details."
    )
    params = {
        "question": ToolParam(description="A clear, specific question for the user"),
    }
    example = """
<ask_followup_question>
<question>What is the path to the frontend-config.json file?</question>
</ask_followup_question>
"""

    def __init__(self, console: Console | None = None, interactive: bool | None = None):
        self.console = console or Console()
        self.interactive = interactive

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        question = args.get("question") or args.get("content")
        if not question:
            raise ToolError("Question is required")

        interactive = _is_interactive() if self.interactive is None else self.interactive
        if not interactive:
            return ToolExecutionResult(
                result="Not running in a TTY or CI environment, skipping followup question.",
            )

        self.console.print(f"[yellow]Followup question:[/]\n{escape(question)}")
        self.console.print("[dim]Please input additional information. Enter an empty line to submit.[/]")

        lines: list[str] = []
        while True:
            line = Prompt.ask(">", default="", show_default=False, console=self.console)
            if not line.strip():
                break
            lines.append(line)

        return ToolExecutionResult(result="User answered: " + "\n".join(lines))
