"""
CODEWRIGHT Agent — The Loop

Operates in a plan → parse → execute → observe loop:
  1. Send the conversation to the model through the Router
  2. Parse the completion into plain and action blocks
  3. Execute actions through the tool registry
  4. Feed results back and repeat until a terminal tool runs,
     the model stops acting, or the iteration cap is hit

It never edits files itself. Tools do.
"""

from __future__ import annotations

import platform
from pathlib import Path
from typing import Literal, Protocol

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from codewright.config_loader import CodewrightConfig
from codewright.console import AgentConsole, NullAgentConsole
from codewright.event_bus import EventBus
from codewright.history import AgentHistory
from codewright.message import ActionBlock, MessageBlock, PlainBlock, parse_assistant_message
from codewright.router import RouterResponse
from codewright.tools import (
    READ_ONLY_TOOL_IDS,
    TERMINAL_TOOL_IDS,
    ActionResult,
    ToolExecutionContext,
    ToolId,
    ToolRegistry,
    default_registry,
    execute_tool,
    get_tool_execution_log,
)

EVALUATE_PROMPT = (
    "Please evaluate the task content and the tool's execution results. "
    "Only consider the next action if it is necessary to continue the task."
)

SYSTEM_PROMPT = """You are a software engineering agent working in a local repository.

Work step by step. Use exactly one tool tag per step unless every tool you use is read-only
({read_only}). Tool calls are XML-style tags whose children are parameters:

<tool_name>
<param_name>value</param_name>
</tool_name>

You may think inside <thinking>...</thinking> before acting.
When the task is complete, use attempt_completion.

{tools}

=== ENVIRONMENT ===
Working directory: {working_dir}
Platform: {platform}
"""


class CompletionModel(Protocol):
    def complete(self, system_prompt: str, messages: list[dict[str, str]]) -> RouterResponse: ...


class PlanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    blocks: list[MessageBlock]
    response: str


class TaskResult(BaseModel):
    status: Literal["completed", "stopped", "no_action", "max_iterations"]
    iterations: int
    final_result: str = ""
    action_results: list[ActionResult] = Field(default_factory=list)
    history: AgentHistory = Field(default_factory=AgentHistory)


class Agent:
    def __init__(
        self,
        router: CompletionModel,
        config: CodewrightConfig | None = None,
        working_dir: Path | None = None,
        registry: ToolRegistry | None = None,
        console: AgentConsole | None = None,
        event_bus: EventBus | None = None,
        task_id: str = "task",
    ):
        self.router = router
        self.config = config or CodewrightConfig()
        self.working_dir = (working_dir or Path.cwd()).resolve()
        self.registry = registry or default_registry()
        self.console = console or NullAgentConsole()
        self.events = event_bus or EventBus()
        self.task_id = task_id

        self.messages: list[dict[str, str]] = []
        self.history = AgentHistory()
        self.referenced_files: dict[str, str] = {}
        self.context = ToolExecutionContext(working_dir=self.working_dir, config=self.config)

    # ------------------------------------------------------------------ #
    # Single turn
    # ------------------------------------------------------------------ #

    def plan(self, prompt: str) -> PlanResult:
        """Send `prompt` as the next user turn and parse the reply."""
        self.messages.append({"role": "user", "content": prompt})
        self.history.add_user_prompt(prompt)

        response = self.router.complete(self.system_prompt(), self.messages)
        self.messages.append({"role": "assistant", "content": response.content})
        self.history.add_agent_response(response.content)

        blocks = parse_assistant_message(response.content, self.registry.tool_ids)
        self.events.emit("plan_parsed", self.task_id, {
            "blocks": len(blocks),
            "actions": [b.action.tool_id.value for b in blocks if isinstance(b, ActionBlock)],
        })
        return PlanResult(blocks=blocks, response=response.content)

    def system_prompt(self) -> str:
        prompt = SYSTEM_PROMPT.format(
            read_only=", ".join(sorted(t.value for t in READ_ONLY_TOOL_IDS)),
            tools=self.registry.describe(),
            working_dir=self.working_dir,
            platform=platform.system(),
        )
        if self.referenced_files:
            files = "\n".join(
                f"--- {path} ---\n{content}" for path, content in self.referenced_files.items()
            )
            prompt += f"\n=== REFERENCED FILES ===\n{files}\n=== END OF REFERENCED FILES ===\n"
        return prompt

    # ------------------------------------------------------------------ #
    # Task loop
    # ------------------------------------------------------------------ #

    def start_task(self, task: str, max_iterations: int | None = None) -> TaskResult:
        """Run the agent loop for one natural-language task."""
        limit = max_iterations or self.config.limits.max_iterations
        prompt = f"<task>\n{task}\n</task>"
        all_results: list[ActionResult] = []
        iterations = 0

        self.events.emit("task_started", self.task_id, {"task": task, "max_iterations": limit})

        while True:
            if iterations >= limit:
                logger.warning(f"[AGENT] Max iterations ({limit}) reached")
                self.console.warning(f"Max iterations ({limit}) reached")
                return self._finish("max_iterations", iterations, all_results)
            iterations += 1
            logger.debug(f"[AGENT] Iteration {iterations}/{limit}")

            plan = self.plan(prompt)

            mutating = [
                b for b in plan.blocks
                if isinstance(b, ActionBlock) and b.action.tool_id not in READ_ONLY_TOOL_IDS
            ]
            if len(mutating) > 1:
                logger.warning("[AGENT] Multiple mutating tool calls in one turn, asking again")
                read_only = ", ".join(sorted(t.value for t in READ_ONLY_TOOL_IDS))
                prompt = (
                    f"Only {read_only} tools can be used simultaneously. "
                    "Other tools must be used one at a time. "
                    "Please review the task and recent messages again."
                )
                continue

            turn_results, terminal = self._run_blocks(plan.blocks)
            all_results.extend(turn_results)

            if terminal is not None:
                status = "completed" if terminal.action.tool_id == ToolId.ATTEMPT_COMPLETION else "stopped"
                return self._finish(status, iterations, all_results, terminal.result)

            if not turn_results:
                logger.warning("[AGENT] No action found. Agent will stop.")
                return self._finish("no_action", iterations, all_results)

            prompt = self._render_results(turn_results) + "\n\n" + EVALUATE_PROMPT

    def _run_blocks(self, blocks: list[MessageBlock]) -> tuple[list[ActionResult], ActionResult | None]:
        results: list[ActionResult] = []
        for block in blocks:
            if isinstance(block, PlainBlock):
                self.console.assistant(block.content)
                continue

            action = block.action
            self.console.tool(get_tool_execution_log(action))
            outcome = execute_tool(self.context, self.registry, action)
            for ref in outcome.added_files:
                self.referenced_files[ref.path] = ref.content

            result = ActionResult(action=action, result=outcome.result, success=outcome.success)
            results.append(result)
            self.history.add_action_result(result)
            self.events.emit("tool_executed", self.task_id, {
                "tool": action.tool_id.value,
                "success": outcome.success,
            })

            if action.tool_id in TERMINAL_TOOL_IDS and outcome.success:
                return results, result
        return results, None

    @staticmethod
    def _render_results(results: list[ActionResult]) -> str:
        parts = []
        for r in results:
            status = "succeeded" if r.success else "failed"
            parts.append(f"[{r.action.tool_id.value} {status}]\n{r.result}")
        return "\n\n".join(parts)

    def _finish(
        self,
        status: str,
        iterations: int,
        results: list[ActionResult],
        final_result: str = "",
    ) -> TaskResult:
        self.events.emit("task_finished", self.task_id, {"status": status, "iterations": iterations})
        logger.info(f"[AGENT] Task {self.task_id} finished: {status} after {iterations} iteration(s)")
        return TaskResult(
            status=status,
            iterations=iterations,
            final_result=final_result,
            action_results=results,
            history=self.history,
        )
