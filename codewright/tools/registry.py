"""
CODEWRIGHT Tool Registry

Maps ToolId → handler. Registration validates the id once; dispatch is a
plain lookup. execute_tool() is the error boundary between the core and
the agent loop: parse/patch/tool/OS failures come back as failed results
instead of exceptions.
"""

from __future__ import annotations

from loguru import logger

from codewright.errors import ParseError, PatchError, ToolError
from codewright.tools.base import (
    Action,
    Tool,
    ToolExecutionContext,
    ToolExecutionResult,
    ToolId,
)
from codewright.tools.files import (
    CreateFileTool,
    EditFileTool,
    ListFilesTool,
    ReadFileTool,
    SearchFilesTool,
)
from codewright.tools.shell import (
    AskFollowupQuestionTool,
    AttemptCompletionTool,
    ExecuteCommandTool,
    StopTool,
)
from codewright.tools.web import WebFetchTool


class ToolRegistry:
    def __init__(self, tools: list[Tool] | None = None):
        self._tools: dict[ToolId, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        tool_id = ToolId(tool.tool_id)
        if tool_id in self._tools:
            raise ValueError(f"Tool already registered: {tool_id.value}")
        self._tools[tool_id] = tool

    def get(self, tool_id: ToolId) -> Tool:
        tool = self._tools.get(tool_id)
        if tool is None:
            raise ToolError(f"Unknown tool: {tool_id.value}")
        return tool

    @property
    def tool_ids(self) -> set[str]:
        return {t.value for t in self._tools}

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools

    def __iter__(self):
        return iter(self._tools.values())

    def describe(self) -> str:
        """Render the AVAILABLE TOOLS section of the system prompt."""
        body = "\n---\n".join(tool.explain() for tool in self)
        return f"=== AVAILABLE TOOLS ===\n{body}\n=== END OF AVAILABLE TOOLS ==="


def default_registry() -> ToolRegistry:
    return ToolRegistry([
        ReadFileTool(),
        CreateFileTool(),
        EditFileTool(),
        ListFilesTool(),
        SearchFilesTool(),
        ExecuteCommandTool(),
        AttemptCompletionTool(),
        StopTool(),
        WebFetchTool(),
        AskFollowupQuestionTool(),
    ])


def execute_tool(
    context: ToolExecutionContext,
    registry: ToolRegistry,
    action: Action,
) -> ToolExecutionResult:
    """Run an action and convert any failure into a failed result."""
    try:
        tool = registry.get(action.tool_id)
        return tool.execute(context, action.params)
    except ToolError as e:
        logger.warning(f"[TOOL] {action.tool_id.value} failed: {e}")
        return ToolExecutionResult(result=str(e), success=False)
    except (ParseError, PatchError) as e:
        logger.warning(f"[TOOL] {action.tool_id.value} patch rejected: {e}")
        return ToolExecutionResult(result=f"Failed to apply patch: {e}", success=False)
    except OSError as e:
        logger.warning(f"[TOOL] {action.tool_id.value} I/O error: {e}")
        return ToolExecutionResult(
            result=f"Failed to run {action.tool_id.value}: {e}",
            success=False,
        )


def get_tool_execution_log(action: Action) -> str:
    """One-line summary of an action for the console."""
    params = ", ".join(
        f"{key}={value if len(value) <= 60 else value[:57] + '...'}"
        for key, value in action.params.items()
    )
    return f"{action.tool_id.value}({params})"
