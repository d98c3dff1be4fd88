"""
CODEWRIGHT Tools

Each tool is:
  - A ToolId from the closed vocabulary
  - A parameter spec rendered into the system prompt
  - An execute() handler run against the working tree
"""

from codewright.tools.base import (
    READ_ONLY_TOOL_IDS,
    TERMINAL_TOOL_IDS,
    Action,
    ActionResult,
    ReferencedFile,
    Tool,
    ToolExecutionContext,
    ToolExecutionResult,
    ToolId,
    ToolParam,
)
from codewright.tools.registry import (
    ToolRegistry,
    default_registry,
    execute_tool,
    get_tool_execution_log,
)

__all__ = [
    "READ_ONLY_TOOL_IDS",
    "TERMINAL_TOOL_IDS",
    "Action",
    "ActionResult",
    "ReferencedFile",
    "Tool",
    "ToolExecutionContext",
    "ToolExecutionResult",
    "ToolId",
    "ToolParam",
    "ToolRegistry",
    "default_registry",
    "execute_tool",
    "get_tool_execution_log",
]
