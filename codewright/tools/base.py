"""
CODEWRIGHT Tool Contracts

Tool ids form a closed enum. Each tool declares its parameters so the
agent can describe it in the system prompt, and executes against a
ToolExecutionContext that carries the working directory and config.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from codewright.config_loader import CodewrightConfig


class ToolId(str, Enum):
    SEARCH_FILES = "search_files"
    CREATE_FILE = "create_file"
    EDIT_FILE = "edit_file"
    LIST_FILES = "list_files"
    READ_FILE = "read_file"
    EXECUTE_COMMAND = "execute_command"
    ATTEMPT_COMPLETION = "attempt_completion"
    STOP = "stop"
    WEB_FETCH = "web_fetch"
    ASK_FOLLOWUP_QUESTION = "ask_followup_question"


READ_ONLY_TOOL_IDS: frozenset[ToolId] = frozenset({
    ToolId.READ_FILE,
    ToolId.LIST_FILES,
    ToolId.SEARCH_FILES,
    ToolId.WEB_FETCH,
})

TERMINAL_TOOL_IDS: frozenset[ToolId] = frozenset({
    ToolId.ATTEMPT_COMPLETION,
    ToolId.STOP,
})


class Action(BaseModel):
    """A validated tool invocation parsed from an assistant message."""
    model_config = ConfigDict(frozen=True)

    tool_id: ToolId
    params: dict[str, str] = Field(default_factory=dict)


class ToolParam(BaseModel):
    type: str = "string"
    description: str
    optional: bool = False


class ReferencedFile(BaseModel):
    """File content a tool touched; surfaced to the model on the next turn."""
    path: str
    content: str


class ToolExecutionResult(BaseModel):
    result: str
    success: bool = True
    added_files: list[ReferencedFile] = Field(default_factory=list)


class ActionResult(BaseModel):
    action: Action
    result: str
    success: bool = True


class ToolExecutionContext(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    working_dir: Path
    config: CodewrightConfig = Field(default_factory=CodewrightConfig)

    def resolve(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.working_dir / candidate


class Tool(ABC):
    """
    Base class for all tools.

    Subclasses define:
      - tool_id: ToolId
      - description: str shown to the model
      - params: dict[str, ToolParam]
      - execute(): does the work, raises ToolError on failure
    """

    tool_id: ClassVar[ToolId]
    description: ClassVar[str] = ""
    params: ClassVar[dict[str, ToolParam]] = {}
    example: ClassVar[str] = ""

    @abstractmethod
    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        ...

    def explain(self) -> str:
        """Render the tool description block for the system prompt."""
        lines = [
            f"{self.tool_id.value}",
            f"Description: {self.description}",
            "Params:",
        ]
        for name, param in self.params.items():
            suffix = " (optional)" if param.optional else ""
            lines.append(f" - {name}: {param.type}{suffix} - {param.description}")
        if self.example:
            lines.append(f"Example:\n{self.example.strip()}")
        return "\n".join(lines)
