"""
CODEWRIGHT Assistant Message Parser

Turns one raw LLM completion into an ordered list of blocks:
narration the user should see (PlainBlock) and validated tool
invocations the agent should execute (ActionBlock).

Total and deterministic: malformed or unknown tags degrade to plain text.
"""

from __future__ import annotations

from typing import Collection, Literal, Union

from pydantic import BaseModel, ConfigDict

from codewright.scanner import TagRun, extract_params, scan, strip_thinking
from codewright.tools.base import Action, ToolId


class PlainBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["plain"] = "plain"
    content: str


class ActionBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["action"] = "action"
    action: Action


MessageBlock = Union[PlainBlock, ActionBlock]


def parse_assistant_message(
    message: str,
    tool_ids: Collection[str] | None = None,
) -> list[MessageBlock]:
    """Parse a completion into plain and action blocks.

    Args:
        message: The raw completion text.
        tool_ids: Tag names to recognise as tools. Defaults to every ToolId.

    Returns:
        list[MessageBlock]: Never empty. An empty message yields a single
            empty PlainBlock.
    """
    if not message:
        return [PlainBlock(content="")]

    known = {t.value for t in ToolId}
    # Names outside ToolId never open a tag, so their bodies are still scanned.
    names = known if tool_ids is None else known.intersection(tool_ids)
    blocks: list[MessageBlock] = []
    pending: list[str] = []

    for segment in scan(strip_thinking(message), names):
        if isinstance(segment, TagRun):
            if pending:
                blocks.append(PlainBlock(content="".join(pending)))
                pending = []
            blocks.append(ActionBlock(action=_to_action(segment)))
        else:
            pending.append(segment.text)

    if pending:
        blocks.append(PlainBlock(content="".join(pending)))

    return blocks or [PlainBlock(content="")]


def _to_action(tag: TagRun) -> Action:
    return Action(tool_id=ToolId(tag.name), params=extract_params(tag.body))
