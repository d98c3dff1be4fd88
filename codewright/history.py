from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel, Field

from codewright.tools.base import ActionResult


class HistoryItem(BaseModel):
    """One entry in the agent's working memory."""
    type: Literal["user_prompt", "agent_response", "action_result"]
    content: str


class AgentHistory(BaseModel):
    """Ordered record of a task run, renderable as prompt text."""
    items: list[HistoryItem] = Field(default_factory=list)

    def add_user_prompt(self, prompt: str) -> None:
        self.items.append(HistoryItem(type="user_prompt", content=prompt))

    def add_agent_response(self, response: str) -> None:
        self.items.append(HistoryItem(type="agent_response", content=response))

    def add_action_result(self, action_result: ActionResult) -> None:
        self.items.append(HistoryItem(type="action_result", content=action_result.result))

    def to_prompt_string(self) -> str:
        return "\n------\n".join(
            f"{item.type}: {json.dumps(item.content, ensure_ascii=False)}" for item in self.items
        )

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)
