"""
CODEWRIGHT Router — Vendor-Agnostic Model Abstraction

Routes completions through LiteLLM so the agent never knows which
vendor backs it. Handles budget tracking, retries, and structured
logging. The agent consumes raw text completions only.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import litellm
from loguru import logger
from pydantic import BaseModel
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from codewright.config_loader import CodewrightConfig
from codewright.errors import BudgetExceededError


# ---------------------------------------------------------------------------
# Usage Tracking
# ---------------------------------------------------------------------------

@dataclass
class UsageRecord:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    estimated_cost: float = 0.0
    call_count: int = 0


@dataclass
class BudgetTracker:
    """Tracks token + dollar spend per task."""
    max_tokens: int = 200_000
    max_dollars: float = 5.0
    usage: UsageRecord = field(default_factory=UsageRecord)

    @property
    def tokens_remaining(self) -> int:
        return max(0, self.max_tokens - self.usage.total_tokens)

    @property
    def dollars_remaining(self) -> float:
        return max(0.0, self.max_dollars - self.usage.estimated_cost)

    @property
    def budget_exceeded(self) -> bool:
        return self.usage.total_tokens >= self.max_tokens or self.usage.estimated_cost >= self.max_dollars

    def record(self, response: Any) -> None:
        """Record token usage and estimated cost from a LiteLLM response."""
        usage = getattr(response, "usage", None)
        if usage:
            self.usage.prompt_tokens += getattr(usage, "prompt_tokens", 0) or 0
            self.usage.completion_tokens += getattr(usage, "completion_tokens", 0) or 0
            self.usage.total_tokens += getattr(usage, "total_tokens", 0) or 0

        try:
            self.usage.estimated_cost += litellm.completion_cost(completion_response=response)
        except Exception as e:
            # Unknown pricing for custom / local models.
            logger.debug(f"[ROUTER] cost unavailable: {e}")

        self.usage.call_count += 1

    def summary(self) -> dict:
        return {
            "total_tokens": self.usage.total_tokens,
            "estimated_cost": round(self.usage.estimated_cost, 4),
            "call_count": self.usage.call_count,
            "tokens_remaining": self.tokens_remaining,
            "dollars_remaining": round(self.dollars_remaining, 4),
        }


# ---------------------------------------------------------------------------
# Model capability helpers
# ---------------------------------------------------------------------------

def _is_o_series_model(model: str) -> bool:
    """OpenAI o-series reasoning models don't support temperature."""
    normalized = model.lower().replace("openai/", "")
    return normalized.startswith(("o1", "o3", "o4", "gpt-5"))


def _build_kwargs(
    model: str,
    messages: list[dict[str, str]],
    temperature: float,
    max_tokens: int,
) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
    }
    if not _is_o_series_model(model):
        kwargs["temperature"] = temperature
    return kwargs


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

class RouterResponse(BaseModel):
    content: str
    model: str
    tokens_used: int = 0
    cost: float = 0.0
    latency_ms: int = 0


class Router:
    """
    Vendor-agnostic model router.

    The agent calls `router.complete(system_prompt, messages)` and gets back
    the raw text of one completion.
    """

    def __init__(self, config: CodewrightConfig):
        self.config = config
        self.model = config.routing.agent
        self.budget = BudgetTracker(
            max_tokens=config.limits.max_tokens_per_task,
            max_dollars=config.limits.max_dollars_per_task,
        )
        litellm.suppress_debug_info = True

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        retry=retry_if_not_exception_type(BudgetExceededError),
        reraise=True,
    )
    def complete(
        self,
        system_prompt: str,
        messages: list[dict[str, str]],
        temperature: float = 0.0,
    ) -> RouterResponse:
        """Send one completion request through LiteLLM.

        Args:
            system_prompt: Prepended as the system message.
            messages: Chat history [{"role": ..., "content": ...}].
            temperature: Sampling temperature, dropped for models that reject it.

        Raises:
            BudgetExceededError: If the token or dollar budget is spent.
        """
        if self.budget.budget_exceeded:
            raise BudgetExceededError(f"Budget exceeded: {self.budget.summary()}")

        start = time.monotonic()
        full = [{"role": "system", "content": system_prompt}, *messages]
        logger.debug(f"[ROUTER] → {self.model} ({len(full)} messages)")

        kwargs = _build_kwargs(self.model, full, temperature, self.config.limits.max_completion_tokens)
        response = litellm.completion(**kwargs)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        self.budget.record(response)
        content = response.choices[0].message.content or ""

        logger.debug(
            f"[ROUTER] complete — "
            f"{self.budget.usage.total_tokens} tokens, "
            f"${self.budget.usage.estimated_cost:.4f}, "
            f"{elapsed_ms}ms"
        )

        return RouterResponse(
            content=content,
            model=self.model,
            tokens_used=getattr(response.usage, "total_tokens", 0) or 0,
            cost=self.budget.usage.estimated_cost,
            latency_ms=elapsed_ms,
        )
