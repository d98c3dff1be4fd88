"""
Configuration loader for CODEWRIGHT.
Merges defaults with per-repo .codewright/config.yaml overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class RoutingConfig(BaseModel):
    agent: str = "anthropic/claude-sonnet-4-5"


class LimitsConfig(BaseModel):
    max_iterations: int = 10
    max_tokens_per_task: int = 200_000
    max_dollars_per_task: float = 5.0
    command_timeout: int = 120
    fetch_timeout: int = 30
    max_completion_tokens: int = 8192


class EditConfig(BaseModel):
    # similarity: locate hunks by content; strict: trust header line numbers
    strategy: Literal["similarity", "strict"] = "similarity"


class AuditConfig(BaseModel):
    log_file: str | None = ".codewright/logs/events.jsonl"


class CodewrightConfig(BaseModel):
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    edit: EditConfig = Field(default_factory=EditConfig)
    blocked_patterns: list[str] = Field(default_factory=list)
    audit: AuditConfig = Field(default_factory=AuditConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(repo_path: Path | None = None) -> CodewrightConfig:
    """
    Load config by merging:
      1. Built-in defaults (codewright/config.yaml)
      2. Repo-level overrides (<repo>/.codewright/config.yaml)
      3. CODEWRIGHT_MODEL environment override for the agent model
    """
    with open(_DEFAULT_CONFIG_PATH, "r") as f:
        base: dict[str, Any] = yaml.safe_load(f) or {}

    if repo_path:
        repo_config = repo_path / ".codewright" / "config.yaml"
        if repo_config.exists():
            with open(repo_config, "r") as f:
                overrides: dict[str, Any] = yaml.safe_load(f) or {}
            base = _deep_merge(base, overrides)

    model = os.environ.get("CODEWRIGHT_MODEL")
    if model:
        base = _deep_merge(base, {"routing": {"agent": model}})

    return CodewrightConfig(**base)


def validate_api_keys() -> dict[str, bool]:
    """Check which API keys are available."""
    return {
        "ANTHROPIC_API_KEY": bool(os.environ.get("ANTHROPIC_API_KEY")),
        "OPENAI_API_KEY":    bool(os.environ.get("OPENAI_API_KEY")),
        "GEMINI_API_KEY":    bool(os.environ.get("GEMINI_API_KEY")),
    }
