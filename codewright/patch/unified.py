"""
CODEWRIGHT Unified Patch Model — The Strict Engine

Patch / Hunk value objects, hunk-header parsing (with and without line
counts), diff-text → Patch conversion, a structural format check, and a
strictly positional applier.

Hunks are applied in order against the progressively rewritten line array.
Each hunk's old_start is trusted as an absolute line number in that array.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from codewright.errors import ParseError, PatchError

# "@@ -5 +7 @@", "@@ -1,2 +1,3 @@" and mixed forms; section text may follow.
_HUNK_HEADER = re.compile(r"@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_MARKERS = (" ", "-", "+")
_NO_NEWLINE = "\\ No newline at end of file"


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class Hunk(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    old_start: int = Field(ge=0, alias="oldStart")
    old_lines: int = Field(ge=0, alias="oldLines")
    new_start: int = Field(ge=0, alias="newStart")
    new_lines: int = Field(ge=0, alias="newLines")
    header: str
    lines: list[str] = Field(default_factory=list)

    @property
    def produced(self) -> int:
        """Number of output lines this hunk emits (context + additions)."""
        return sum(1 for line in self.lines if line.startswith((" ", "+")))


class Patch(BaseModel):
    model_config = ConfigDict(frozen=True)

    hunks: list[Hunk] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    def to_diff(self) -> str:
        out: list[str] = []
        for hunk in self.hunks:
            out.append(hunk.header)
            out.extend(hunk.lines)
        return "\n".join(out)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_hunk(lines: list[str], i: int) -> tuple[Hunk, int]:
    """Parse the hunk whose header sits at lines[i].

    Returns:
        tuple[Hunk, int]: The hunk and the index of the first line after it.

    Raises:
        ParseError: If lines[i] is not a hunk header.
    """
    header = lines[i]
    match = _HUNK_HEADER.match(header)
    if not match:
        raise ParseError(f"Invalid hunk header: {header}")

    old_start, old_lines, new_start, new_lines = match.groups()

    body: list[str] = []
    j = i + 1
    while j < len(lines):
        line = lines[j]
        if line.startswith(_NO_NEWLINE):
            j += 1
            continue
        if not line.startswith(_MARKERS):
            break
        body.append(line)
        j += 1

    hunk = Hunk(
        old_start=int(old_start),
        old_lines=int(old_lines) if old_lines is not None else 1,
        new_start=int(new_start),
        new_lines=int(new_lines) if new_lines is not None else 1,
        header=header,
        lines=body,
    )
    return hunk, j


def create_patch_from_diff(diff: str) -> Patch:
    """Build a Patch from unified diff text (file headers optional)."""
    lines = [line for line in diff.split("\n") if line]
    i = 0

    while i < len(lines) and lines[i].startswith(("---", "+++")):
        i += 1

    hunks: list[Hunk] = []
    while i < len(lines):
        hunk, i = parse_hunk(lines, i)
        hunks.append(hunk)

    return Patch(hunks=hunks)


def check_patch_format(patch: Patch | Mapping[str, Any]) -> bool:
    """Structural check of a patch object or its JSON mapping.

    Field types and line markers are verified. Line counts are NOT
    recounted against the body.
    """
    if isinstance(patch, Patch):
        patch = patch.model_dump(by_alias=True)
    if not isinstance(patch, Mapping):
        return False

    hunks = patch.get("hunks")
    if not isinstance(hunks, list):
        return False

    return all(_check_hunk(hunk) for hunk in hunks)


def _check_hunk(hunk: Any) -> bool:
    if not isinstance(hunk, Mapping):
        return False
    for key in ("oldStart", "oldLines", "newStart", "newLines"):
        value = hunk.get(key)
        if not isinstance(value, int) or isinstance(value, bool):
            return False
    lines = hunk.get("lines")
    return (
        isinstance(hunk.get("header"), str)
        and isinstance(lines, list)
        and all(isinstance(line, str) and line.startswith(_MARKERS) for line in lines)
    )


def load_patch(text: str) -> Patch:
    """Accept either a JSON-serialised Patch or unified diff text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return create_patch_from_diff(text)

    if check_patch_format(data):
        try:
            return Patch.model_validate(data)
        except ValidationError as e:
            raise ParseError(f"Invalid patch object: {e.error_count()} validation error(s)") from e

    logger.debug("[PATCH] JSON input is not a valid patch object, parsing as diff text")
    return create_patch_from_diff(text)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

def apply_patch(src: str, patch: Patch) -> str:
    """Apply hunks positionally and return the new content.

    Deleted lines are not compared against the source.

    Raises:
        PatchError: If a hunk starts before the end of the previous hunk's
            output, or beyond the end of the current text.
    """
    lines = src.split("\n")
    floor = 0

    for n, hunk in enumerate(patch.hunks, start=1):
        start = max(0, hunk.old_start - 1)
        if start < floor:
            raise PatchError(
                f"Hunk {n} ({hunk.header}) overlaps or precedes the previous hunk"
            )
        if start > len(lines):
            raise PatchError(
                f"Hunk {n} ({hunk.header}) starts past end of text ({len(lines)} lines)"
            )

        rewritten = lines[:start]
        cursor = start
        for line in hunk.lines:
            if line.startswith("+"):
                rewritten.append(line[1:])
            elif line.startswith("-"):
                cursor += 1
            elif line.startswith(" "):
                rewritten.append(line[1:])
                cursor += 1
        rewritten.extend(lines[cursor:])

        floor = start + hunk.produced
        lines = rewritten

    return "\n".join(lines)
