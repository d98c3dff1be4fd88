"""
CODEWRIGHT Similarity Patch Engine — The Forgiving Engine

LLM-written diffs often carry wrong or missing line numbers. This engine
ignores the numbers in "@@ ... @@" headers and places each change where
the surrounding text matches best.

  1. Split the diff into hunks on "@@" lines
  2. Split each hunk into segments: a run of -/+ lines plus the context
     line(s) immediately around it
  3. Slide the segment's search block (before + removed + after) over the
     current text and pick the offset with the most positional matches
  4. Delete the removed lines there, insert the added lines, and re-add
     trailing context only if it is not already present

Similarity is a positional equality count, NOT an edit distance. Ties go
to the lowest offset. Bad matches never raise; only a diff without any
"@@" marker does.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from codewright.errors import ParseError


def split_text_into_lines(text: str) -> list[str]:
    return text.replace("\r\n", "\n").split("\n")


def join_lines_into_text(lines: list[str], newline: str = "\n") -> str:
    return newline.join(lines)


# ---------------------------------------------------------------------------
# Diff model
# ---------------------------------------------------------------------------

@dataclass
class DiffHunk:
    header: str  # "@@ ... @@"
    lines: list[str] = field(default_factory=list)


@dataclass
class UnifiedDiff:
    hunks: list[DiffHunk]


@dataclass(frozen=True)
class HunkSegments:
    minus_lines: list[str]
    plus_lines: list[str]
    context_lines_before: list[str]
    context_lines_after: list[str]

    @property
    def search_block(self) -> list[str]:
        return self.context_lines_before + self.minus_lines + self.context_lines_after


def parse_unified_diff(diff_text: str) -> UnifiedDiff:
    """Parse loose unified diff text. Header numbers are not validated.

    Raises:
        ParseError: If there is no "@@" line or no hunk could be extracted.
    """
    lines = split_text_into_lines(diff_text)

    if not any(line.startswith("@@") for line in lines):
        raise ParseError("Invalid patch format: No hunk headers found")

    hunks = extract_hunks(lines)
    if not hunks:
        raise ParseError("Invalid patch format: No hunks found")
    return UnifiedDiff(hunks=hunks)


def extract_hunks(diff_lines: list[str]) -> list[DiffHunk]:
    """Group lines into hunks on '@@' headers; lines before the first header are dropped."""
    hunks: list[DiffHunk] = []
    current: DiffHunk | None = None

    for line in diff_lines:
        if line.startswith("@@"):
            if current is not None:
                hunks.append(current)
            current = DiffHunk(header=line)
        elif current is not None:
            current.lines.append(line)

    if current is not None:
        hunks.append(current)
    return hunks


def _is_change(line: str | None) -> bool:
    return line is not None and line.startswith(("-", "+"))


def split_hunk_into_segments(hunk: DiffHunk) -> list[HunkSegments]:
    """Break a hunk into change runs bracketed by their adjacent context.

    Any line that is not '-' or '+' counts as context (its first character
    is dropped), so blank lines missing the leading space still work.
    """
    segments: list[HunkSegments] = []
    minus: list[str] = []
    plus: list[str] = []
    before: list[str] = []
    after: list[str] = []

    body = [line for line in hunk.lines if not line.startswith("\\")]

    for i, line in enumerate(body):
        next_line = body[i + 1] if i + 1 < len(body) else None

        if line.startswith("-"):
            minus.append(line[1:])
        elif line.startswith("+"):
            plus.append(line[1:])
        else:
            content = line[1:]
            if minus or plus:
                segments.append(HunkSegments(
                    minus_lines=minus,
                    plus_lines=plus,
                    context_lines_before=before,
                    context_lines_after=[content],
                ))
                minus, plus = [], []
                before, after = [content], []
            elif _is_change(next_line):
                before.append(content)
            else:
                after.append(content)

    if minus or plus:
        segments.append(HunkSegments(
            minus_lines=minus,
            plus_lines=plus,
            context_lines_before=before,
            context_lines_after=after,
        ))

    return segments


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def compute_similarity(block_a: list[str], block_b: list[str]) -> int:
    """Count positions (up to the shorter length) where the lines are equal."""
    return sum(1 for a, b in zip(block_a, block_b) if a == b)


def find_most_similar_block_index(original_lines: list[str], target_block: list[str]) -> int:
    """Start offset of the window most similar to target_block (first wins ties)."""
    if not target_block or not original_lines:
        return 0

    width = len(target_block)
    best_score = -1
    best_index = 0
    for start in range(len(original_lines) - width + 1):
        score = compute_similarity(original_lines[start:start + width], target_block)
        if score > best_score:
            best_score = score
            best_index = start
    return best_index


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

def _restore_context_after(lines: list[str], index: int, context_after: list[str]) -> None:
    """Insert trailing context at `index` unless the text there already matches it."""
    if not context_after:
        return
    existing = lines[index:index + len(context_after)]
    if compute_similarity(existing, context_after) == 0:
        lines[index:index] = context_after


def _apply_segment(lines: list[str], segment: HunkSegments) -> None:
    search = segment.search_block

    if not search:
        # Pure addition with no anchor: append at end of text.
        lines[len(lines):] = segment.plus_lines
        return

    match_index = find_most_similar_block_index(lines, search)
    at = match_index + len(segment.context_lines_before)

    if segment.minus_lines:
        target = lines[at:at + len(segment.minus_lines)]
        if compute_similarity(target, segment.minus_lines) == 0:
            return
        lines[at:at + len(segment.minus_lines)] = segment.plus_lines
        _restore_context_after(lines, at + len(segment.plus_lines), segment.context_lines_after)
    elif segment.plus_lines:
        lines[at:at] = segment.plus_lines
        _restore_context_after(lines, at + len(segment.plus_lines), segment.context_lines_after)


def apply_patch_with_similarity(original_text: str, patch_text: str) -> str:
    """Apply a loose unified diff by content similarity.

    CRLF input produces CRLF output; everything else is joined with '\\n'.

    Raises:
        ParseError: If patch_text has no usable hunk.
    """
    newline = "\r\n" if "\r\n" in original_text else "\n"
    lines = split_text_into_lines(original_text)
    diff = parse_unified_diff(patch_text)

    for hunk in diff.hunks:
        for segment in split_hunk_into_segments(hunk):
            _apply_segment(lines, segment)

    return join_lines_into_text(lines, newline)
