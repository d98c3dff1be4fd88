"""
CODEWRIGHT patch engines.

  - unified:    strict Patch/Hunk model, parser and positional applier
  - generator:  lockstep diff → Patch
  - similarity: content-located fuzzy applier for LLM-written diffs
"""

from codewright.patch.generator import create_patch
from codewright.patch.similarity import (
    HunkSegments,
    apply_patch_with_similarity,
    compute_similarity,
    extract_hunks,
    find_most_similar_block_index,
    join_lines_into_text,
    parse_unified_diff,
    split_hunk_into_segments,
    split_text_into_lines,
)
from codewright.patch.unified import (
    Hunk,
    Patch,
    apply_patch,
    check_patch_format,
    create_patch_from_diff,
    load_patch,
    parse_hunk,
)

__all__ = [
    "Hunk",
    "HunkSegments",
    "Patch",
    "apply_patch",
    "apply_patch_with_similarity",
    "check_patch_format",
    "compute_similarity",
    "create_patch",
    "create_patch_from_diff",
    "extract_hunks",
    "find_most_similar_block_index",
    "join_lines_into_text",
    "load_patch",
    "parse_hunk",
    "parse_unified_diff",
    "split_hunk_into_segments",
    "split_text_into_lines",
]
