"""
CODEWRIGHT Patch Generator

Produces a Patch that turns `src` into `dst`. This is not a general LCS
diff: both line arrays are walked in lockstep, and a change region runs
until the first index where both sides agree again. The output is
therefore not byte-identical to `diff -u`, but it always round-trips
through apply_patch().
"""

from __future__ import annotations

from dataclasses import dataclass

from codewright.patch.unified import Hunk, Patch

CONTEXT = 1


@dataclass(frozen=True)
class ChangeRegion:
    start: int
    end: int


def find_change_regions(src_lines: list[str], dst_lines: list[str]) -> list[ChangeRegion]:
    """Locate [start, end) index ranges where the two arrays disagree."""
    total = max(len(src_lines), len(dst_lines))
    regions: list[ChangeRegion] = []
    i = 0

    while i < total:
        while i < len(src_lines) and i < len(dst_lines) and src_lines[i] == dst_lines[i]:
            i += 1
        if i >= total:
            break

        end = i + 1
        while end < total and (
            end >= len(src_lines)
            or end >= len(dst_lines)
            or src_lines[end] != dst_lines[end]
        ):
            end += 1

        regions.append(ChangeRegion(i, end))
        i = end

    return regions


def merge_change_regions(regions: list[ChangeRegion]) -> list[ChangeRegion]:
    """Merge a region with its successor when no common line separates them."""
    merged: list[ChangeRegion] = []
    i = 0
    while i < len(regions):
        current = regions[i]
        nxt = regions[i + 1] if i + 1 < len(regions) else None
        if nxt is not None and nxt.start - current.end == 0:
            merged.append(ChangeRegion(current.start, nxt.end))
            i += 2
        else:
            merged.append(current)
            i += 1
    return merged


def _format_header(start: int, old_total: int, new_total: int) -> str:
    if old_total == 1 and new_total == 1:
        return f"@@ -{start} +{start} @@"
    return f"@@ -{start},{old_total} +{start},{new_total} @@"


def create_patch(src: str, dst: str) -> Patch:
    """Compute a Patch with one line of context around each change region."""
    src_lines = src.split("\n")
    dst_lines = dst.split("\n")
    total = max(len(src_lines), len(dst_lines))

    regions = merge_change_regions(find_change_regions(src_lines, dst_lines))

    hunks: list[Hunk] = []
    previous_end = -1
    for region in regions:
        # Context already emitted as the previous hunk's trailer is not repeated.
        if region.start <= previous_end + CONTEXT:
            hunk_start = region.start
        else:
            hunk_start = max(0, region.start - CONTEXT)
        hunk_end = min(total, region.end + CONTEXT)

        def is_common(k: int) -> bool:
            return k < len(src_lines) and k < len(dst_lines)

        before = [" " + src_lines[k] for k in range(hunk_start, region.start) if is_common(k)]
        removed = ["-" + src_lines[k] for k in range(region.start, region.end) if k < len(src_lines)]
        added = ["+" + dst_lines[k] for k in range(region.start, region.end) if k < len(dst_lines)]
        after = [" " + src_lines[k] for k in range(region.end, hunk_end) if is_common(k)]

        context = len(before) + len(after)
        old_total = len(removed) + context
        new_total = len(added) + context
        start = hunk_start + 1

        hunks.append(Hunk(
            old_start=start,
            old_lines=old_total,
            new_start=start,
            new_lines=new_total,
            header=_format_header(start, old_total, new_total),
            lines=before + removed + added + after,
        ))
        previous_end = region.end

    return Patch(hunks=hunks)
