"""
CODEWRIGHT Text Scanner

Splits a completion into plain runs and tagged blocks of the form
<name>...</name>. Only tag names from a caller-supplied vocabulary are
recognised; anything else (including a lone '<') stays plain text.

The scanner is a cursor loop with two states:
  PLAIN — jump to the next '<', emitting the text before it
  TAG   — try an anchored <name>body</name> match at the cursor;
          on failure emit the single '<' and advance by one
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Collection, Iterator, Union

_OPEN_TAG = re.compile(r"<(\w+)>")
_PAIRED_TAG = re.compile(r"<(\w+)>(.*?)</\1>", re.DOTALL)
_THINKING_OPEN = re.compile(r"<thinking>\s?")
_THINKING_CLOSE = re.compile(r"\s?</thinking>")


class ScanState(Enum):
    PLAIN = "plain"
    TAG = "tag"


@dataclass(frozen=True)
class TextRun:
    text: str


@dataclass(frozen=True)
class TagRun:
    name: str
    body: str
    raw: str


Segment = Union[TextRun, TagRun]


def strip_thinking(text: str) -> str:
    """Remove <thinking> wrappers, keeping their content as narrative."""
    text = _THINKING_OPEN.sub("", text)
    return _THINKING_CLOSE.sub("", text)


def scan(text: str, names: Collection[str]) -> Iterator[Segment]:
    """Yield TextRun / TagRun segments covering `text` from left to right."""
    cursor = 0
    length = len(text)
    state = ScanState.PLAIN
    # Names whose closing tag does not occur anywhere after the cursor.
    unclosed: set[str] = set()

    while cursor < length:
        if state is ScanState.PLAIN:
            nxt = text.find("<", cursor)
            if nxt == -1:
                yield TextRun(text[cursor:])
                return
            if nxt > cursor:
                yield TextRun(text[cursor:nxt])
            cursor = nxt
            state = ScanState.TAG
            continue

        tag = _match_tag(text, cursor, names, unclosed)
        if tag is None:
            yield TextRun("<")
            cursor += 1
        else:
            yield tag
            cursor += len(tag.raw)
        state = ScanState.PLAIN


def _match_tag(
    text: str,
    pos: int,
    names: Collection[str],
    unclosed: set[str],
) -> TagRun | None:
    opener = _OPEN_TAG.match(text, pos)
    if not opener:
        return None

    name = opener.group(1)
    if name not in names or name in unclosed:
        return None

    closer = f"</{name}>"
    end = text.find(closer, opener.end())
    if end == -1:
        unclosed.add(name)
        return None

    return TagRun(
        name=name,
        body=text[opener.end():end],
        raw=text[pos:end + len(closer)],
    )


def extract_params(body: str) -> dict[str, str]:
    """
    Turn a tool tag body into parameters.

    A body without nested tags is a single `content` parameter; otherwise
    each one-level <param>value</param> pair becomes params[param].
    """
    pairs = list(_PAIRED_TAG.finditer(body))
    if not pairs:
        return {"content": body.strip()}

    params: dict[str, str] = {}
    for match in pairs:
        params[match.group(1)] = match.group(2).strip()
    return params
