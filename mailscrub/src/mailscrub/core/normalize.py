"""Blank-line normalisation for filtered output.

Dropping blocks leaves runs of empty lines behind. :func:`normalize_blank_lines`
collapses each run to a single empty line in one streaming pass, using two
states: after content (initial) and after a blank line.
"""
from __future__ import annotations

from typing import Iterable, Iterator, List, Literal


State = Literal["after_content", "after_blank"]


def normalize_blank_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield ``lines`` with consecutive blank lines collapsed to one.

    A line is blank only when it is the empty string; whitespace-only lines are
    content and pass through unchanged.
    """

    state: State = "after_content"
    for line in lines:
        if line == "":
            if state == "after_content":
                state = "after_blank"
                yield line
            continue
        state = "after_content"
        yield line


def split_lines(text: str) -> List[str]:
    """Split ``text`` on ``\\n`` without a trailing empty element.

    ``"a\\n\\nb\\n"`` becomes ``["a", "", "b"]``; only ``\\n`` separates lines.
    """

    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def render_lines(text: str) -> List[str]:
    """Split filtered ``text`` into lines and normalise blank runs."""

    return list(normalize_blank_lines(split_lines(text)))
