"""Block-level rule matching.

What:
  Decide whether one paragraph of a message should be discarded.

Why:
  Signatures and disclaimers are rarely a single line; matching at paragraph
  granularity removes them whole without touching surrounding content.

How:
  Each rule is tried in order. A rule matches when the trimmed block equals
  the trimmed rule text, or when the rule's precompiled end-anchored pattern
  finds a match in the trimmed block. The first matching rule wins.

Interfaces:
  :func:`block_matches`, :func:`first_match`.

Invariants & Safety:
  - Matching never mutates the rules or the block.
  - Patterns run in the calling thread; the result depends only on the
    block and the rules.
"""
from __future__ import annotations

from typing import Optional, Sequence

from .rules import BlockRule, trim


def first_match(block: str, rules: Sequence[BlockRule]) -> Optional[BlockRule]:
    """Return the first rule in ``rules`` matching ``block``, or ``None``."""

    candidate = trim(block)
    for rule in rules:
        if candidate == rule.text:
            return rule
        if rule.pattern.search(candidate) is not None:
            return rule
    return None


def block_matches(block: str, rules: Sequence[BlockRule]) -> bool:
    """Return whether any rule in ``rules`` matches ``block``.

    Args:
      block: Raw block text; surrounding whitespace is ignored.
      rules: Block rules in declaration order.

    Returns:
      ``True`` if the block should be dropped.
    """

    return first_match(block, rules) is not None
