"""Immutable rule model consumed by the filtering engine.

What:
  Define the compiled representation of ``filter.yaml``: block rules with their
  precompiled end-anchored patterns, per-sender rule groups, the search queries
  used to pick unread messages, and the :class:`RuleSet` bundling them.

Why:
  The engine runs every block rule against every block of a message. Compiling
  each pattern once when the configuration is loaded keeps filtering a pure
  text transformation and moves invalid patterns to startup, where they can be
  reported as configuration errors instead of surfacing mid-filter.

How:
  :func:`compile_block_rule` trims the rule text, expands the ``<url>``
  placeholder into an "any http(s) URL" fragment, appends ``$`` so a rule
  describes the tail of a block, and compiles the result. All containers are
  frozen dataclasses holding tuples so no caller can mutate a loaded rule set.

Interfaces:
  :data:`URL_PLACEHOLDER`, :data:`URL_PATTERN`, :class:`BlockRule`,
  :class:`SenderQuery`, :class:`SenderRule`, :class:`RuleSet`,
  :data:`EMPTY_SENDER_RULE`, :func:`compile_block_rule`, :func:`trim`.

Invariants & Safety:
  - Rule text outside the placeholder is not escaped; characters such as ``.``
    or ``(`` keep their regular-expression meaning.
  - A :class:`RuleSet` is never modified after construction.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Tuple


URL_PLACEHOLDER = "<url>"
"""Literal token in a block rule standing for any bare URL."""

URL_PATTERN = r"http[s]*://\S+"
"""Expansion of :data:`URL_PLACEHOLDER`."""

WHITESPACE = (
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)
"""Characters with the Unicode ``White_Space`` property.

``str.strip()`` without arguments also removes the information separators
``\\x1c``-``\\x1f``; those stay part of the text here.
"""


def trim(text: str) -> str:
    """Strip :data:`WHITESPACE` from both ends of ``text``."""

    return text.strip(WHITESPACE)


@dataclass(frozen=True)
class BlockRule:
    """A single block rule with its precompiled tail pattern.

    Attributes:
      text: Rule text with surrounding whitespace removed.
      pattern: Compiled end-anchored pattern derived from ``text``.
    """

    text: str
    pattern: re.Pattern[str] = field(compare=False, repr=False)


@dataclass(frozen=True)
class SenderQuery:
    """Substring used to build one term of the mailbox search expression."""

    from_substring: str


@dataclass(frozen=True)
class SenderRule:
    """Block rules scoped to messages whose From header contains a substring."""

    from_substring: str
    blocks: Tuple[BlockRule, ...] = ()


EMPTY_SENDER_RULE = SenderRule(from_substring="", blocks=())
"""Rule returned when no sender rule applies; it strips nothing."""


@dataclass(frozen=True)
class RuleSet:
    """Complete, read-only filtering configuration.

    What:
      Group the search queries, global block and line rules, and per-sender
      rules loaded from a single configuration document.

    Why:
      Passing one immutable object through the engine makes it explicit that
      filtering never depends on state other than its inputs.

    How:
      Sequences keep declaration order (sender resolution depends on it) while
      line rules only need membership tests and are stored as a frozenset.
    """

    sender_searches: Tuple[SenderQuery, ...] = ()
    global_blocks: Tuple[BlockRule, ...] = ()
    global_lines: FrozenSet[str] = frozenset()
    sender_rules: Tuple[SenderRule, ...] = ()

    @classmethod
    def build(
        cls,
        *,
        searches: Iterable[str] = (),
        blocks: Iterable[str] = (),
        lines: Iterable[str] = (),
        senders: Iterable[Tuple[str, Iterable[str]]] = (),
    ) -> "RuleSet":
        """Compile plain strings into a :class:`RuleSet`.

        Args:
          searches: Sender substrings for the mailbox search.
          blocks: Global block rule texts.
          lines: Global line rules.
          senders: ``(from_substring, block_texts)`` pairs in declaration order.

        Returns:
          The compiled rule set.

        Raises:
          re.error: If a block rule does not compile.
        """

        return cls(
            sender_searches=tuple(SenderQuery(from_substring=value) for value in searches),
            global_blocks=tuple(compile_block_rule(text) for text in blocks),
            global_lines=frozenset(lines),
            sender_rules=tuple(
                SenderRule(
                    from_substring=from_substring,
                    blocks=tuple(compile_block_rule(text) for text in block_texts),
                )
                for from_substring, block_texts in senders
            ),
        )


def compile_block_rule(text: str) -> BlockRule:
    """Compile ``text`` into a :class:`BlockRule`.

    What:
      Produce the trimmed rule text and the end-anchored pattern used for the
      second matching mode.

    Why:
      Rules typically describe trailing boilerplate such as
      ``"Unsubscribe at <url>"``; anchoring at the end lets the rule match a
      block that finishes with that text while the URL itself varies.

    How:
      Trim, substitute :data:`URL_PLACEHOLDER` with :data:`URL_PATTERN` on the
      raw text, append ``$`` and compile.

    Args:
      text: Rule text as written in the configuration.

    Returns:
      Compiled :class:`BlockRule`.

    Raises:
      re.error: If the resulting expression is invalid.
    """

    trimmed = trim(text)
    source = trimmed.replace(URL_PLACEHOLDER, URL_PATTERN) + "$"
    return BlockRule(text=trimmed, pattern=re.compile(source))
