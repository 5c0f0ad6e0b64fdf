"""Body filter orchestrating block and line removal.

What:
  Turn a raw message body into cleaned text by dropping blocks that match the
  global or sender block rules and lines that equal a global line rule.

Why:
  Boilerplate comes in two shapes: multi-line paragraphs (signatures,
  disclaimers, unsubscribe footers) and stray single lines (``--`` separators).
  Blocks are removed first and lines second, so line rules only ever see text
  that survived block filtering.

How:
  1. Remove every carriage return so CRLF and LF bodies behave identically.
  2. Split on the blank-line delimiter ``"\\n\\n"``.
  3. Drop a block when it matches the global rules, otherwise when it matches
     the sender rules; surviving blocks are written back followed by the
     delimiter.
  4. When line rules are configured, split the buffer into lines and drop the
     ones equal to a rule, re-terminating the rest with ``"\\n"``.

  Two configurations exist. :func:`inbound_filter` serves messages fetched from
  the mailbox and applies global blocks, sender blocks and global lines.
  :func:`adhoc_filter` serves a body read from a file with an explicit From
  value and applies the sender blocks only.

Interfaces:
  :class:`FilterConfig`, :class:`FilterOutcome`, :func:`inbound_filter`,
  :func:`adhoc_filter`, :func:`filter_body`, :func:`run_filter`,
  :func:`split_blocks`.

Invariants & Safety:
  - Blocks are matched independently; segmentation never depends on match
    outcomes.
  - Matched blocks disappear entirely; no placeholder is inserted.
  - Filtering is total for any string input.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from .matcher import block_matches
from .normalize import split_lines
from .resolver import resolve_sender
from .rules import BlockRule, RuleSet, SenderRule


BLOCK_DELIMITER = "\n\n"


@dataclass(frozen=True)
class FilterConfig:
    """Rules applied by one filter pass.

    Attributes:
      global_blocks: Block rules checked first for every block.
      sender_blocks: Block rules of the resolved sender, checked second.
      line_rules: Exact lines removed after block filtering.
      sender: The resolved sender rule, reported in the run log.
    """

    global_blocks: Tuple[BlockRule, ...] = ()
    sender_blocks: Tuple[BlockRule, ...] = ()
    line_rules: FrozenSet[str] = frozenset()
    sender: Optional[SenderRule] = None


@dataclass(frozen=True)
class FilterOutcome:
    """Result of :func:`run_filter`.

    Attributes:
      text: Filtered body.
      dropped_blocks: Number of blocks removed by block rules.
      dropped_lines: Number of lines removed by line rules.
    """

    text: str
    dropped_blocks: int = 0
    dropped_lines: int = 0

    @property
    def matched(self) -> bool:
        """Whether any rule removed content."""

        return bool(self.dropped_blocks or self.dropped_lines)


def inbound_filter(rules: RuleSet, from_header: str) -> FilterConfig:
    """Build the configuration for a message fetched from the mailbox."""

    sender = resolve_sender(from_header, rules.sender_rules)
    return FilterConfig(
        global_blocks=rules.global_blocks,
        sender_blocks=sender.blocks,
        line_rules=rules.global_lines,
        sender=sender,
    )


def adhoc_filter(rules: RuleSet, from_value: str) -> FilterConfig:
    """Build the configuration for a body supplied on the command line.

    Only the resolved sender's block rules apply; global block and line rules
    do not.
    """

    sender = resolve_sender(from_value, rules.sender_rules)
    return FilterConfig(sender_blocks=sender.blocks, sender=sender)


def split_blocks(body: str) -> List[str]:
    """Remove carriage returns from ``body`` and split it into blocks."""

    return body.replace("\r", "").split(BLOCK_DELIMITER)


def run_filter(body: str, config: FilterConfig) -> FilterOutcome:
    """Filter ``body`` with ``config`` and report what was removed.

    Args:
      body: Raw message body.
      config: Rules to apply, see :func:`inbound_filter` and
        :func:`adhoc_filter`.

    Returns:
      :class:`FilterOutcome` with the cleaned text and removal counts.
    """

    kept: List[str] = []
    dropped_blocks = 0
    for block in split_blocks(body):
        if block_matches(block, config.global_blocks):
            dropped_blocks += 1
            continue
        if block_matches(block, config.sender_blocks):
            dropped_blocks += 1
            continue
        kept.append(block + BLOCK_DELIMITER)
    text = "".join(kept)

    if not config.line_rules:
        return FilterOutcome(text=text, dropped_blocks=dropped_blocks)

    lines: List[str] = []
    dropped_lines = 0
    for line in split_lines(text):
        if line in config.line_rules:
            dropped_lines += 1
            continue
        lines.append(line + "\n")
    return FilterOutcome(text="".join(lines), dropped_blocks=dropped_blocks, dropped_lines=dropped_lines)


def filter_body(body: str, config: FilterConfig) -> str:
    """Return ``body`` with every block and line matched by ``config`` removed."""

    return run_filter(body, config).text
