"""Filtering engine: rule model, sender resolution, block and line filtering.

What:
  Re-export the pure functions and immutable types that turn a raw message
  body into cleaned text.

Why:
  The CLI and tests only need this surface; the module split (rules, matcher,
  resolver, filter, normalize) stays an implementation detail.

How:
  Import the public names from each submodule and list them in ``__all__``.

Interfaces:
  See ``__all__``.

Invariants & Safety:
  - Nothing here performs IO or touches process state.
"""

from .filter import (
    FilterConfig,
    FilterOutcome,
    adhoc_filter,
    filter_body,
    inbound_filter,
    run_filter,
    split_blocks,
)
from .matcher import block_matches, first_match
from .normalize import normalize_blank_lines, render_lines, split_lines
from .resolver import build_search_query, resolve_sender
from .rules import (
    EMPTY_SENDER_RULE,
    URL_PLACEHOLDER,
    BlockRule,
    RuleSet,
    SenderQuery,
    SenderRule,
    compile_block_rule,
    trim,
)

__all__ = [
    "BlockRule",
    "EMPTY_SENDER_RULE",
    "FilterConfig",
    "FilterOutcome",
    "RuleSet",
    "SenderQuery",
    "SenderRule",
    "URL_PLACEHOLDER",
    "adhoc_filter",
    "block_matches",
    "build_search_query",
    "compile_block_rule",
    "filter_body",
    "first_match",
    "inbound_filter",
    "normalize_blank_lines",
    "render_lines",
    "resolve_sender",
    "run_filter",
    "split_blocks",
    "split_lines",
    "trim",
]
