"""Sender rule selection and mailbox search construction.

What:
  Pick the per-sender rule that applies to a From header and render the IMAP
  search expression for the configured sender queries.

Why:
  Both operations share the same plain substring semantics: the From header is
  never parsed as an address, a rule applies when its substring occurs
  anywhere in ``"<display-name> <<address>>"``.

How:
  :func:`resolve_sender` scans every rule and keeps overwriting its selection,
  so the last matching rule in declaration order wins even when an earlier,
  broader substring also matched. :func:`build_search_query` joins
  ``FROM <substring> UNSEEN`` terms with ``OR``.

Interfaces:
  :func:`resolve_sender`, :func:`build_search_query`.

Invariants & Safety:
  - :func:`resolve_sender` never returns ``None``; callers can always iterate
    ``.blocks``.
  - Sender rules are never merged.
"""
from __future__ import annotations

from typing import Sequence

from .rules import EMPTY_SENDER_RULE, SenderQuery, SenderRule


def resolve_sender(from_header: str, rules: Sequence[SenderRule]) -> SenderRule:
    """Return the last rule whose substring occurs in ``from_header``.

    Args:
      from_header: From value, e.g. ``"Alice <alice@example.com>"``.
      rules: Sender rules in declaration order.

    Returns:
      The selected rule, or :data:`EMPTY_SENDER_RULE` when none applies.
    """

    selected = EMPTY_SENDER_RULE
    for rule in rules:
        if rule.from_substring in from_header:
            selected = rule
    return selected


def build_search_query(queries: Sequence[SenderQuery]) -> str:
    """Render the ``SEARCH`` expression for ``queries``.

    The first term is unprefixed and each following term is prefixed with
    ``OR``. An empty sequence yields ``""``, meaning every unseen message.
    """

    terms = [f"FROM {query.from_substring} UNSEEN" for query in queries]
    return " OR ".join(terms)
