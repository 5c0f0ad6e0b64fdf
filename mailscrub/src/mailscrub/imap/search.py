"""Translate sender queries into IMAP search criteria.

What:
  Produce the criteria handed to ``IMAPClient.search`` for the configured
  sender queries.

Why:
  The query text is built by the engine's resolver; this module only decides
  how an empty query reaches the server.

How:
  A non-empty query is sent verbatim; an empty one becomes ``UNSEEN`` so every
  unread message qualifies.

Interfaces:
  :func:`build_search`.
"""
from __future__ import annotations

from typing import Sequence

from ..core.resolver import build_search_query
from ..core.rules import SenderQuery


ALL_UNSEEN = "UNSEEN"


def build_search(queries: Sequence[SenderQuery]) -> str:
    """Return the ``SEARCH`` criteria string for ``queries``."""

    query = build_search_query(queries)
    return query or ALL_UNSEEN
