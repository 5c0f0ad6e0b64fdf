"""Facade for the IMAP integration layer.

What:
  Surface :class:`~mailscrub.imap.client.MailboxClient`, its error types and
  the search criteria helper.

Why:
  Call sites depend on this package rather than on the submodule layout.

How:
  Re-exports from ``imap.client`` and ``imap.search``.
"""

from .client import MailboxClient, MailProtocolError, NoMessageFound
from .search import build_search

__all__ = ["MailboxClient", "MailProtocolError", "NoMessageFound", "build_search"]
