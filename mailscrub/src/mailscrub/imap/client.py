"""Single-session IMAP client for fetching the newest unread message.

What:
  Wrap the third-party ``imapclient`` library with the one workflow mailscrub
  needs: log in over TLS, select the mailbox, search, fetch the newest match,
  optionally flag it ``\\Deleted``, and log out.

Why:
  Direct use of ``imapclient`` spreads connection handling and error types
  across the CLI. Centralising the session gives one place that turns socket,
  TLS and protocol failures into :class:`MailProtocolError` and keeps the
  session strictly sequential.

How:
  :class:`MailboxClient` is a context manager. :meth:`MailboxClient.__enter__`
  connects, logs in and selects the configured mailbox; every later call runs
  inside :func:`_protocol_step`, which re-raises library failures as
  :class:`MailProtocolError` naming the step. UIDs are used throughout.

Interfaces:
  :class:`MailboxClient`, :class:`MailProtocolError`, :class:`NoMessageFound`.

Invariants & Safety:
  - Sequence numbers are never used; all operations are UID based.
  - The newest message is the one with the highest UID among the matches.
  - Logout is attempted on exit even when the body of the ``with`` failed.
"""
from __future__ import annotations

import contextlib
from typing import Iterator, List, Optional

from imapclient import DELETED, IMAPClient
from imapclient.exceptions import IMAPClientError

from ..config.schema import ImapSettings
from ..utils.logging import JsonLogger, get_logger
from ..utils.mime import Message, parse_message


class MailProtocolError(Exception):
    """Raised when connecting, authenticating or talking to the server fails."""


class NoMessageFound(LookupError):
    """Raised when the mailbox search yields no message."""


@contextlib.contextmanager
def _protocol_step(step: str) -> Iterator[None]:
    """Translate library and socket failures raised during ``step``."""

    try:
        yield
    except (IMAPClientError, OSError) as exc:
        raise MailProtocolError(f"{step} failed: {exc}") from exc


class MailboxClient:
    """Context manager exposing the fetch/delete workflow.

    What:
      Owns a single ``imapclient.IMAPClient`` connection for the duration of a
      ``with`` block.

    Why:
      mailscrub handles one message per process; a single owned session keeps
      select, search, fetch and store in order on one connection.

    How:
      Connection happens in :meth:`__enter__`; helper methods delegate to the
      underlying client inside :func:`_protocol_step`.
    """

    def __init__(self, settings: ImapSettings, *, logger: Optional[JsonLogger] = None):
        self._settings = settings
        self._client: Optional[IMAPClient] = None
        self._logger = logger or get_logger("mailscrub.imap")

    def __enter__(self) -> "MailboxClient":
        """Connect, log in and select the configured mailbox.

        Raises:
          MailProtocolError: If any of the three steps fails.
        """

        with _protocol_step("connect"):
            self._client = IMAPClient(self._settings.host, port=self._settings.port, ssl=True)
        try:
            with _protocol_step("login"):
                self._client.login(self._settings.user, self._settings.password)
            with _protocol_step("select"):
                self._client.select_folder(self._settings.mailbox)
        except MailProtocolError:
            self._shutdown()
            raise
        self._logger.debug("imap_session_opened", host=self._settings.host, mailbox=self._settings.mailbox)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Log out and drop the connection."""

        self._shutdown()

    def _shutdown(self) -> None:
        if self._client is None:
            return
        try:
            self._client.logout()
        except (IMAPClientError, OSError) as err:
            self._logger.warning("imap_logout_failed", error=str(err))
        finally:
            self._client = None

    @property
    def client(self) -> IMAPClient:
        """Return the connected ``IMAPClient``.

        Raises:
          RuntimeError: If accessed outside the ``with`` block.
        """

        if self._client is None:
            raise RuntimeError("IMAP client not connected")
        return self._client

    def search(self, criteria: str) -> List[int]:
        """Run a UID search and return the matching UIDs in ascending order."""

        self._logger.info("imap_search", query=criteria)
        with _protocol_step("search"):
            return sorted(int(uid) for uid in self.client.search(criteria))

    def fetch_raw(self, uid: int) -> Optional[bytes]:
        """Return the full RFC 822 bytes of ``uid``, or ``None`` if absent."""

        with _protocol_step("fetch"):
            response = self.client.fetch([uid], ["RFC822"])
        data = response.get(uid)
        if not data:
            return None
        raw = data.get(b"RFC822")
        return bytes(raw) if raw is not None else None

    def fetch_newest(self, criteria: str) -> Message:
        """Fetch and parse the newest message matching ``criteria``.

        Returns:
          The parsed :class:`~mailscrub.utils.mime.Message`.

        Raises:
          NoMessageFound: If nothing matches or the message vanished.
          MailProtocolError: On server failures.
          MalformedHeader: If the From header is not a single address.
        """

        uids = self.search(criteria)
        if not uids:
            raise NoMessageFound("there are no messages in the mailbox.")
        uid = uids[-1]
        raw = self.fetch_raw(uid)
        if raw is None:
            raise NoMessageFound("there are no messages in the mailbox.")
        self._logger.info("imap_fetched", uid=uid, size=len(raw))
        return parse_message(raw, uid=uid)

    def delete(self, uid: int) -> None:
        """Flag ``uid`` as ``\\Deleted``; the server expunges it later."""

        with _protocol_step("store"):
            self.client.add_flags([uid], [DELETED])
        self._logger.info("imap_deleted", uid=uid)
