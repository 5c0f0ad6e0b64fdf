"""Pytest fixtures for unit tests talking to the fake mailbox.

What:
  Expose connection settings and an in-memory logger for tests driving
  :class:`mailscrub.imap.client.MailboxClient` against the ``backend`` fixture.

Why:
  Every IMAP test needs the same dummy credentials, and several assert on the
  structured log entries the client emits.

Interfaces:
  :func:`imap_settings`, :func:`log_stream` (pytest fixtures).
"""

import io

import pytest

from mailscrub.config.schema import ImapSettings


@pytest.fixture
def imap_settings() -> ImapSettings:
    """Return dummy connection settings."""

    return ImapSettings(host="imap.example.com", user="me@example.net", password="secret")


@pytest.fixture
def log_stream() -> io.StringIO:
    """Return an in-memory stream for :class:`JsonLogger` output."""

    return io.StringIO()
