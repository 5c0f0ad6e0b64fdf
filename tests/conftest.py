"""Pytest configuration shared by every suite.

What:
  Put the in-repo source tree and the unit fakes on ``sys.path``, isolate each
  test from the operator's environment, and expose the fake IMAP backend.

Why:
  Tests must run against ``mailscrub/src`` rather than an installed wheel, and
  must not pick up a real ``MAILSCRUB_FILTER_PATH`` or ``IMAP_*`` credentials
  from the shell that launched pytest. The IMAP client tests and the CLI
  wiring tests share the same fake server.

How:
  Prepend the source directory at import time, provide an autouse fixture
  that points ``MAILSCRUB_FILTER_PATH`` at ``tests/data/filter.yaml`` and
  clears the IMAP variables, and monkeypatch ``IMAPClient`` in the ``backend``
  fixture.

Interfaces:
  :func:`isolated_env`, :func:`backend` (pytest fixtures), :data:`FILTER_PATH`.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "mailscrub" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))
UNIT_DIR = Path(__file__).resolve().parent / "unit"
if str(UNIT_DIR) not in sys.path:
    sys.path.insert(0, str(UNIT_DIR))

import pytest

from fakes import FakeImapBackend

FILTER_PATH = Path(__file__).resolve().parent / "data" / "filter.yaml"

_IMAP_VARIABLES = ("IMAP_HOST", "IMAP_USER", "IMAP_PASSWORD", "IMAP_PORT", "IMAP_MAILBOX")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch):
    """Apply the canned filter file and drop ambient IMAP credentials."""

    monkeypatch.setenv("MAILSCRUB_FILTER_PATH", str(FILTER_PATH))
    for name in _IMAP_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeImapBackend:
    """Return a fake backend wired in place of ``IMAPClient``.

    The replacement accepts the same ``host, port=, ssl=`` call the client
    makes and records the connection target on the backend.
    """

    fake = FakeImapBackend()

    def _connect(host, port, ssl):
        fake.calls.append(("connect", (host, port, ssl)))
        return fake

    monkeypatch.setattr("mailscrub.imap.client.IMAPClient", _connect)
    return fake
