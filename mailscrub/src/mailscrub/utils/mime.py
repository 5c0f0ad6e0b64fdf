"""MIME parsing helpers feeding the filtering engine.

What:
  Turn a raw RFC 822 payload fetched over IMAP into a :class:`Message` holding
  the From string, date, subject and the selected plain-text body.

Why:
  The engine only consumes strings. Keeping header rendering and body
  selection here means the engine never sees MIME structure, charsets or
  encoded words.

How:
  Parse with :class:`~email.parser.BytesParser` and ``policy.default`` so
  headers come back decoded. Render the single From address as
  ``"<display-name> <<address>>"``. Collect every inline ``text/plain`` leaf
  (any ``text/*`` leaf when no plain part exists), decode it, and keep the last
  one via :func:`select_body`.

Interfaces:
  :class:`Message`, :class:`MalformedHeader`, :func:`parse_message`,
  :func:`select_body`, :func:`format_from`, :func:`format_date`.

Invariants & Safety:
  - The body is always ``str``; undecodable bytes are dropped rather than
    raising.
  - Bodies are clamped to :data:`MAX_BODY_BYTES` of UTF-8.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import List, Optional, Sequence


MAX_BODY_BYTES = 1_000_000
"""Soft upper bound for decoded body size in bytes."""


class MalformedHeader(ValueError):
    """Raised when the From header does not hold exactly one address."""


@dataclass(frozen=True)
class Message:
    """Message fields the CLI prints and the engine filters.

    Attributes:
      from_: ``"<display-name> <<address>>"``; the display name may be empty.
      date: Parsed ``Date`` header, ``None`` when absent or unparsable.
      subject: Decoded subject, empty when absent.
      body: Selected plain-text body.
      uid: IMAP UID the message was fetched with, if any.
    """

    from_: str
    date: Optional[datetime]
    subject: str
    body: str
    uid: Optional[int] = None


def select_body(candidates: Sequence[str]) -> str:
    """Return the last text body candidate, or ``""`` when there is none."""

    if not candidates:
        return ""
    return candidates[-1]


def format_from(message: EmailMessage) -> str:
    """Render the From header as ``"<display-name> <<address>>"``.

    Raises:
      MalformedHeader: If the header is missing, a group, or lists zero or
        several addresses.
    """

    header = message["from"]
    if header is None:
        raise MalformedHeader("invalid from header value: missing")
    addresses = getattr(header, "addresses", ())
    groups = getattr(header, "groups", ())
    if len(addresses) != 1 or any(group.display_name is not None for group in groups):
        raise MalformedHeader(f"invalid from header value: {str(header)!r}")
    address = addresses[0]
    if not address.addr_spec or address.addr_spec == "<>":
        raise MalformedHeader(f"invalid from header value: {str(header)!r}")
    return f"{address.display_name} <{address.addr_spec}>"


def format_date(value: Optional[datetime]) -> str:
    """Render ``value`` as RFC 3339, treating naive datetimes as UTC."""

    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_message(raw: bytes, *, uid: Optional[int] = None) -> Message:
    """Parse a raw IMAP message into a :class:`Message`.

    Args:
      raw: Message bytes from an ``RFC822`` / ``BODY[]`` fetch.
      uid: UID to record on the result.

    Returns:
      The parsed message.

    Raises:
      MalformedHeader: If the From header is not a single address.
    """

    parser = BytesParser(policy=policy.default)
    message = parser.parsebytes(raw)
    from_ = format_from(message)
    subject = str(message["subject"] or "")
    return Message(
        from_=from_,
        date=_header_datetime(message),
        subject=subject,
        body=_truncate(select_body(_text_bodies(message))),
        uid=uid,
    )


def _header_datetime(message: EmailMessage) -> Optional[datetime]:
    header = message["date"]
    if header is None:
        return None
    return getattr(header, "datetime", None)


def _text_bodies(message: EmailMessage) -> List[str]:
    """Collect decoded inline text bodies in MIME order.

    ``text/plain`` parts are preferred; other ``text/*`` parts are only used
    when the message has no plain part at all.
    """

    plain: List[str] = []
    other: List[str] = []
    for part in message.walk():
        if part.is_multipart():
            continue
        if part.get_content_disposition() == "attachment":
            continue
        content_type = part.get_content_type()
        if content_type == "text/plain":
            plain.append(_decode_part(part))
        elif content_type.startswith("text/"):
            other.append(_decode_part(part))
    return plain or other


def _decode_part(part: EmailMessage) -> str:
    try:
        payload = part.get_content()
    except (LookupError, UnicodeDecodeError):
        raw = part.get_payload(decode=True) or b""
        return raw.decode("utf-8", errors="ignore")
    if isinstance(payload, bytes):
        payload = payload.decode(part.get_content_charset("utf-8"), errors="ignore")
    return payload


def _truncate(text: str) -> str:
    encoded = text.encode("utf-8")
    if len(encoded) <= MAX_BODY_BYTES:
        return text
    return encoded[:MAX_BODY_BYTES].decode("utf-8", errors="ignore")
