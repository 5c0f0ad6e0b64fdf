"""Expose the public utility surface for mailscrub.

What:
  Re-export the logging and MIME helpers.

Why:
  A stable facade lets ``from mailscrub import utils`` imports survive file
  moves inside the package.

How:
  Imports the canonical callables/classes and populates ``__all__``.
"""

from .logging import JsonLogger, get_logger
from .mime import MalformedHeader, Message, parse_message, select_body

__all__ = [
    "JsonLogger",
    "MalformedHeader",
    "Message",
    "get_logger",
    "parse_message",
    "select_body",
]
