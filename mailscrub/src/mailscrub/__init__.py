"""
Module: mailscrub.__init__

What:
  Aggregate package exports for mailscrub, the tool that prints the newest
  unread message of a mailbox with signatures, disclaimers and other
  boilerplate removed.

Why:
  Entry points and tests import the subpackages by name; listing them keeps the
  public layout explicit.

How:
  Provide an explicit ``__all__`` declaration that enumerates the public
  subpackages.

Interfaces:
  - config: Filter file and IMAP settings loaders.
  - core: Rule model and filtering engine.
  - imap: Single-session IMAP client.
  - utils: Logging and MIME parsing helpers.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "core",
    "imap",
    "utils",
]
