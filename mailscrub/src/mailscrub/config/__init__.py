"""mailscrub configuration package.

What:
  Provide the import surface for loading ``filter.yaml`` and the IMAP
  connection settings.

Why:
  Callers go through the loaders so that every rule set they receive has been
  validated and compiled.

How:
  Re-export the loader helpers, error types and pydantic models.

Interfaces:
  - load_filter / parse_filter / resolve_filter_path: filter file handling.
  - load_imap_settings: ``IMAP_*`` environment variables.
  - read_input: body file for ad-hoc filtering.
  - ConfigError / InputError: failures reported with exit status 1.
  - FilterDocument / ImapSettings: pydantic models.
"""

from .loader import (
    ConfigError,
    InputError,
    LoadedFilter,
    build_rule_set,
    load_filter,
    load_imap_settings,
    parse_filter,
    read_input,
    resolve_filter_path,
)
from .schema import FilterDocument, ImapSettings, ValidationError

__all__ = [
    "ConfigError",
    "FilterDocument",
    "ImapSettings",
    "InputError",
    "LoadedFilter",
    "ValidationError",
    "build_rule_set",
    "load_filter",
    "load_imap_settings",
    "parse_filter",
    "read_input",
    "resolve_filter_path",
]
