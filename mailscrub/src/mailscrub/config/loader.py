"""Strict loaders for mailscrub configuration.

What:
  Locate, parse and validate ``filter.yaml`` into a compiled
  :class:`~mailscrub.core.rules.RuleSet`, and read the IMAP connection settings
  from the environment.

Why:
  Configuration lives outside the package and may be missing, malformed or
  contain a block rule that is not a valid pattern. Every such problem must be
  reported once, at startup, before any mailbox is touched or any body is
  filtered.

How:
  Resolve the filter path from an explicit argument, the
  ``MAILSCRUB_FILTER_PATH`` environment variable, or ``./filter.yaml`` in that
  order. Parse with PyYAML's ``safe_load``, validate with the pydantic
  :class:`~mailscrub.config.schema.FilterDocument` model, then compile the
  block rules. IO, YAML, schema and pattern failures all become
  :class:`ConfigError` with the file path in the message.

Interfaces:
  :class:`ConfigError`, :class:`InputError`, :class:`LoadedFilter`,
  :func:`resolve_filter_path`, :func:`parse_filter`, :func:`load_filter`,
  :func:`load_imap_settings`, :func:`read_input`.

Invariants:
  - No caller receives a rule set that has not passed schema validation.
  - Block patterns are compiled here and nowhere else.
"""

from __future__ import annotations

import hashlib
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError as _PydanticValidationError

from ..core.rules import RuleSet
from .schema import FilterDocument, ImapSettings


class ConfigError(Exception):
    """Base error for configuration parsing or validation failures.

    What:
      Represent fatal issues encountered while reading or validating the
      filter file or the IMAP settings.

    Why:
      Grouping failures under a single type lets the CLI map every user input
      mistake to exit status 1 while keeping mailbox failures separate.

    How:
      Derive from :class:`Exception`; messages always name the failing source.
    """


class InputError(ConfigError):
    """Raised when the body file given with ``--input`` cannot be read."""


@dataclass
class LoadedFilter:
    """Compiled rules plus the file they came from.

    Attributes:
      rules: Compiled, immutable rule set.
      path: File the rules were read from.
      checksum: SHA-256 of the file text prefixed with ``sha256:``.
    """

    rules: RuleSet
    path: Path
    checksum: str


FILTER_ENV = "MAILSCRUB_FILTER_PATH"
DEFAULT_FILTER_PATH = Path("filter.yaml")

_IMAP_ENV = {
    "host": "IMAP_HOST",
    "user": "IMAP_USER",
    "password": "IMAP_PASSWORD",
    "port": "IMAP_PORT",
    "mailbox": "IMAP_MAILBOX",
}
_IMAP_REQUIRED = ("host", "user", "password")


def resolve_filter_path(path: Optional[Path | str] = None) -> Path:
    """Return the filter file location in precedence order.

    Args:
      path: Explicit location, typically from ``--filter``.

    Returns:
      The explicit path, else ``$MAILSCRUB_FILTER_PATH``, else
      ``./filter.yaml``.
    """

    if path is not None and str(path):
        return Path(path).expanduser()
    env_path = os.environ.get(FILTER_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_FILTER_PATH


def _checksum(text: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def _format_validation_error(exc: _PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def build_rule_set(document: FilterDocument) -> RuleSet:
    """Compile a validated document into a :class:`RuleSet`.

    What:
      Precompile every global and sender block rule.

    Why:
      Filtering must be total; an invalid pattern has to surface here as a
      configuration error rather than later while a body is processed.

    How:
      Delegate to :meth:`RuleSet.build` and translate :class:`re.error` into
      :class:`ConfigError`, quoting the offending rule.

    Raises:
      ConfigError: If any block rule is not a valid pattern.
    """

    try:
        return RuleSet.build(
            searches=[entry.from_ for entry in document.search],
            blocks=document.all.block,
            lines=document.all.line,
            senders=[(entry.from_, entry.block) for entry in document.message],
        )
    except re.error as exc:
        pattern = exc.pattern if isinstance(exc.pattern, str) else "<unknown>"
        raise ConfigError(f"invalid block rule {pattern!r}: {exc}") from exc


def parse_filter(text: str, *, source: str = "<string>") -> FilterDocument:
    """Parse and validate filter YAML text.

    Args:
      text: YAML (or JSON) document.
      source: Name used in error messages.

    Returns:
      The validated :class:`FilterDocument`.

    Raises:
      ConfigError: If the text is not YAML, not a mapping, or violates the
        schema.
    """

    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse the file `{source}`: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"failed to parse the file `{source}`: top-level mapping expected")
    try:
        return FilterDocument.model_validate(payload)
    except _PydanticValidationError as exc:
        raise ConfigError(
            f"failed to parse the file `{source}`: {_format_validation_error(exc)}"
        ) from exc


def load_filter(path: Optional[Path | str] = None) -> LoadedFilter:
    """Read, validate and compile the filter file.

    What:
      Produce the :class:`LoadedFilter` used for the whole run.

    Why:
      The rule set is loaded exactly once per process and shared read-only by
      every filter pass.

    How:
      Resolve the path with :func:`resolve_filter_path`, read it, validate via
      :func:`parse_filter` and compile via :func:`build_rule_set`.

    Args:
      path: Optional explicit location.

    Returns:
      The compiled rules with their provenance.

    Raises:
      ConfigError: If the file is missing, unreadable or invalid.
    """

    resolved = resolve_filter_path(path)
    try:
        text = resolved.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"could not read the file `{resolved}`") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"could not read the file `{resolved}`: {exc}") from exc
    document = parse_filter(text, source=str(resolved))
    rules = build_rule_set(document)
    return LoadedFilter(rules=rules, path=resolved, checksum=_checksum(text))


def load_imap_settings(environ: Optional[Mapping[str, str]] = None) -> ImapSettings:
    """Build :class:`ImapSettings` from ``IMAP_*`` environment variables.

    Args:
      environ: Mapping to read instead of :data:`os.environ`.

    Returns:
      Validated connection settings.

    Raises:
      ConfigError: If a required variable is unset or a value is invalid.
    """

    source = os.environ if environ is None else environ
    missing = [_IMAP_ENV[key] for key in _IMAP_REQUIRED if _IMAP_ENV[key] not in source]
    if missing:
        raise ConfigError(f"environment variable not present: {', '.join(missing)}")
    payload: dict[str, Any] = {
        key: source[name] for key, name in _IMAP_ENV.items() if source.get(name)
    }
    payload.setdefault("password", source[_IMAP_ENV["password"]])
    try:
        return ImapSettings.model_validate(payload)
    except _PydanticValidationError as exc:
        raise ConfigError(f"invalid IMAP settings: {_format_validation_error(exc)}") from exc


def read_input(path: Path | str) -> str:
    """Return the body text stored at ``path``.

    Raises:
      InputError: If the file cannot be read as UTF-8 text.
    """

    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InputError(f"could not read the file `{path}`") from exc
