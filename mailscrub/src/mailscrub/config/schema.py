"""Pydantic models describing mailscrub configuration documents."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ValidationError(ValueError):
    """Raised when configuration data does not satisfy the schema."""


class SearchEntry(BaseModel):
    """Sender substring contributing one ``FROM ... UNSEEN`` search term."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    from_: str = Field(alias="from")


class GlobalRules(BaseModel):
    """Blocks and lines stripped from every message."""

    model_config = ConfigDict(extra="forbid")

    block: List[str]
    line: List[str]


class SenderEntry(BaseModel):
    """Blocks stripped only from messages whose From contains ``from``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    from_: str = Field(alias="from")
    block: List[str]


class FilterDocument(BaseModel):
    """Root document loaded from ``filter.yaml``.

    What:
      Mirror the on-disk layout ``search`` / ``all`` / ``message`` one to one.

    Why:
      Keeping the raw document separate from :class:`mailscrub.core.rules.RuleSet`
      lets validation report YAML paths while the engine works on compiled,
      immutable rules.

    How:
      Every section is mandatory and unknown keys are rejected so typos such as
      ``blocks:`` fail loudly at startup instead of silently disabling rules.
    """

    model_config = ConfigDict(extra="forbid")

    search: List[SearchEntry]
    all: GlobalRules
    message: List[SenderEntry]


class ImapSettings(BaseModel):
    """Connection parameters read from the ``IMAP_*`` environment variables."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: str
    port: int = Field(default=993, gt=0, lt=65536)
    mailbox: str = "INBOX"

    @field_validator("mailbox")
    @classmethod
    def _validate_mailbox(cls, value: str) -> str:
        if not value.strip():
            raise ValidationError("mailbox must not be blank")
        return value
