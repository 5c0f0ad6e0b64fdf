"""mailscrub logging helpers with JSON emission and redaction safeguards.

What:
  Offer a tiny facade over Python streams so every mailscrub component emits
  single-line JSON log entries with consistent fields, while message content
  never ends up in the logs by accident.

Why:
  Standard output is reserved for the cleaned message, so diagnostics go to
  standard error. Keeping them structured makes them easy to grep or ship to a
  collector when the tool runs from cron or a mail hook.

How:
  :class:`JsonLogger` writes ``ts``/``lvl``/``msg``/``component`` plus redacted
  extras with :func:`json.dump`. Entries below the configured threshold are
  dropped.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - Keys named ``subject``, ``body``, ``preview`` or ``snippet`` are replaced
    with ``[redacted]``, including inside nested dictionaries.
  - Streams are flushed after every write.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


REDACTED = "[redacted]"

LEVELS: Dict[str, int] = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}


@dataclass
class JsonLogger:
    """Structured JSON logger with automatic redaction.

    What:
      Emit single-line JSON entries carrying a timestamp, severity, component
      tag and optional context fields.

    Why:
      Centralising the format keeps redaction in one place and gives tests a
      stable schema to assert on.

    How:
      Stores the destination stream, component label and minimum level, and
      exposes :meth:`debug`, :meth:`info`, :meth:`warning` and :meth:`error`
      on top of :meth:`log`.
    """

    stream: Any = field(default_factory=lambda: sys.stderr)
    component: str = "mailscrub"
    level: str = "INFO"

    def enabled_for(self, level: str) -> bool:
        """Return whether entries at ``level`` are written."""

        return LEVELS.get(level.upper(), 0) >= LEVELS.get(self.level.upper(), 0)

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit a structured JSON log entry.

        Args:
          level: Severity name (``"debug"``, ``"info"``, ``"warn"``, ``"error"``).
          message: Event name or short description.
          extra: Context fields, redacted recursively before writing.
        """

        if not self.enabled_for(level):
            return
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update(self._redact(extra))
        json.dump(payload, self.stream, separators=(",", ":"), default=str)
        self.stream.write("\n")
        self.stream.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("DEBUG", message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)

    def child(self, component: str) -> "JsonLogger":
        """Return a logger sharing this stream and level under ``component``."""

        return JsonLogger(stream=self.stream, component=component, level=self.level)

    @staticmethod
    def _redact(data: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``data`` with sensitive keys masked."""

        sensitive_keys = {"subject", "body", "preview", "snippet"}
        result: Dict[str, Any] = {}
        for key, value in data.items():
            if key in sensitive_keys:
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = JsonLogger._redact(value)
            else:
                result[key] = value
        return result


def get_logger(component: str, *, level: str = "INFO", stream: Any = None) -> JsonLogger:
    """Construct a :class:`JsonLogger` for ``component``.

    Args:
      component: Logical subsystem name included in every entry.
      level: Minimum severity written.
      stream: Destination, defaults to ``sys.stderr`` at call time.

    Returns:
      Configured :class:`JsonLogger`.
    """

    return JsonLogger(stream=stream if stream is not None else sys.stderr, component=component, level=level)
