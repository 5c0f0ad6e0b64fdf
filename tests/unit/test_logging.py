"""
Module: tests/unit/test_logging.py

What:
    Check the JSON log format, level threshold and redaction of message
    content.

Why:
    Logs go to standard error next to the cleaned message on standard output;
    they must stay machine-readable and must never carry subjects or bodies.
"""

import io
import json

from mailscrub.utils.logging import REDACTED, JsonLogger, get_logger


def _entries(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_entries_are_single_line_json():
    stream = io.StringIO()
    logger = get_logger("mailscrub.test", stream=stream)
    logger.info("message_filtered", uid=4, dropped_blocks=2)
    (entry,) = _entries(stream)
    assert entry["msg"] == "message_filtered"
    assert entry["lvl"] == "INFO"
    assert entry["component"] == "mailscrub.test"
    assert entry["uid"] == 4
    assert "ts" in entry


def test_sensitive_keys_are_redacted():
    stream = io.StringIO()
    JsonLogger(stream=stream).info("fetched", subject="Pay rise", context={"body": "secret", "uid": 1})
    (entry,) = _entries(stream)
    assert entry["subject"] == REDACTED
    assert entry["context"] == {"body": REDACTED, "uid": 1}


def test_level_threshold():
    stream = io.StringIO()
    logger = JsonLogger(stream=stream, level="INFO")
    logger.debug("hidden")
    logger.warning("shown")
    assert [entry["msg"] for entry in _entries(stream)] == ["shown"]

    verbose = logger.child("mailscrub.imap")
    assert verbose.component == "mailscrub.imap"
    assert not verbose.enabled_for("DEBUG")
    assert JsonLogger(stream=stream, level="DEBUG").enabled_for("debug")


def test_default_stream_is_stderr(capsys):
    get_logger("mailscrub.test").error("boom", error="x")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err)["msg"] == "boom"
