"""mailscrub command-line interface.

What:
  Provide the Typer entry point that prints the newest unread message with its
  noise removed, or filters a body file for a given sender.

Why:
  Both modes share the same rule file and engine but apply different rule
  subsets; wiring them in one command keeps exit codes and error reporting
  identical for cron jobs, mail hooks and manual use.

How:
  Load and compile ``filter.yaml`` first. With ``--from`` and ``--input`` the
  body file is filtered with the sender's block rules only. Otherwise read the
  ``IMAP_*`` settings, search for unseen messages from the configured senders,
  fetch the newest one, filter it with global and sender rules, print it and
  optionally flag it deleted. Typed errors raised by the collaborators are
  mapped to exit codes here and nowhere else.

Interfaces:
  ``app`` (Typer application), ``scrub``, ``main``.

Invariants & Safety:
  - Exit codes: ``0`` success or empty mailbox, ``1`` configuration, input,
    mailbox or header failure, ``2`` usage error.
  - Standard output carries only the rendered message; diagnostics go to
    standard error.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

import typer

from .config.loader import ConfigError, load_filter, load_imap_settings, read_input
from .core.filter import FilterConfig, adhoc_filter, inbound_filter, run_filter
from .core.normalize import render_lines
from .imap.client import MailboxClient, MailProtocolError, NoMessageFound
from .imap.search import build_search
from .utils.logging import JsonLogger, get_logger
from .utils.mime import MalformedHeader, Message, format_date


app = typer.Typer(help="Print the newest unread message without its boilerplate", add_completion=False)


def _fail(logger: JsonLogger, event: str, exc: Exception) -> typer.Exit:
    """Report ``exc`` on stderr and return the exit to raise."""

    logger.error(event, error=str(exc))
    typer.echo(f"err: {exc}", err=True)
    return typer.Exit(code=1)


def _sender_label(config: FilterConfig) -> str:
    return config.sender.from_substring if config.sender is not None else ""


def _echo_lines(lines: Iterable[str]) -> None:
    for line in lines:
        typer.echo(line)


def render_message(message: Message, filtered: str) -> List[str]:
    """Return the printed representation of an inbound message."""

    return [
        f"from: {message.from_}",
        f"date: {format_date(message.date)}",
        f"subject: {message.subject}",
        "body:",
        *render_lines(filtered),
    ]


def render_body(filtered: str) -> List[str]:
    """Return the printed representation of an ad-hoc filtered body."""

    return ["body:", *render_lines(filtered)]


@app.command()
def scrub(
    from_: str = typer.Option("", "--from", help="From e-mail address to filter body based on it"),
    input_: Optional[Path] = typer.Option(None, "--input", help="File that includes body to filter (requires --from)"),
    delete: bool = typer.Option(False, "--delete", help="Delete the message after fetching it"),
    filter_path: Optional[Path] = typer.Option(
        None,
        "--filter",
        help="Filter rules file (defaults to $MAILSCRUB_FILTER_PATH or ./filter.yaml)",
    ),
    show_original: bool = typer.Option(False, "--show-original", help="Also write the unfiltered body to stderr"),
    verbose: bool = typer.Option(False, "--verbose", help="Emit debug log lines"),
) -> None:
    """Fetch, filter and print the newest unread message.

    What:
      Run either the ad-hoc mode (``--from`` with ``--input``) or the inbound
      mailbox mode.

    Why:
      The ad-hoc mode lets operators try sender rules against a saved body
      without touching the mailbox.

    How:
      See the module docstring; every failure is converted to
      :class:`typer.Exit` with the documented exit code.
    """

    logger = get_logger("mailscrub.cli", level="DEBUG" if verbose else "INFO")

    if input_ is not None and not from_:
        raise typer.BadParameter("--input requires --from", param_hint="'--input'")

    try:
        loaded = load_filter(filter_path)
    except ConfigError as exc:
        raise _fail(logger, "filter_load_failed", exc) from exc
    logger.debug("filter_loaded", path=str(loaded.path), checksum=loaded.checksum)

    if from_ and input_ is not None:
        try:
            body = read_input(input_)
        except ConfigError as exc:
            raise _fail(logger, "input_read_failed", exc) from exc
        if show_original:
            typer.echo(f"original_body: \n{body}", err=True)
        config = adhoc_filter(loaded.rules, from_)
        outcome = run_filter(body, config)
        logger.debug(
            "adhoc_filtered", sender_rule=_sender_label(config), dropped_blocks=outcome.dropped_blocks
        )
        _echo_lines(render_body(outcome.text))
        return

    try:
        settings = load_imap_settings()
    except ConfigError as exc:
        raise _fail(logger, "imap_settings_invalid", exc) from exc

    criteria = build_search(loaded.rules.sender_searches)
    try:
        with MailboxClient(settings, logger=logger.child("mailscrub.imap")) as mailbox:
            message = mailbox.fetch_newest(criteria)
            config = inbound_filter(loaded.rules, message.from_)
            outcome = run_filter(message.body, config)
            logger.info(
                "message_filtered",
                uid=message.uid,
                sender_rule=_sender_label(config),
                dropped_blocks=outcome.dropped_blocks,
                dropped_lines=outcome.dropped_lines,
            )
            if show_original:
                typer.echo(f"original_body: \n{message.body}", err=True)
            _echo_lines(render_message(message, outcome.text))
            if delete and message.uid is not None:
                mailbox.delete(message.uid)
                typer.echo(f"Deleted the message: {message.uid}", err=True)
    except NoMessageFound as exc:
        logger.info("mailbox_empty", query=criteria)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=0) from None
    except MailProtocolError as exc:
        raise _fail(logger, "mailbox_failed", exc) from exc
    except MalformedHeader as exc:
        raise _fail(logger, "header_invalid", exc) from exc


def main() -> None:
    """Execute the Typer application entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
