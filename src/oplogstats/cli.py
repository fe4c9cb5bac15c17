"""oplogstats CLI entry point.

Usage:
    oplogstats [--host HOST] [--port PORT] [-u USER [-p PASS]]
               [--authenticationDatabase DB] [--limit N] [--printAfter N]

Prints a table of oplog activity per ``<namespace>:<op>`` with document
counts, total BSON size and share of the total size.
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime

import click
from rich.console import Console
from rich.logging import RichHandler

from .aggregators.table import AggregateTable
from .config import settings
from .driver import RunOutcome, run
from .errors import OplogStatsError, format_error
from .sources.mongodb import OplogSource, resolve_limit
from .visualization.tables import print_stats, progress_bar

__version__ = "0.1.0"

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────────────


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _validate_print_after(ctx: click.Context, param: click.Parameter, value: int | None) -> int | None:
    if value is not None and value <= 0:
        raise click.BadParameter("Value of --printAfter has to be positive")
    return value


def _fail(exc: BaseException) -> None:
    for line in format_error(exc):
        err_console.print(line, markup=False, highlight=False)
    sys.exit(1)


def _obtain_stats(source: OplogSource, limit: int | None, print_after: int | None) -> RunOutcome:
    """Resolve the limit and stream the oplog into a fresh table."""
    effective_limit = resolve_limit(limit, source)
    cursor = source.documents(effective_limit)

    console.print(f"Obtaining stats (limit: {effective_limit})...")
    table = AggregateTable()

    with progress_bar(console) as progress:
        task = progress.add_task("oplog", total=effective_limit)

        def report(current: AggregateTable) -> None:
            out = progress.console
            out.print()
            out.print(
                f"Processed {current.processed_count()} documents at "
                f"{datetime.now().astimezone():%Y-%m-%d %H:%M:%S %z}"
            )
            print_stats(current, out)
            out.print()

        return run(
            cursor,
            table,
            effective_limit,
            report_every=print_after,
            on_report=report,
            on_progress=lambda _: progress.advance(task),
        )


# ── Command ─────────────────────────────────────────────────────────────────


@click.command(context_settings={"help_option_names": ["--help"]})
@click.version_option(version=__version__, prog_name="oplogstats")
@click.option(
    "--host", "-h", default=settings.host, show_default=True,
    help="Resolvable hostname for the MongoDB instance to which to connect.",
)
@click.option(
    "--port", default=settings.port, type=click.IntRange(1, 65535), show_default=True,
    help="TCP port on which the MongoDB instance listens for client connections.",
)
@click.option(
    "--username", "-u", default=None,
    help="Username with which to authenticate to a MongoDB database that uses authentication.",
)
@click.option(
    "--password", "-p", default=None,
    help=(
        "Password with which to authenticate. To be prompted for the password, "
        "pass --username without --password or with --password=\"\"."
    ),
)
@click.option(
    "--authenticationDatabase", "auth_db", default=settings.auth_db, metavar="DBNAME",
    help="Authentication database where the specified --username has been created.",
)
@click.option(
    "--limit", "-l", default=None, type=click.IntRange(min=0), metavar="N",
    help="Maximal number of documents in the oplog to process.",
)
@click.option(
    "--printAfter", "print_after", default=settings.print_after, type=int, metavar="N",
    callback=_validate_print_after,
    help="Print statistics every time N documents have been processed.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
def main(
    host: str,
    port: int,
    username: str | None,
    password: str | None,
    auth_db: str | None,
    limit: int | None,
    print_after: int | None,
    verbose: bool,
) -> None:
    """Print statistics about a MongoDB oplog.

    \b
    Examples:
      oplogstats
      oplogstats --host db1 --limit 100000
      oplogstats -u admin --authenticationDatabase admin --printAfter 10000
    """
    _configure_logging(verbose)

    if username is not None and not password:
        password = click.prompt("Password", hide_input=True, err=True)

    try:
        source = OplogSource.connect(
            host, port, username=username, password=password, auth_db=auth_db,
            db_name=settings.oplog_db, collection=settings.oplog_collection,
        )
    except OplogStatsError as exc:
        _fail(exc)
        return

    try:
        outcome = _obtain_stats(source, limit, print_after)
    except OplogStatsError as exc:
        _fail(exc)
        return
    finally:
        source.close()
    logger.debug("Run finished in state %s", outcome.state.value)

    table = outcome.table
    if outcome.ok:
        console.print(f"Final stats after processing {table.processed_count()} documents:")
        print_stats(table, console)
        return

    if table.has_processed_any():
        console.print("Obtaining failed; showing last stats:")
        print_stats(table, console)
    if outcome.error is not None:
        _fail(outcome.error)


if __name__ == "__main__":
    main()
