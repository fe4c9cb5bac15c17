"""Stream driver: pull oplog documents one by one into an AggregateTable.

The driver never buffers ahead. A failure, whether raised by the producer
or by extraction, stops the loop but leaves everything aggregated so far in
the table, which the caller gets back inside :class:`RunOutcome`. The
underlying exception is kept as ``__cause__`` of the reported error.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .aggregators.table import AggregateTable
from .errors import ConfigurationError, ExtractionError, OplogStatsError, ProducerError

TableCallback = Callable[[AggregateTable], None]

_END = object()


class DriverState(enum.Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunOutcome:
    """Terminal state of a run plus the (possibly partial) table."""

    state: DriverState
    table: AggregateTable
    error: OplogStatsError | None = None

    @property
    def ok(self) -> bool:
        return self.state is DriverState.COMPLETED

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


def validate(limit: int, report_every: int | None) -> None:
    """Reject bad run parameters before anything is pulled."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ConfigurationError(f"limit must be a non-negative integer, got {limit!r}")
    if report_every is not None and (
        isinstance(report_every, bool)
        or not isinstance(report_every, int)
        or report_every <= 0
    ):
        raise ConfigurationError(
            f"report interval has to be positive, got {report_every!r}"
        )


def run(
    producer: Iterable[Mapping[str, Any]],
    table: AggregateTable,
    limit: int,
    report_every: int | None = None,
    on_report: TableCallback | None = None,
    on_progress: TableCallback | None = None,
) -> RunOutcome:
    """Aggregate at most ``limit`` documents from ``producer`` into ``table``.

    Args:
        producer:     Any iterable of oplog documents; a pymongo cursor or a
                      plain list both work.
        table:        Mutated in place and returned in the outcome.
        limit:        Maximum number of documents to process.
        report_every: Call ``on_report`` each time the processed count is a
                      multiple of this value.
        on_report:    Read-only snapshot hook, called synchronously.
        on_progress:  Called after every processed document.

    Raises:
        ConfigurationError: ``limit`` or ``report_every`` is invalid. No
        other error escapes; they are captured in the outcome.
    """
    validate(limit, report_every)

    remaining = limit
    if remaining == 0:
        return RunOutcome(DriverState.COMPLETED, table)

    try:
        documents = iter(producer)
    except Exception as exc:
        return _failed(table, ProducerError("failed to get a document from the oplog"), exc)

    while remaining > 0:
        try:
            doc = next(documents, _END)
        except Exception as exc:
            return _failed(table, ProducerError("failed to get a document from the oplog"), exc)
        if doc is _END:
            break

        try:
            table.add_document(doc)  # type: ignore[arg-type]
        except ExtractionError as exc:
            return _failed(table, ExtractionError("failed to add info from an oplog document"), exc)

        remaining -= 1
        if on_progress is not None:
            on_progress(table)
        if report_every and on_report is not None:
            if table.processed_count() % report_every == 0:
                on_report(table)

    return RunOutcome(DriverState.COMPLETED, table)


def _failed(table: AggregateTable, error: OplogStatsError, cause: BaseException) -> RunOutcome:
    error.__cause__ = cause
    return RunOutcome(DriverState.FAILED, table, error)
