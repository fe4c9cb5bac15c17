"""Exception hierarchy shared by the aggregation core, the source and the CLI.

Errors are chained with ``raise ... from exc`` so the CLI can print the
whole cause chain, one ``cause:`` line per link.
"""
from __future__ import annotations


class OplogStatsError(Exception):
    """Base class for every error raised by oplogstats."""


class ConfigurationError(OplogStatsError):
    """Invalid run parameters, rejected before the stream is touched."""


class ExtractionError(OplogStatsError):
    """A single oplog document could not be turned into (key, size)."""


class MissingFieldError(ExtractionError):
    """A required string field is absent from an oplog document."""

    def __init__(self, field: str) -> None:
        super().__init__(f"missing {field!r} entry in oplog document")
        self.field = field


class DocumentSizeError(ExtractionError):
    """The document could not be serialized to BSON to measure its size."""


class ProducerError(OplogStatsError):
    """The upstream document producer failed while being pulled."""


class SourceError(OplogStatsError):
    """Connecting to or querying the oplog failed."""


def format_error(exc: BaseException) -> list[str]:
    """Return ``error:`` plus one ``cause:`` line per chained exception."""
    lines = [f"error: {exc}"]
    cause = exc.__cause__
    while cause is not None:
        lines.append(f"  cause: {cause}")
        cause = cause.__cause__
    return lines
