"""Running per-key aggregates over a stream of oplog entries."""
from __future__ import annotations

from dataclasses import dataclass

from ..extractors.entry import OplogDocument, extract


@dataclass
class EntryAggregate:
    """Document count and cumulative BSON size for one grouping key.

    Entries are created on first observation, so ``doc_count`` is at least 1
    for every key held by an :class:`AggregateTable`.
    """

    doc_count: int = 0
    total_size: int = 0


class AggregateTable:
    """Mapping of ``"<ns>:<op>"`` keys to their running aggregates.

    Usage::

        table = AggregateTable()
        for doc in cursor:
            table.add_document(doc)

        for key, agg in table.snapshot():
            print(key, agg.doc_count, agg.total_size)

    Nothing is ever evicted; memory grows with the number of distinct keys,
    not with the length of the stream.
    """

    def __init__(self) -> None:
        self._entries: dict[str, EntryAggregate] = {}
        self._processed = 0
        self._total_size = 0

    def _get_or_create(self, key: str) -> EntryAggregate:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = EntryAggregate()
        return entry

    def update(self, key: str, size: int) -> None:
        """Count one document of ``size`` bytes under ``key``."""
        entry = self._get_or_create(key)
        entry.doc_count += 1
        entry.total_size += size
        self._total_size += size
        self._processed += 1

    def add_document(self, document: OplogDocument) -> None:
        """Extract and count a raw document.

        An :class:`~oplogstats.errors.ExtractionError` propagates and the
        table is left unchanged.
        """
        extracted = extract(document)
        self.update(extracted.key, extracted.size)

    def processed_count(self) -> int:
        return self._processed

    def has_processed_any(self) -> bool:
        return self._processed > 0

    def total_size(self) -> int:
        """Sum of ``total_size`` over all keys."""
        return self._total_size

    def get(self, key: str) -> EntryAggregate | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return EntryAggregate(entry.doc_count, entry.total_size)

    def snapshot(self) -> list[tuple[str, EntryAggregate]]:
        """Return copies of all entries, largest ``total_size`` first.

        Equal sizes are ordered by key, lexicographically, so the ranking is
        deterministic regardless of insertion order.
        """
        rows = [
            (key, EntryAggregate(e.doc_count, e.total_size))
            for key, e in self._entries.items()
        ]
        rows.sort(key=lambda row: (-row[1].total_size, row[0]))
        return rows

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"AggregateTable(keys={len(self._entries)}, "
            f"processed={self._processed})"
        )
