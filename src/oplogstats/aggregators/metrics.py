"""Derived metrics over an aggregate snapshot: share and human-readable size."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .table import EntryAggregate

SHARE_THRESHOLD = 0.01
BELOW_THRESHOLD_TEXT = "< 0.01"

# Conventional decimal units, 1 KB == 1000 B.
_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB")
_SIZE_DIVIDER = 1000


def share(part: int, total: int) -> float:
    """Percentage of ``part`` in ``total``; 0.0 when ``total`` is zero."""
    if total == 0:
        return 0.0
    return part * 100.0 / total


def format_share(value: float) -> str:
    """Render a share with two decimals, or ``"< 0.01"`` for tiny shares.

    Rounding is half-up on the shortest decimal form of the float, so
    ``0.015`` renders as ``"0.02"``.
    """
    if value < SHARE_THRESHOLD:
        return BELOW_THRESHOLD_TEXT
    rounded = Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{rounded:.2f}"


def human_size(size: int) -> str:
    """File-size style rendering with 1000-based units.

    >>> human_size(150)
    '150 B'
    >>> human_size(1500)
    '1.5 KB'
    """
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    value = float(size)
    idx = 0
    while value >= _SIZE_DIVIDER and idx < len(_SIZE_UNITS) - 1:
        value /= _SIZE_DIVIDER
        idx += 1
    if idx == 0:
        return f"{size} B"
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[idx]}"


@dataclass(frozen=True)
class EntryMetrics:
    """One ranked row, ready for rendering."""

    key: str
    doc_count: int
    total_size: int
    share: float

    @property
    def size_text(self) -> str:
        return human_size(self.total_size)

    @property
    def share_text(self) -> str:
        return format_share(self.share)


def derive(snapshot: list[tuple[str, EntryAggregate]]) -> list[EntryMetrics]:
    """Attach shares to a ranked snapshot, preserving its order."""
    total = sum(agg.total_size for _, agg in snapshot)
    return [
        EntryMetrics(
            key=key,
            doc_count=agg.doc_count,
            total_size=agg.total_size,
            share=share(agg.total_size, total),
        )
        for key, agg in snapshot
    ]
