"""Shared pytest fixtures for oplogstats tests."""
from __future__ import annotations

from typing import Any, Iterator

import pytest


def make_oplog_doc(ns: str = "shop.orders", op: str = "i", **fields: Any) -> dict[str, Any]:
    """Build a minimal oplog entry; extra fields go into ``o``."""
    return {"ts": 1, "v": 2, "ns": ns, "op": op, "o": dict(fields)}


class FailingProducer:
    """Yield the given documents, then raise ``exc`` on the next pull."""

    def __init__(self, docs: list[dict[str, Any]], exc: Exception) -> None:
        self._docs = list(docs)
        self._exc = exc
        self.pulled = 0

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return self

    def __next__(self) -> dict[str, Any]:
        if self.pulled < len(self._docs):
            doc = self._docs[self.pulled]
            self.pulled += 1
            return doc
        raise self._exc


class CountingProducer:
    """Iterator over ``docs`` that records how many were pulled."""

    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._it = iter(docs)
        self.pulled = 0

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return self

    def __next__(self) -> dict[str, Any]:
        doc = next(self._it)
        self.pulled += 1
        return doc


@pytest.fixture()
def oplog_docs() -> list[dict[str, Any]]:
    return [
        make_oplog_doc("shop.orders", "i", _id=1, total=10),
        make_oplog_doc("shop.orders", "i", _id=2, total=25),
        make_oplog_doc("shop.orders", "u", _id=1, total=11),
        make_oplog_doc("shop.users", "d", _id=7),
        make_oplog_doc("admin.$cmd", "c", drop="tmp"),
    ]
