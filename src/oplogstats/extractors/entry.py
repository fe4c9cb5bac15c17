"""Turn one raw oplog document into a grouping key and a byte size.

The key is ``"<ns>:<op>"``, e.g. ``"shop.orders:i"`` for an insert into
``shop.orders``. The size is the length of the document's BSON encoding,
which is what the oplog actually stores.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import bson
from bson.errors import BSONError

from ..errors import DocumentSizeError, MissingFieldError

KEY_SEPARATOR = ":"

# Database and collection the entry applies to.
NS_FIELD = "ns"
# Operation code ("i", "u", "d", "c", "n").
OP_FIELD = "op"

OplogDocument = Mapping[str, Any]


@dataclass(frozen=True)
class ExtractedEntry:
    key: str
    size: int


def entry_key(ns: str, op: str) -> str:
    return f"{ns}{KEY_SEPARATOR}{op}"


def document_size(document: OplogDocument) -> int:
    """Length in bytes of the document's BSON wire form."""
    try:
        return len(bson.encode(document))
    except (BSONError, TypeError, ValueError, OverflowError) as exc:
        raise DocumentSizeError(
            "failed to serialize document into bytes to compute its size"
        ) from exc


def _required_str(document: OplogDocument, field: str) -> str:
    value = document.get(field)
    if not isinstance(value, str):
        raise MissingFieldError(field)
    return value


def extract(document: OplogDocument) -> ExtractedEntry:
    """Derive ``(key, size)`` from an oplog document.

    Raises:
        DocumentSizeError: the document cannot be BSON-encoded.
        MissingFieldError: ``ns`` or ``op`` is absent or not a string.
    """
    size = document_size(document)
    key = entry_key(
        _required_str(document, NS_FIELD),
        _required_str(document, OP_FIELD),
    )
    return ExtractedEntry(key=key, size=size)
