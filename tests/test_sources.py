"""Tests for the MongoDB oplog source (no live MongoDB required)."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from oplogstats.errors import SourceError
from oplogstats.sources.mongodb import OplogSource, resolve_limit


def _source_with_mock_client() -> tuple[OplogSource, MagicMock]:
    client = MagicMock()
    collection = MagicMock()
    client.__getitem__.return_value.__getitem__.return_value = collection
    return OplogSource(client), collection


class TestConnect:
    def test_no_credentials_without_username(self) -> None:
        with patch("oplogstats.sources.mongodb.MongoClient") as mock_client:
            OplogSource.connect("db1", 27018)
        mock_client.assert_called_once_with(host="db1", port=27018)

    def test_credentials_with_username(self) -> None:
        with patch("oplogstats.sources.mongodb.MongoClient") as mock_client:
            OplogSource.connect("db1", 27017, username="admin", password="s3cret", auth_db="admin")
        mock_client.assert_called_once_with(
            host="db1", port=27017, username="admin", password="s3cret", authSource="admin"
        )

    def test_client_error_wrapped(self) -> None:
        with patch("oplogstats.sources.mongodb.MongoClient", side_effect=ValueError("bad port")):
            with pytest.raises(SourceError) as info:
                OplogSource.connect("db1", 27017)
        assert isinstance(info.value.__cause__, ValueError)

    def test_custom_collection(self) -> None:
        with patch("oplogstats.sources.mongodb.MongoClient") as mock_client:
            source = OplogSource.connect("db1", 27017, db_name="other", collection="oplog.$main")
            _ = source.collection
        mock_client.return_value.__getitem__.assert_called_with("other")
        mock_client.return_value.__getitem__.return_value.__getitem__.assert_called_with("oplog.$main")


class TestQueries:
    def test_estimated_count(self) -> None:
        source, collection = _source_with_mock_client()
        collection.estimated_document_count.return_value = 1234
        assert source.estimated_count() == 1234

    def test_estimated_count_error(self) -> None:
        source, collection = _source_with_mock_client()
        collection.estimated_document_count.side_effect = ServerSelectionTimeoutError("down")
        with pytest.raises(SourceError):
            source.estimated_count()

    def test_documents_newest_first(self) -> None:
        source, collection = _source_with_mock_client()
        collection.find.return_value = iter([{"ns": "a", "op": "i"}])
        docs = list(source.documents(5))
        assert docs == [{"ns": "a", "op": "i"}]
        collection.find.assert_called_once_with({}, sort=[("$natural", -1)], limit=5)

    def test_zero_limit_skips_query(self) -> None:
        source, collection = _source_with_mock_client()
        assert list(source.documents(0)) == []
        collection.find.assert_not_called()

    def test_find_error_wrapped(self) -> None:
        source, collection = _source_with_mock_client()
        collection.find.side_effect = OperationFailure("not authorized")
        with pytest.raises(SourceError):
            source.documents(10)


class TestResolveLimit:
    def test_user_limit_wins(self) -> None:
        source, collection = _source_with_mock_client()
        assert resolve_limit(7, source) == 7
        collection.estimated_document_count.assert_not_called()

    def test_user_limit_zero_is_respected(self) -> None:
        source, _ = _source_with_mock_client()
        assert resolve_limit(0, source) == 0

    def test_falls_back_to_estimate(self) -> None:
        source, collection = _source_with_mock_client()
        collection.estimated_document_count.return_value = 42
        assert resolve_limit(None, source) == 42

    def test_estimate_failure_has_context(self) -> None:
        source, collection = _source_with_mock_client()
        collection.estimated_document_count.side_effect = OperationFailure("boom")
        with pytest.raises(SourceError, match="number of documents"):
            resolve_limit(None, source)
