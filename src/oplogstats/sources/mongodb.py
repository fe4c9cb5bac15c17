"""Access to the oplog of a MongoDB replica-set member.

Documents are read newest first (``$natural: -1``). When the user gives no
limit, the collection's estimated document count is used instead; it is an
estimate and the stream may end before or after it.
"""
from __future__ import annotations

import logging
from typing import Any, Iterator

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..errors import SourceError

logger = logging.getLogger(__name__)

DEFAULT_OPLOG_DB = "local"
DEFAULT_OPLOG_COLLECTION = "oplog.rs"


class OplogSource:
    """Thin wrapper around a :class:`pymongo.MongoClient` pointed at the oplog.

    Args:
        client:      Connected (or lazily connecting) Mongo client.
        db_name:     Database that holds the oplog.
        collection:  Oplog collection name.
    """

    def __init__(
        self,
        client: MongoClient,
        db_name: str = DEFAULT_OPLOG_DB,
        collection: str = DEFAULT_OPLOG_COLLECTION,
    ) -> None:
        self._client = client
        self._db_name = db_name
        self._collection_name = collection

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        auth_db: str | None = None,
        **kwargs: Any,
    ) -> "OplogSource":
        """Build a client; credentials are only sent when a username is set.

        Connecting to a server with authentication disabled therefore works
        without any credential options.
        """
        options: dict[str, Any] = {}
        if username is not None:
            options["username"] = username
            options["password"] = password
            if auth_db:
                options["authSource"] = auth_db
        logger.debug("Connecting to %s:%d (auth=%s)", host, port, username is not None)
        try:
            client: MongoClient = MongoClient(host=host, port=port, **options)
        except (PyMongoError, ValueError, TypeError) as exc:
            raise SourceError("failed to create a database client") from exc
        return cls(client, **kwargs)

    @property
    def collection(self) -> Collection:
        return self._client[self._db_name][self._collection_name]

    def estimated_count(self) -> int:
        try:
            count = self.collection.estimated_document_count()
        except PyMongoError as exc:
            raise SourceError("oplog query failed") from exc
        logger.debug("Estimated oplog size: %d documents", count)
        return int(count)

    def documents(self, limit: int) -> Iterator[dict[str, Any]]:
        """Return a cursor over at most ``limit`` documents, newest first."""
        if limit == 0:
            # pymongo reads limit=0 as "no limit"
            return iter(())
        try:
            return self.collection.find({}, sort=[("$natural", -1)], limit=limit)
        except PyMongoError as exc:
            raise SourceError("oplog query failed") from exc

    def close(self) -> None:
        self._client.close()


def resolve_limit(user_limit: int | None, source: OplogSource) -> int:
    """Use the user's limit, or fall back to the estimated oplog size."""
    if user_limit is not None:
        return user_limit
    try:
        return source.estimated_count()
    except SourceError as exc:
        raise SourceError("failed to get the number of documents in the oplog") from exc
