"""Remote store adapter: record CRUD and blob upload.

The core only depends on :class:`RemoteStore`. :class:`MongoStore` is the
MongoDB implementation: records live in collections, blobs in GridFS buckets
served publicly by ``carelog.storage_web``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from bson import ObjectId
from bson.errors import InvalidId
from gridfs import GridFSBucket
from pymongo.errors import PyMongoError

from carelog.configs import STORAGE_CONFIG
from carelog.errors import StoreError

logger = logging.getLogger(__name__)

ASCENDING = 1
DESCENDING = -1

Order = Sequence[Tuple[str, int]]


class RemoteStore(ABC):
    """Contract consumed by the engines and the mutation service."""

    @abstractmethod
    async def insert(self, table: str, record: Dict[str, Any]) -> str:
        """Insert a record and return its id."""

    @abstractmethod
    async def select(self, table: str, filter: Dict[str, Any], order: Order = ()) -> List[Dict[str, Any]]:
        """Return matching records (with an ``id`` key) in the requested order."""

    @abstractmethod
    async def delete(self, table: str, record_id: str) -> None:
        """Delete a record by id; a missing record is a StoreError."""

    @abstractmethod
    async def upload_blob(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        """Store binary data under ``path`` in ``bucket``."""

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Public URL of an uploaded blob."""


def _to_object_id(record_id: str) -> ObjectId:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError) as e:
        raise StoreError(code="invalid_record_id") from e


def _serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(doc)
    record["id"] = str(record.pop("_id"))
    return record


class MongoStore(RemoteStore):
    """RemoteStore backed by a pymongo database and GridFS buckets.

    Blocking pymongo calls run through ``asyncio.to_thread`` so a pending
    request only suspends the coroutine that issued it.
    """

    def __init__(
        self,
        db,
        public_base_url: Optional[str] = None,
        bucket_factory: Callable[..., Any] = GridFSBucket,
    ):
        self.db = db
        self.public_base_url = (public_base_url or STORAGE_CONFIG["public_base_url"]).rstrip("/")
        self._bucket_factory = bucket_factory
        self._buckets: Dict[str, Any] = {}

    def _bucket(self, name: str):
        if name not in self._buckets:
            self._buckets[name] = self._bucket_factory(self.db, bucket_name=name)
        return self._buckets[name]

    async def insert(self, table: str, record: Dict[str, Any]) -> str:
        try:
            result = await asyncio.to_thread(self.db[table].insert_one, dict(record))
        except PyMongoError as e:
            logger.error(f"Store insert failed: table={table}, error={e}")
            raise StoreError(str(e)) from e
        record_id = str(result.inserted_id)
        logger.info(f"Record inserted: table={table}, id={record_id}")
        return record_id

    async def select(self, table: str, filter: Dict[str, Any], order: Order = ()) -> List[Dict[str, Any]]:
        sort = list(order)
        if sort and all(field != "_id" for field, _ in sort):
            # Equal sort keys fall back to insertion order
            sort.append(("_id", ASCENDING))

        def run():
            cursor = self.db[table].find(dict(filter))
            if sort:
                cursor = cursor.sort(sort)
            return [_serialize(doc) for doc in cursor]

        try:
            return await asyncio.to_thread(run)
        except PyMongoError as e:
            logger.error(f"Store select failed: table={table}, filter={filter}, error={e}")
            raise StoreError(str(e)) from e

    async def delete(self, table: str, record_id: str) -> None:
        object_id = _to_object_id(record_id)
        try:
            result = await asyncio.to_thread(self.db[table].delete_one, {"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Store delete failed: table={table}, id={record_id}, error={e}")
            raise StoreError(str(e)) from e
        if result.deleted_count == 0:
            raise StoreError(code="record_not_found")
        logger.info(f"Record deleted: table={table}, id={record_id}")

    async def upload_blob(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        metadata = {"contentType": content_type} if content_type else None
        try:
            await asyncio.to_thread(self._bucket(bucket).upload_from_stream, path, data, metadata=metadata)
        except PyMongoError as e:
            logger.error(f"Blob upload failed: bucket={bucket}, path={path}, error={e}")
            raise StoreError(code="upload_error") from e
        logger.info(f"Blob uploaded: bucket={bucket}, path={path}, size={len(data)}")

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{quote(bucket)}/{quote(path)}"
