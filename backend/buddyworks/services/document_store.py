import asyncio
import copy
import logging
import os
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from buddyworks.errors import StoreFailure

logger = logging.getLogger(__name__)

USERS = "users"
SERVICES = "services"
BOOKINGS = "bookedServicesList"

Document = Dict[str, Any]


def _object_id(doc_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(doc_id)
    except (InvalidId, TypeError):
        return None


def _public(document: Document) -> Document:
    if "_id" in document:
        document["_id"] = str(document["_id"])
    return document


class DocumentStore:
    """Single-document find/insert/update/delete over named collections.

    Ids cross this interface as hex strings; a malformed id matches nothing.
    """

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    async def find(self, collection: str, filter: Optional[Document] = None) -> List[Document]:
        raise NotImplementedError

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    async def insert_one(self, collection: str, document: Document) -> str:
        raise NotImplementedError

    async def update_by_id(self, collection: str, doc_id: str, fields: Document) -> int:
        """Set ``fields`` on the document; returns the number of documents modified."""
        raise NotImplementedError

    async def delete_by_id(self, collection: str, doc_id: str) -> int:
        raise NotImplementedError


class MongoDocumentStore(DocumentStore):
    def __init__(self, uri: str, db_name: str):
        self._client: AsyncMongoClient = AsyncMongoClient(uri, connect=False)
        self._db = self._client[db_name]

    @classmethod
    def from_env(cls) -> "MongoDocumentStore":
        return cls(
            uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
            db_name=os.getenv("MONGODB_DB", "BuddyWorks"),
        )

    async def connect(self) -> None:
        try:
            await self._client.admin.command("ping")
        except PyMongoError:
            logger.exception("MongoDB ping failed at startup")
            return
        logger.info("Connected to MongoDB database %s", self._db.name)

    async def close(self) -> None:
        await self._client.close()

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
        except PyMongoError:
            logger.exception("MongoDB ping failed")
            return False
        return True

    async def find(self, collection: str, filter: Optional[Document] = None) -> List[Document]:
        try:
            return [_public(doc) async for doc in self._db[collection].find(filter or {})]
        except PyMongoError as exc:
            raise StoreFailure(f"Failed to read {collection}", exc) from exc

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        oid = _object_id(doc_id)
        if oid is None:
            return None
        try:
            found = await self._db[collection].find_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreFailure(f"Failed to read {collection}", exc) from exc
        return _public(found) if found is not None else None

    async def insert_one(self, collection: str, document: Document) -> str:
        try:
            result = await self._db[collection].insert_one(dict(document))
        except PyMongoError as exc:
            raise StoreFailure(f"Failed to insert into {collection}", exc) from exc
        return str(result.inserted_id)

    async def update_by_id(self, collection: str, doc_id: str, fields: Document) -> int:
        oid = _object_id(doc_id)
        if oid is None:
            return 0
        if not fields:
            return 0
        try:
            result = await self._db[collection].update_one({"_id": oid}, {"$set": fields})
        except PyMongoError as exc:
            raise StoreFailure(f"Failed to update {collection}", exc) from exc
        return result.modified_count

    async def delete_by_id(self, collection: str, doc_id: str) -> int:
        oid = _object_id(doc_id)
        if oid is None:
            return 0
        try:
            result = await self._db[collection].delete_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreFailure(f"Failed to delete from {collection}", exc) from exc
        return result.deleted_count


class InMemoryDocumentStore(DocumentStore):
    """Process-local store with MongoDB's equality-filter and $set semantics."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._collections: Dict[str, Dict[str, Document]] = {}

    def _rows(self, collection: str) -> Dict[str, Document]:
        return self._collections.setdefault(collection, {})

    @staticmethod
    def _matches(document: Document, filter: Document) -> bool:
        return all(document.get(key) == value for key, value in filter.items())

    async def find(self, collection: str, filter: Optional[Document] = None) -> List[Document]:
        async with self._lock:
            rows = self._rows(collection).values()
            return [copy.deepcopy(doc) for doc in rows if self._matches(doc, filter or {})]

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        async with self._lock:
            found = self._rows(collection).get(doc_id)
            return copy.deepcopy(found) if found is not None else None

    async def insert_one(self, collection: str, document: Document) -> str:
        doc_id = str(ObjectId())
        async with self._lock:
            self._rows(collection)[doc_id] = {**copy.deepcopy(document), "_id": doc_id}
        return doc_id

    async def update_by_id(self, collection: str, doc_id: str, fields: Document) -> int:
        async with self._lock:
            current = self._rows(collection).get(doc_id)
            if current is None:
                return 0
            changed = {key: value for key, value in fields.items() if key not in current or current[key] != value}
            if not changed:
                return 0
            current.update(copy.deepcopy(changed))
            return 1

    async def delete_by_id(self, collection: str, doc_id: str) -> int:
        async with self._lock:
            return 1 if self._rows(collection).pop(doc_id, None) is not None else 0


def store_from_env() -> DocumentStore:
    backend = os.getenv("STORE_BACKEND", "mongo").strip().lower()
    if backend == "memory":
        logger.info("Using in-memory document store")
        return InMemoryDocumentStore()
    return MongoDocumentStore.from_env()
