"""pymongo implementation of the access log store."""
import functools
import logging
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.stores.interfaces import AccessLogStore, StoreUnavailableError
from app.timeutil import to_utc

logger = logging.getLogger(__name__)

ACCESS_LOG_COLLECTION = "access_log"


def ensure_indexes(collection: Collection) -> None:
    collection.create_index([("user_id", ASCENDING), ("event_id", ASCENDING)])
    collection.create_index([("timestamp", DESCENDING)])
    collection.create_index([("access_type", ASCENDING)])


def _to_entry(document: dict[str, Any]) -> dict[str, Any]:
    entry = dict(document)
    entry["id"] = str(entry.pop("_id"))
    return entry


def _unavailable_on_error(method):
    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except PyMongoError as exc:
            logger.warning("Access log store error in %s: %s", method.__name__, exc)
            raise StoreUnavailableError(str(exc)) from exc
    return wrapper


def _bson_datetime(value: datetime) -> datetime:
    # BSON dates are UTC; naive values are read as UTC by the driver
    return to_utc(value).replace(tzinfo=None)


def _object_id(entry_id: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(entry_id):
        return None
    return ObjectId(entry_id)


class MongoAccessLogStore(AccessLogStore):

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @_unavailable_on_error
    def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        document = dict(document)
        if isinstance(document.get("timestamp"), datetime):
            document["timestamp"] = _bson_datetime(document["timestamp"])
        result = self._collection.insert_one(document)
        document["_id"] = result.inserted_id
        return _to_entry(document)

    @_unavailable_on_error
    def list_page(self, limit: int, skip: int = 0) -> list[dict[str, Any]]:
        cursor = (
            self._collection.find()
            .sort([("timestamp", DESCENDING), ("_id", DESCENDING)])
            .skip(skip)
            .limit(limit)
        )
        return [_to_entry(doc) for doc in cursor]

    @_unavailable_on_error
    def list_by_period(self, start: datetime, end: datetime) -> list[dict[str, Any]]:
        window = {"$gte": _bson_datetime(start), "$lte": _bson_datetime(end)}
        cursor = self._collection.find({"timestamp": window}).sort("timestamp", DESCENDING)
        return [_to_entry(doc) for doc in cursor]

    @_unavailable_on_error
    def get(self, entry_id: str) -> Optional[dict[str, Any]]:
        oid = _object_id(entry_id)
        if oid is None:
            return None
        document = self._collection.find_one({"_id": oid})
        return _to_entry(document) if document else None

    @_unavailable_on_error
    def count(self, access_type: Optional[str] = None, since: Optional[datetime] = None) -> int:
        query: dict[str, Any] = {}
        if access_type is not None:
            query["access_type"] = access_type
        if since is not None:
            query["timestamp"] = {"$gte": _bson_datetime(since)}
        return self._collection.count_documents(query)

    @_unavailable_on_error
    def update(self, entry_id: str, fields: dict[str, Any]) -> bool:
        oid = _object_id(entry_id)
        if oid is None or not fields:
            return False
        result = self._collection.update_one({"_id": oid}, {"$set": fields})
        return result.matched_count > 0

    @_unavailable_on_error
    def delete(self, entry_id: str) -> bool:
        oid = _object_id(entry_id)
        if oid is None:
            return False
        result = self._collection.delete_one({"_id": oid})
        return result.deleted_count > 0
