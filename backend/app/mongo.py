"""MongoDB connection handle for the access log.

Created once at application startup and injected wherever the access
log is needed. A failed connection leaves the handle unavailable instead of
raising, so the relational features keep serving.
"""
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class MongoConnection:
    """Owns a MongoClient and the database it points at."""

    def __init__(self, url: str, db_name: str, timeout_ms: int = 2000) -> None:
        self.url = url
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self.client: Optional[MongoClient] = None
        self.db: Optional[Database] = None

    @property
    def available(self) -> bool:
        return self.db is not None

    def connect(self) -> bool:
        """Open the client and ping the server. Returns False when unreachable."""
        try:
            self.client = MongoClient(
                self.url,
                serverSelectionTimeoutMS=self.timeout_ms,
                connectTimeoutMS=self.timeout_ms,
                socketTimeoutMS=self.timeout_ms,
                tz_aware=True,
            )
            self.client.admin.command("ping")
            self.db = self.client[self.db_name]
        except PyMongoError as exc:
            logger.warning("MongoDB unavailable at %s, access log disabled: %s", self.url, exc)
            self.close()
            return False
        logger.info("Connected to MongoDB database '%s'", self.db_name)
        return True

    def collection(self, name: str) -> Collection:
        if self.db is None:
            raise RuntimeError("MongoDB is not connected")
        return self.db[name]

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self.db = None
