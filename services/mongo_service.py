"""
MongoDB service for document operations.
"""
import datetime as dt
import threading
from datetime import timezone
from typing import Any, List, Optional

from bson import json_util
from bson.errors import BSONError
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from logger_config import get_logger
from utils.exceptions import MongoOperationError

logger = get_logger(__name__)


class MongoService:
    """Service for MongoDB operations."""

    def __init__(
        self,
        dsn: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        database: str = "local",
        collection: str = "demo",
        timeout: int = 10
    ) -> None:
        """
        Initialize MongoDB service.

        Args:
            dsn: MongoDB connection string
            username: Optional user, overrides credentials in the DSN
            password: Optional password, overrides credentials in the DSN
            database: Database holding the demo collection
            collection: Collection records are written to and read from
            timeout: Seconds allowed for server selection, connect and socket I/O
        """
        self.dsn = dsn
        self.username = username
        self.password = password
        self.database = database
        self.collection_name = collection
        self.timeout = timeout
        self._client: Optional[MongoClient] = None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> MongoClient:
        """Lazy initialization of MongoDB client, once per service."""
        if self._client is not None:
            return self._client
        with self._client_lock:
            if self._client is None:
                timeout_ms = self.timeout * 1000
                kwargs: dict = {
                    'serverSelectionTimeoutMS': timeout_ms,
                    'connectTimeoutMS': timeout_ms,
                    'socketTimeoutMS': timeout_ms,
                }
                if self.username:
                    kwargs['username'] = self.username
                if self.password:
                    kwargs['password'] = self.password
                try:
                    self._client = MongoClient(self.dsn, **kwargs)
                except (PyMongoError, ValueError) as e:
                    logger.error(f'MongoDB client creation failed: {str(e)}')
                    raise MongoOperationError(str(e), operation='connect') from e
            return self._client

    @property
    def collection(self) -> Collection:
        return self.client[self.database][self.collection_name]

    def close(self) -> None:
        """Close the client and its connection pool."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def insert_request(self, host: str, url: str) -> Any:
        """
        Insert one record describing an incoming request.

        Args:
            host: Host header of the request
            url: Full request URL

        Returns:
            The inserted document id

        Raises:
            MongoOperationError: If the insert fails
        """
        document = {
            'host': host,
            'url': url,
            'time': dt.datetime.now(timezone.utc).isoformat(timespec='seconds'),
        }
        try:
            result = self.collection.insert_one(document)
        except PyMongoError as e:
            logger.error(
                f'MongoDB insert_one failed for {self.database}.{self.collection_name}: {str(e)}'
            )
            raise MongoOperationError(str(e), operation='insert_one') from e
        return result.inserted_id

    def dump_documents(self) -> List[str]:
        """
        Read every document in the collection.

        Returns:
            One Extended JSON line per document

        Raises:
            MongoOperationError: If the query or decoding a document fails
        """
        lines = []
        try:
            with self.collection.find({}) as cursor:
                for document in cursor:
                    lines.append(json_util.dumps(document))
        except (PyMongoError, BSONError) as e:
            logger.error(
                f'MongoDB find failed for {self.database}.{self.collection_name}: {str(e)}'
            )
            raise MongoOperationError(str(e), operation='find') from e
        return lines
