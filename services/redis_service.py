"""
Redis service for key-value operations.
"""
import threading

import redis
from typing import List, Optional, Tuple
from logger_config import get_logger
from utils.exceptions import RedisOperationError

logger = get_logger(__name__)

COUNTER_KEY = "foo"


class RedisService:
    """Service for Redis operations."""

    def __init__(self, dsn: str, timeout: int = 10) -> None:
        """
        Initialize Redis service.

        Args:
            dsn: Redis URL, e.g. ``redis://:password@host:6379/0``
            timeout: Seconds allowed for connecting and for each command
        """
        self.dsn = dsn
        self.timeout = timeout
        self._client: Optional[redis.Redis] = None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> redis.Redis:
        """Lazy initialization of Redis client, once per service."""
        if self._client is not None:
            return self._client
        with self._client_lock:
            if self._client is None:
                try:
                    self._client = redis.Redis.from_url(
                        self.dsn,
                        socket_timeout=self.timeout,
                        socket_connect_timeout=self.timeout,
                        decode_responses=True,
                    )
                except ValueError as e:
                    logger.error(f'Invalid Redis DSN: {str(e)}')
                    raise RedisOperationError(str(e), operation='connect') from e
            return self._client

    def close(self) -> None:
        """Close the client and disconnect its connection pool."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def set(self, key: str, value: str) -> None:
        """
        Set a key to a value with no expiry.

        Raises:
            RedisOperationError: If the command fails
        """
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            logger.error(f'Redis SET failed for key {key}: {str(e)}')
            raise RedisOperationError(str(e), operation='set') from e
        logger.info(f'Set Redis key {key}')

    def increment_counter(self, key: str = COUNTER_KEY) -> int:
        """
        Read an integer counter, add one and write it back.

        A missing or non-integer current value counts as 0. The read and the
        write are separate commands, so concurrent callers can lose updates.

        Returns:
            The value written

        Raises:
            RedisOperationError: If reading or writing the key fails
        """
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.error(f'Redis GET failed for key {key}: {str(e)}')
            raise RedisOperationError(str(e), operation='get') from e

        try:
            current = int(raw) if raw is not None else 0
        except ValueError:
            logger.warning(f'Redis key {key} holds non-integer {raw!r}, restarting at 0')
            current = 0

        new_value = current + 1
        try:
            self.client.set(key, new_value)
        except redis.RedisError as e:
            logger.error(f'Redis SET failed for key {key}: {str(e)}')
            raise RedisOperationError(str(e), operation='set') from e
        return new_value

    def scan_values(self, pattern: str = "*") -> List[Tuple[str, str]]:
        """
        Scan all keys matching ``pattern`` and read their values.

        Keys that disappear between SCAN and GET are reported with an
        empty value.

        Returns:
            List of (key, value) pairs in scan order

        Raises:
            RedisOperationError: If a command fails
        """
        pairs = []
        try:
            for key in self.client.scan_iter(match=pattern):
                value = self.client.get(key)
                pairs.append((key, value if value is not None else ""))
        except redis.RedisError as e:
            logger.error(f'Redis SCAN failed for pattern {pattern}: {str(e)}')
            raise RedisOperationError(str(e), operation='scan') from e
        return pairs
