"""
Custom exception classes for backend services and route handlers.
"""
from typing import Optional


class BackendError(Exception):
    """Exception raised when a backend connection or operation fails."""

    backend = "backend"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None
    ):
        """
        Initialize backend error.

        Args:
            message: Error message, written verbatim to the HTTP response
            operation: Operation name if available
        """
        super().__init__(message)
        self.message = message
        self.operation = operation


class MongoOperationError(BackendError):
    """Exception raised for MongoDB errors."""

    backend = "mongo"


class RedisOperationError(BackendError):
    """Exception raised for Redis errors."""

    backend = "redis"


class S3OperationError(BackendError):
    """Exception raised for S3 operation errors."""

    backend = "s3"

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        operation: Optional[str] = None
    ):
        """
        Initialize S3 operation error.

        Args:
            message: Error message
            bucket: S3 bucket name if available
            key: S3 object key if available
            operation: Operation name if available
        """
        super().__init__(message, operation=operation)
        self.bucket = bucket
        self.key = key
