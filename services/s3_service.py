"""
S3 service for object storage operations.
"""
import threading

import boto3
from typing import Any, Dict, List, Optional
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from logger_config import get_logger
from utils.exceptions import S3OperationError

logger = get_logger(__name__)


class S3Service:
    """Service for S3 operations."""

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: Optional[str] = None,
        disable_ssl: bool = False,
        force_path_style: bool = False,
        region_name: str = "us-east-1"
    ):
        """
        Initialize S3 service.

        Args:
            bucket_name: Name of the S3 bucket
            endpoint_url: Custom endpoint (e.g. MinIO); None for AWS
            disable_ssl: Talk plain HTTP to the endpoint
            force_path_style: Use path-style instead of virtual-host addressing
            region_name: AWS region for the client and bucket location
        """
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.disable_ssl = disable_ssl
        self.force_path_style = force_path_style
        self.region_name = region_name
        self._s3_client = None
        self._client_lock = threading.Lock()

    @property
    def s3_client(self):
        """Lazy initialization of S3 client, once per service."""
        if self._s3_client is not None:
            return self._s3_client
        with self._client_lock:
            if self._s3_client is None:
                addressing_style = 'path' if self.force_path_style else 'auto'
                self._s3_client = boto3.client(
                    's3',
                    endpoint_url=self.endpoint_url,
                    use_ssl=not self.disable_ssl,
                    region_name=self.region_name,
                    config=BotoConfig(s3={'addressing_style': addressing_style}),
                )
            return self._s3_client

    def close(self) -> None:
        """Release the client's HTTP connection pool."""
        with self._client_lock:
            if self._s3_client is not None:
                self._s3_client.close()
                self._s3_client = None

    def ensure_bucket(self) -> None:
        """
        Create the bucket, treating an already-owned bucket as success.

        Raises:
            S3OperationError: If the bucket cannot be created
        """
        create_kwargs: Dict[str, Any] = {'Bucket': self.bucket_name}
        if self.region_name != 'us-east-1':
            create_kwargs['CreateBucketConfiguration'] = {
                'LocationConstraint': self.region_name
            }

        try:
            self.s3_client.create_bucket(**create_kwargs)
            logger.info(f'Created bucket {self.bucket_name}')
        except ClientError as e:
            error = e.response.get('Error', {})
            code = error.get('Code', '')
            if code == 'BucketAlreadyOwnedByYou':
                logger.debug(f'Bucket {self.bucket_name} already owned, reusing it')
                return
            logger.error(f'S3 create_bucket failed for {self.bucket_name}: {str(e)}')
            raise S3OperationError(
                f"Failed to upload data to {self.bucket_name}, "
                f"{code}: {error.get('Message', str(e))}\n",
                bucket=self.bucket_name,
                operation='create_bucket'
            ) from e
        except BotoCoreError as e:
            logger.error(f'S3 create_bucket failed for {self.bucket_name}: {str(e)}')
            raise S3OperationError(
                str(e), bucket=self.bucket_name, operation='create_bucket'
            ) from e

    def put_text(self, key: str, body: str) -> None:
        """
        Put a text object into the bucket.

        Args:
            key: S3 object key
            body: Object body, stored UTF-8 encoded

        Raises:
            S3OperationError: If S3 operation fails
        """
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body.encode('UTF-8')
            )
        except ClientError as e:
            error = e.response.get('Error', {})
            logger.error(f'S3 put_object failed for {self.bucket_name}/{key}: {str(e)}')
            raise S3OperationError(
                f"Failed to upload data to {self.bucket_name}/{key}, "
                f"{error.get('Code', '')}: {error.get('Message', str(e))}\n",
                bucket=self.bucket_name,
                key=key,
                operation='put_object'
            ) from e
        except BotoCoreError as e:
            logger.error(f'S3 put_object failed for {self.bucket_name}/{key}: {str(e)}')
            raise S3OperationError(
                str(e), bucket=self.bucket_name, key=key, operation='put_object'
            ) from e
        logger.info(f'Successfully put object to s3://{self.bucket_name}/{key}')

    def list_objects(self, max_keys: int = 1000) -> List[Dict[str, Any]]:
        """
        List up to ``max_keys`` objects in the bucket.

        Returns:
            The ``Contents`` entries of a single ListObjectsV2 page

        Raises:
            S3OperationError: If S3 operation fails
        """
        try:
            response = self.s3_client.list_objects_v2(
                Bucket=self.bucket_name,
                MaxKeys=max_keys
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f'S3 list_objects_v2 failed for {self.bucket_name}: {str(e)}')
            raise S3OperationError(
                str(e), bucket=self.bucket_name, operation='list_objects_v2'
            ) from e
        return response.get('Contents', [])
