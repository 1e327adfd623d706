"""
Route handler functions for the demo backend services.

Each backend handler runs one fixed sequence of operations against its
service and returns the text written to the response. Failures surface as
HTTP 500 with the error text through ``backend_handler``.
"""
import time
from typing import Optional
from logger_config import get_logger
from services.mongo_service import MongoService
from services.redis_service import RedisService
from services.s3_service import S3Service
from utils.decorators import backend_handler

logger = get_logger(__name__)

HELLO_MESSAGE = "Hello<br> - Python HTTP Server\n"
S3_OBJECT_BODY = "Hello from MinIO!!"
S3_MAX_KEYS = 1000


def hello_handler() -> str:
    """Liveness check."""
    return HELLO_MESSAGE


@backend_handler
def mongo_handler(service: MongoService, host: str, url: str) -> str:
    """Record the request in the demo collection, then dump the collection."""
    inserted_id = service.insert_request(host, url)
    logger.debug(f'Inserted request record {inserted_id}')

    documents = service.dump_documents()
    return ''.join(f'{document}\n' for document in documents)


@backend_handler
def redis_handler(
    service: RedisService,
    key: Optional[str] = None,
    value: Optional[str] = None
) -> str:
    """
    Set ``key`` to ``value`` when both are given, otherwise bump the counter.
    Then list every key with its current value.
    """
    if key and value:
        service.set(key, value)
    else:
        counter = service.increment_counter()
        logger.debug(f'Counter incremented to {counter}')

    return ''.join(f'{k} {v}\n' for k, v in service.scan_values())


@backend_handler
def s3_handler(service: S3Service) -> str:
    """Ensure the bucket exists, write a timestamped object and list the bucket."""
    # Creating buckets from a request handler only makes sense for the demo
    service.ensure_bucket()

    key = f'{int(time.time())}.log'
    service.put_text(key, S3_OBJECT_BODY)

    objects = service.list_objects(max_keys=S3_MAX_KEYS)
    lines = [
        f'Bucket: {service.bucket_name}',
        f'KeyCount: {len(objects)}',
    ]
    for obj in objects:
        last_modified = obj.get('LastModified')
        lines.append(
            f"{obj['Key']} {obj.get('Size', 0)} "
            f"{last_modified.isoformat() if last_modified else ''}".rstrip()
        )
    return '\n'.join(lines) + '\n'
