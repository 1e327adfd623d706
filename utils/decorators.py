"""
Handler decorators for error handling, logging, and response formatting.
"""
import functools
import uuid
from typing import Any, Callable

from fastapi.responses import PlainTextResponse
from logger_config import get_logger
from utils.exceptions import BackendError

logger = get_logger(__name__)


def backend_handler(
    func: Callable[..., str]
) -> Callable[..., PlainTextResponse]:
    """
    Decorator for route handlers that talk to a backend.

    Provides:
    - Plain-text 200 response from the handler's returned text
    - HTTP 500 with the raw error text when any step fails
    - Request correlation IDs for logging, echoed in X-Correlation-ID

    Args:
        func: The handler function to decorate

    Returns:
        Decorated handler function
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> PlainTextResponse:
        # Generate correlation ID for request tracking
        correlation_id = str(uuid.uuid4())
        headers = {"X-Correlation-ID": correlation_id}

        logger.debug(
            f"Handler {func.__name__} invoked",
            extra={"correlation_id": correlation_id, "handler": func.__name__}
        )

        try:
            body = func(*args, **kwargs)
        except BackendError as e:
            logger.warning(
                f"Handler {func.__name__} {e.backend} {e.operation} failed: {e.message}",
                extra={"correlation_id": correlation_id}
            )
            return PlainTextResponse(e.message, status_code=500, headers=headers)
        except Exception as e:
            # Anything unexpected still stays scoped to this request
            logger.error(
                f"Handler {func.__name__} failed: {str(e)}",
                extra={"correlation_id": correlation_id},
                exc_info=True
            )
            return PlainTextResponse(str(e), status_code=500, headers=headers)

        return PlainTextResponse(body, headers=headers)

    return wrapper
