"""
Request logging middleware.
"""
import socket
import time

from logger_config import get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware:
    """
    ASGI middleware that times each HTTP request and logs one line for it.

    The line is written after the wrapped application has finished with the
    request and reads ``"<hostname>: <METHOD> <path> (<elapsed>)"``.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.monotonic()
        try:
            await self.app(scope, receive, send)
        finally:
            elapsed = time.monotonic() - start
            logger.info(
                f"{socket.gethostname()}: {scope['method']} {scope['path']} "
                f"({elapsed * 1000:.3f}ms)"
            )
