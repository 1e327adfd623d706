"""
FastAPI application factory and process entry point.

Routes:
- /hello  liveness greeting
- /mongo  insert a request record, list the collection
- /redis  set-or-increment, then list every key
- /s3     ensure bucket, put an object, list the bucket

None of the backend routes are RESTful: a plain GET mutates the store.
"""
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from config import Config, get_config
from handler import hello_handler, mongo_handler, redis_handler, s3_handler
from logger_config import configure_logging, get_logger
from services.mongo_service import MongoService
from services.redis_service import RedisService
from services.s3_service import S3Service
from utils.middleware import RequestLoggingMiddleware

logger = get_logger(__name__)

ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def request_uri(request: Request) -> str:
    """Path plus query string, as sent on the request line."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def build_services(config: Config) -> Dict[str, Any]:
    """Create one long-lived service per enabled backend."""
    services: Dict[str, Any] = {}
    if "mongo" in config.services:
        services["mongo"] = MongoService(
            config.mongo_dsn,
            username=config.mongo_user,
            password=config.mongo_password,
            database=config.mongo_database,
            collection=config.mongo_collection,
            timeout=config.backend_timeout,
        )
    if "redis" in config.services:
        services["redis"] = RedisService(
            config.redis_dsn, timeout=config.backend_timeout
        )
    if "s3" in config.services:
        services["s3"] = S3Service(
            config.s3_bucket,
            endpoint_url=config.s3_endpoint,
            disable_ssl=config.s3_disable_ssl,
            force_path_style=config.s3_force_pathstyle,
            region_name=config.aws_region,
        )
    return services


def create_app(
    config: Config,
    services: Optional[Dict[str, Any]] = None
) -> FastAPI:
    """
    Build the application for the backends enabled in ``config``.

    Args:
        config: Validated configuration
        services: Prebuilt services keyed by backend name; built from
            ``config`` when omitted

    Returns:
        The FastAPI application wrapped in request logging
    """
    configure_logging(config.log_level)
    if services is None:
        services = build_services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for name, service in services.items():
            try:
                service.close()
            except Exception as e:
                logger.warning(f'Closing {name} client failed: {str(e)}')

    app = FastAPI(title="Datastore Demo", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.services = services

    @app.api_route("/hello", methods=ANY_METHOD, response_class=PlainTextResponse)
    def hello():
        return hello_handler()

    if "mongo" in services:
        @app.api_route("/mongo", methods=ANY_METHOD)
        def mongo(request: Request):
            return mongo_handler(
                services["mongo"],
                request.headers.get("host", ""),
                request_uri(request),
            )

    if "redis" in services:
        @app.api_route("/redis", methods=ANY_METHOD)
        def redis_route(key: Optional[str] = None, value: Optional[str] = None):
            return redis_handler(services["redis"], key, value)

    if "s3" in services:
        @app.api_route("/s3", methods=ANY_METHOD)
        def s3():
            return s3_handler(services["s3"])

    app.add_middleware(RequestLoggingMiddleware)
    logger.info(f'Serving backends: {sorted(services)}')
    return app


def main() -> None:
    try:
        config = get_config()
    except ValueError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    app = create_app(config)
    print("HTTP Server Starting...")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=config.http_port,
        access_log=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
