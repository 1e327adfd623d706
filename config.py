"""
Configuration module for environment variable validation and type-safe config.

Settings are read once at start-up from an optional ``app.env`` file,
overlaid by the process environment, and validated into an immutable
configuration object that is handed to the app factory.
"""
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values

KNOWN_SERVICES = ("mongo", "redis", "s3")
DEFAULT_ENV_FILE = "app.env"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got: {raw}")


def _parse_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}") from None


@dataclass(frozen=True)
class Config:
    """Type-safe configuration object with validated environment variables."""

    services: Tuple[str, ...] = KNOWN_SERVICES
    mongo_dsn: str = ""
    mongo_user: Optional[str] = None
    mongo_password: Optional[str] = None
    mongo_database: str = "local"
    mongo_collection: str = "demo"
    redis_dsn: str = ""
    s3_bucket: str = "demo-bucket"
    s3_endpoint: Optional[str] = None
    s3_disable_ssl: bool = False
    s3_force_pathstyle: bool = False
    aws_region: str = "us-east-1"
    http_port: int = 80
    backend_timeout: int = 10
    log_level: str = "INFO"

    @staticmethod
    def load_settings(env_file: Optional[str] = None) -> Dict[str, str]:
        """
        Merge the optional env file with the process environment.

        Process environment variables take precedence over the file.
        """
        path = env_file or os.environ.get("APP_ENV_FILE", DEFAULT_ENV_FILE)
        settings: Dict[str, str] = {}
        if os.path.isfile(path):
            settings.update(
                {k: v for k, v in dotenv_values(path).items() if v is not None}
            )
        settings.update(os.environ)
        return settings

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """
        Create Config instance from the env file and environment variables.

        Raises:
            ValueError: If required variables are missing or invalid.
        """
        return cls.from_mapping(cls.load_settings(env_file))

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> "Config":
        """
        Build and validate a Config from a flat mapping of settings.

        Raises:
            ValueError: If required variables are missing or invalid.
        """
        services = tuple(
            name.strip().lower()
            for name in env.get("SERVICES", ",".join(KNOWN_SERVICES)).split(",")
            if name.strip()
        )
        unknown = [name for name in services if name not in KNOWN_SERVICES]
        if unknown:
            raise ValueError(
                f"SERVICES contains unknown backends {unknown}, "
                f"expected any of {list(KNOWN_SERVICES)}"
            )

        mongo_dsn = env.get("MONGO_DSN", "")
        if "mongo" in services and not mongo_dsn:
            raise ValueError("MONGO_DSN environment variable is required")

        redis_dsn = env.get("REDIS_DSN", "")
        if "redis" in services and not redis_dsn:
            raise ValueError("REDIS_DSN environment variable is required")

        s3_bucket = env.get("S3_BUCKET") or "demo-bucket"

        log_level = env.get("LOG_LEVEL", "INFO").upper()

        # Validate log level
        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_log_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {valid_log_levels}, got: {log_level}"
            )

        http_port = _parse_int("HTTP_PORT", env.get("HTTP_PORT"), 80)
        if not 0 < http_port < 65536:
            raise ValueError(f"HTTP_PORT must be a valid TCP port, got: {http_port}")

        backend_timeout = _parse_int(
            "BACKEND_TIMEOUT", env.get("BACKEND_TIMEOUT"), 10
        )
        if backend_timeout <= 0:
            raise ValueError(
                f"BACKEND_TIMEOUT must be positive, got: {backend_timeout}"
            )

        return cls(
            services=services,
            mongo_dsn=mongo_dsn,
            mongo_user=env.get("MONGO_USER") or None,
            mongo_password=env.get("MONGO_PASSWORD") or None,
            mongo_database=env.get("MONGO_DATABASE") or "local",
            mongo_collection=env.get("MONGO_COLLECTION") or "demo",
            redis_dsn=redis_dsn,
            s3_bucket=s3_bucket,
            s3_endpoint=env.get("S3_ENDPOINT") or None,
            s3_disable_ssl=_parse_bool(
                "S3_DISABLE_SSL", env.get("S3_DISABLE_SSL"), False
            ),
            s3_force_pathstyle=_parse_bool(
                "S3_FORCE_PATHSTYLE", env.get("S3_FORCE_PATHSTYLE"), False
            ),
            aws_region=env.get("AWS_REGION") or "us-east-1",
            http_port=http_port,
            backend_timeout=backend_timeout,
            log_level=log_level,
        )


# Global config instance - built on first use at start-up
# This will raise ValueError if required settings are missing
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config: The validated configuration object

    Raises:
        ValueError: If required settings are missing or invalid.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
