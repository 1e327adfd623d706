"""
Logging setup shared by every module of the demo services.

Loggers write to stdout so container runtimes collect the lines as-is.
Module loggers are created at import time, before configuration is
loaded, so they start at the ``LOG_LEVEL`` environment value and are
re-levelled by ``configure_logging`` once the validated config exists.
"""
import logging
import os
import sys
from typing import Dict, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Loggers handed out by get_logger, keyed by name
_loggers: Dict[str, logging.Logger] = {}
_configured_level: Optional[int] = None


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger with a stdout handler attached.

    Args:
        name: Logger name (defaults to this module's name if not provided)

    Returns:
        Logger at the configured level, or ``LOG_LEVEL`` from the
        environment if ``configure_logging`` has not run yet
    """
    name = name or __name__
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    level = _configured_level if _configured_level is not None else _resolve_level(None)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    _loggers[name] = logger
    return logger


def configure_logging(level: str) -> None:
    """
    Apply ``level`` to every logger from ``get_logger``, past and future.

    Args:
        level: Level name such as ``"DEBUG"`` or ``"WARNING"``
    """
    global _configured_level
    _configured_level = _resolve_level(level)
    for logger in _loggers.values():
        logger.setLevel(_configured_level)
