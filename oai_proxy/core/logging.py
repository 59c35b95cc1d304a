"""
Logging configuration for the proxy service.

The level comes from the ``LOG_LEVEL`` setting of the configuration snapshot
(``debug``, ``info``, ``warn`` or ``error``).
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from oai_proxy.core.config import ProxyConfig, get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_log_level(value: Any) -> int:
    """Map a ``LOG_LEVEL`` value to a ``logging`` level, INFO if unrecognised."""
    if isinstance(value, str):
        return _LEVELS.get(value.strip().lower(), logging.INFO)
    return logging.INFO


def _configure_root(level: int) -> None:
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stdout,
        force=True,  # Override any existing configuration
    )


def setup_logging(config: Optional[ProxyConfig] = None) -> None:
    """Configure root logging for the application.

    Parameters
    ----------
    config : ProxyConfig, optional
        Snapshot providing ``log_level``. Defaults to the process snapshot.
    """
    if config is None:
        # Warnings emitted while the snapshot loads need a handler in place
        _configure_root(logging.INFO)
        config = get_config()
    log_level = resolve_log_level(config.log_level)
    _configure_root(log_level)

    # Quiet per-request access lines from the server
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "environment": config.environment,
            "log_level": logging.getLevelName(log_level),
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Parameters
    ----------
    name : str
        Module name, typically __name__

    Returns
    -------
    logging.Logger
        Configured logger instance
    """
    return logging.getLogger(name)
