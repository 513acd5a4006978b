"""Core utilities shared across :mod:`docletnorm` modules.

The core namespace provides seams for configuration loading and logging
setup so the normalization passes stay free of I/O concerns.

Example:
    >>> from docletnorm.core import get_logger
    >>> logger = get_logger(__name__)
    >>> isinstance(logger, object)
    True
"""

from __future__ import annotations

from .config import AppConfig, PipelineSettings, load_config
from .logging import configure_logging, get_logger

__all__ = [
    "AppConfig",
    "PipelineSettings",
    "configure_logging",
    "get_logger",
    "load_config",
]
