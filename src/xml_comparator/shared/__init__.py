"""Shared utilities for XML tree building and comparison.

This module provides the configuration objects and logging helpers used across
the tree and API layers.
"""

from .config import (
    ComparatorConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    TreeConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "ComparatorConfig",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "TreeConfig",
    "CorrelationLogger",
    "get_logger",
]
