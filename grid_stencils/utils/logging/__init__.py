"""
Logging utilities for grid_stencils.

Usage:
    >>> from grid_stencils.utils.logging import get_logger, configure_logging
    >>> logger = get_logger(__name__)
    >>> configure_logging(level="DEBUG")
"""

from __future__ import annotations

from .logger import (
    PACKAGE_LOGGER,
    LogSettings,
    StencilFormatter,
    StencilLogger,
    configure_development_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "PACKAGE_LOGGER",
    "LogSettings",
    "StencilFormatter",
    "StencilLogger",
    "configure_development_logging",
    "configure_logging",
    "get_logger",
]
