"""Shared utilities: exceptions and logging."""

from .exceptions import (
    ConstructionError,
    DimensionMismatchError,
    SizeError,
    StencilError,
)
from .logging import configure_logging, get_logger

__all__ = [
    "StencilError",
    "ConstructionError",
    "DimensionMismatchError",
    "SizeError",
    "configure_logging",
    "get_logger",
]
