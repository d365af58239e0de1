"""Mapping functions over stencil arrays."""

from .mapping import mapstencil, mapstencil_into

__all__ = ["mapstencil", "mapstencil_into"]
