"""Grids bundled with a stencil, a boundary condition and padding."""

from .stencil_array import (
    StencilArray,
    boundary,
    getneighbor,
    indices,
    neighbors,
    padding,
    stencil,
    unsafe_neighbors,
    unsafe_stencil,
)
from .switching import SwitchingStencilArray, switch

__all__ = [
    "StencilArray",
    "SwitchingStencilArray",
    "boundary",
    "getneighbor",
    "indices",
    "neighbors",
    "padding",
    "stencil",
    "switch",
    "unsafe_neighbors",
    "unsafe_stencil",
]
