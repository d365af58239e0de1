"""
Boundary conditions and padding for stencil reads near the grid edge.

BoundaryCondition decides WHAT an out-of-range read returns; Padding decides
HOW that is implemented (per-read checks or a halo buffer).
"""

from .conditions import (
    BCType,
    BoundaryCondition,
    Resolution,
    ResolutionKind,
    as_boundary,
    reflect,
    remove,
    resolve,
    resolve_axis,
    resolve_indices,
    use,
    wrap,
)
from .padding import (
    Padding,
    PaddingType,
    as_padding,
    check_pairing,
    conditional,
    halo,
    pad_array_with_halo,
    refresh_halo,
)

__all__ = [
    "BCType",
    "BoundaryCondition",
    "Padding",
    "PaddingType",
    "Resolution",
    "ResolutionKind",
    "as_boundary",
    "as_padding",
    "check_pairing",
    "conditional",
    "halo",
    "pad_array_with_halo",
    "reflect",
    "refresh_halo",
    "remove",
    "resolve",
    "resolve_axis",
    "resolve_indices",
    "use",
    "wrap",
]
