"""
Stencil geometry: offset shapes, kernels, layered stencils and boundaries.
"""

# Boundary handling
from .boundary import (
    BCType,
    BoundaryCondition,
    Padding,
    PaddingType,
    conditional,
    halo,
    reflect,
    remove,
    resolve,
    use,
    wrap,
)
from .kernel import Kernel, kernel, kernel_from_function, kernelproduct
from .layered import Layered
from .protocol import StencilLike
from .shapes import StencilShape, generate_offsets
from .stencil import (
    Stencil,
    angled_cross,
    annulus,
    back_slash,
    cardinal,
    circle,
    create_stencil,
    cross,
    diamond,
    forward_slash,
    horizontal,
    moore,
    named_stencil,
    ordinal,
    positional,
    rectangle,
    vertical,
    von_neumann,
    window,
)

__all__ = [
    # Shapes
    "Stencil",
    "StencilShape",
    "StencilLike",
    "generate_offsets",
    "create_stencil",
    "window",
    "moore",
    "von_neumann",
    "cross",
    "horizontal",
    "vertical",
    "forward_slash",
    "back_slash",
    "angled_cross",
    "diamond",
    "circle",
    "annulus",
    "cardinal",
    "ordinal",
    "rectangle",
    "positional",
    "named_stencil",
    # Kernels and layers
    "Kernel",
    "kernel",
    "kernel_from_function",
    "kernelproduct",
    "Layered",
    # Boundaries
    "BCType",
    "BoundaryCondition",
    "Padding",
    "PaddingType",
    "conditional",
    "halo",
    "reflect",
    "remove",
    "resolve",
    "use",
    "wrap",
]
