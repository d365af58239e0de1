from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("grid_stencils")
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0-dev"

from .arrays import (
    StencilArray,
    SwitchingStencilArray,
    boundary,
    getneighbor,
    indices,
    neighbors,
    padding,
    stencil,
    switch,
    unsafe_neighbors,
    unsafe_stencil,
)
from .config import MapStencilConfig, StencilArrayConfig, create_fast_config, create_serial_config
from .geometry import (
    BCType,
    BoundaryCondition,
    Kernel,
    Layered,
    Padding,
    PaddingType,
    Stencil,
    StencilShape,
    angled_cross,
    annulus,
    back_slash,
    cardinal,
    circle,
    conditional,
    create_stencil,
    cross,
    diamond,
    forward_slash,
    halo,
    horizontal,
    kernel,
    kernel_from_function,
    kernelproduct,
    moore,
    named_stencil,
    ordinal,
    positional,
    rectangle,
    reflect,
    remove,
    use,
    vertical,
    von_neumann,
    window,
    wrap,
)
from .operators import mapstencil, mapstencil_into
from .utils import (
    ConstructionError,
    DimensionMismatchError,
    SizeError,
    StencilError,
    configure_logging,
    get_logger,
)

__all__ = [
    "__version__",
    # Stencils
    "Stencil",
    "StencilShape",
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
    "Kernel",
    "kernel",
    "kernel_from_function",
    "kernelproduct",
    "Layered",
    # Boundaries and padding
    "BCType",
    "BoundaryCondition",
    "Padding",
    "PaddingType",
    "remove",
    "use",
    "wrap",
    "reflect",
    "conditional",
    "halo",
    # Arrays
    "StencilArray",
    "SwitchingStencilArray",
    "stencil",
    "neighbors",
    "unsafe_stencil",
    "unsafe_neighbors",
    "getneighbor",
    "indices",
    "boundary",
    "padding",
    "switch",
    # Mapping
    "mapstencil",
    "mapstencil_into",
    # Config
    "MapStencilConfig",
    "StencilArrayConfig",
    "create_fast_config",
    "create_serial_config",
    # Errors and logging
    "StencilError",
    "ConstructionError",
    "DimensionMismatchError",
    "SizeError",
    "configure_logging",
    "get_logger",
]
