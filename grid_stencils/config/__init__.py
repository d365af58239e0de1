"""
Configuration for grid_stencils.

Quick Start
-----------
>>> from grid_stencils.config import MapStencilConfig, StencilArrayConfig
>>> config = MapStencilConfig(n_workers=4)
>>> sa = StencilArrayConfig(boundary="wrap", padding="halo_out").create_array(grid, moore(1))
"""

from . import presets
from .core import MapStencilConfig, StencilArrayConfig
from .presets import create_fast_config, create_periodic_array_config, create_serial_config

__all__ = [
    "MapStencilConfig",
    "StencilArrayConfig",
    "create_fast_config",
    "create_periodic_array_config",
    "create_serial_config",
    "presets",
]
