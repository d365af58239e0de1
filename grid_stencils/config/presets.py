"""
Preset mapping configurations.

Usage
-----
>>> from grid_stencils.config import presets
>>> out = mapstencil(np.mean, sa, config=presets.create_fast_config())
"""

from __future__ import annotations

import os

from .core import MapStencilConfig, StencilArrayConfig


def create_serial_config() -> MapStencilConfig:
    """
    Single-threaded, fully checked configuration.

    Use when: debugging a stencil function or comparing against the
    vectorised kernel path.
    """
    return MapStencilConfig(n_workers=1, use_kernel_fast_path=False, check_aux_shapes=True)


def create_fast_config(n_workers: int | None = None) -> MapStencilConfig:
    """
    Multi-threaded configuration with the kernel fast path enabled.

    Parameters
    ----------
    n_workers : int | None
        Worker threads, defaults to the CPU count (capped at 256)
    """
    if n_workers is None:
        n_workers = min(os.cpu_count() or 1, 256)
    return MapStencilConfig(n_workers=n_workers, use_kernel_fast_path=True, check_aux_shapes=True)


def create_periodic_array_config(halo: bool = False) -> StencilArrayConfig:
    """Wrapping boundaries, read through a halo copy when halo is True."""
    return StencilArrayConfig(boundary="wrap", padding="halo_out" if halo else "conditional")
