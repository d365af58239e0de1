"""
Capability protocol shared by every stencil-like object.

Stencil, Kernel and Layered all satisfy StencilLike, which is all that the
stencil arrays and the mapping engine rely on. Generic code (distances,
kernel utilities, traversal) therefore never branches on the concrete shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    import numpy as np
    from numpy.typing import NDArray


@runtime_checkable
class StencilLike(Protocol):
    """
    Protocol that all stencil objects must satisfy.

    Core properties:
        - ndims: int - Number of grid axes the offsets span
        - radius: int - Largest absolute offset coordinate (halo width needed)
        - offsets: Ordered offsets (a group of offset tuples for Layered)
        - neighbors: Ordered neighbour values, or None before positioning

    Positioning:
        - positioned(fetch, center): a copy filled with values fetched for
          the stencil's (K, N) offset array
        - rebuild(neighbors, center): a copy holding explicit values
    """

    @property
    def ndims(self) -> int:
        """Number of grid axes."""
        ...

    @property
    def radius(self) -> int:
        """Largest absolute offset coordinate."""
        ...

    @property
    def offsets(self) -> Any:
        """Ordered integer offsets relative to the center."""
        ...

    @property
    def neighbors(self) -> Any:
        """Neighbour values in offset order (None when not positioned)."""
        ...

    def positioned(self, fetch: Callable[[NDArray[np.intp]], NDArray], center: Any) -> StencilLike:
        """Return a copy holding the values fetched for this geometry."""
        ...

    def rebuild(self, neighbors: Any, center: Any = None) -> StencilLike:
        """Return a copy of the same geometry holding the given neighbour values."""
        ...
