"""
Double-buffered stencil arrays for iterated stencil passes.

A SwitchingStencilArray owns two equally shaped StencilArrays. One is the
source (read by the next pass), the other the destination (written by it).
switch() returns a view with the roles exchanged; no data is copied:

    >>> grid = SwitchingStencilArray(np.random.rand(64, 64), moore(1), boundary=wrap())
    >>> for _ in range(100):
    ...     grid = mapstencil_into(np.mean, grid)
    >>> result = np.asarray(grid)

A pass never writes into the buffer it reads, so every cell of a pass sees
the previous generation only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from grid_stencils.arrays.stencil_array import StencilArray

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from grid_stencils.geometry.boundary.conditions import BCType, BoundaryCondition
    from grid_stencils.geometry.boundary.padding import Padding, PaddingType
    from grid_stencils.geometry.protocol import StencilLike


class SwitchingStencilArray:
    """
    Two stencil arrays with a switchable source/destination role.

    Construction copies the initial data into both buffers; the caller's
    array is never written. Both buffers start with identical contents (and
    identical halos).

    Args:
        data: Initial grid values (the first source)
        stencil: Stencil, Kernel or Layered
        boundary: Boundary policy of both buffers
        padding: Padding of both buffers
    """

    __slots__ = ("_buffers", "_source_index")

    def __init__(
        self,
        data: ArrayLike,
        stencil: StencilLike,
        boundary: BoundaryCondition | BCType | str | None = None,
        padding: Padding | PaddingType | str | None = None,
    ):
        first = StencilArray(np.array(data, copy=True), stencil, boundary=boundary, padding=padding)
        self._buffers = (first, first.copy())
        self._source_index = 0

    @classmethod
    def from_stencil_array(cls, source: StencilArray) -> SwitchingStencilArray:
        """Adopt an existing stencil array as the source; the destination is a copy of it."""
        return cls._from_buffers((source, source.copy()), 0)

    @classmethod
    def _from_buffers(cls, buffers: tuple[StencilArray, StencilArray], source_index: int) -> SwitchingStencilArray:
        new = object.__new__(cls)
        new._buffers = buffers
        new._source_index = source_index
        return new

    @property
    def source(self) -> StencilArray:
        """The buffer the next pass reads."""
        return self._buffers[self._source_index]

    @property
    def dest(self) -> StencilArray:
        """The buffer the next pass writes."""
        return self._buffers[1 - self._source_index]

    def switch(self) -> SwitchingStencilArray:
        """Same buffers, roles exchanged."""
        return self._from_buffers(self._buffers, 1 - self._source_index)

    # Everything else reads the source

    @property
    def shape(self) -> tuple[int, ...]:
        return self.source.shape

    @property
    def ndim(self) -> int:
        return self.source.ndim

    @property
    def dtype(self) -> np.dtype:
        return self.source.dtype

    @property
    def stencil(self) -> StencilLike:
        return self.source.stencil

    @property
    def boundary(self) -> BoundaryCondition:
        return self.source.boundary

    @property
    def padding(self) -> Padding:
        return self.source.padding

    @property
    def values(self) -> NDArray:
        return self.source.values

    def __array__(self, dtype=None, copy=None):
        return self.source.__array__(dtype=dtype, copy=copy)

    def __len__(self) -> int:
        return len(self.source)

    def __getitem__(self, key: Any) -> Any:
        return self.source[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self.source[key] = value

    def stencil_at(self, *index: Any) -> StencilLike:
        return self.source.stencil_at(*index)

    def unsafe_stencil_at(self, index: tuple[int, ...]) -> StencilLike:
        return self.source.unsafe_stencil_at(index)

    def neighbors(self, *index: Any) -> Any:
        return self.source.neighbors(*index)

    def unsafe_neighbors(self, *index: Any) -> Any:
        return self.source.unsafe_neighbors(*index)

    def getneighbor(self, *coordinate: Any) -> Any:
        return self.source.getneighbor(*coordinate)

    def indices(self, *index: Any) -> Any:
        return self.source.indices(*index)

    def update_boundary(self) -> None:
        self.source.update_boundary()

    def __repr__(self) -> str:
        return f"SwitchingStencilArray(source={self._source_index}, {self.source!r})"


def switch(A: SwitchingStencilArray) -> SwitchingStencilArray:
    """Exchange source and destination of a switching stencil array."""
    return A.switch()
