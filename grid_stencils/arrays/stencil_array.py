"""
StencilArray: a grid bundled with a stencil, a boundary condition and padding.

A StencilArray reads like the grid it wraps (indexing, np.asarray) and in
addition can materialise the stencil around any cell:

    >>> sa = StencilArray(np.arange(100).reshape(10, 10), moore(1), boundary=wrap())
    >>> hood = sa.stencil_at((0, 0))
    >>> hood.center, hood.neighbors
    (0, array([99, 90, 91,  9,  1, 19, 10, 11]))

Coordinates passed to stencil_at() and friends are always *logical*: the
origin is the first cell of the grid, whatever halo the backing buffer has.

Buffers:
    conditional()  backing buffer is the caller's array (no copy)
    halo('out')    backing buffer is a padded copy; the logical view is its
                   interior and writes to it mark the halo stale until
                   update_boundary() (called automatically before reads)
    halo('in')     backing buffer is the caller's array; its outer margin
                   is the halo and the logical grid is the interior
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from grid_stencils.geometry.boundary.conditions import (
    BCType,
    BoundaryCondition,
    ResolutionKind,
    as_boundary,
    remove,
    resolve,
    resolve_indices,
)
from grid_stencils.geometry.boundary.padding import (
    Padding,
    PaddingType,
    as_padding,
    check_pairing,
    conditional,
    interior_slices,
    pad_array_with_halo,
    refresh_halo,
)
from grid_stencils.geometry.kernel import Kernel
from grid_stencils.geometry.layered import Layered
from grid_stencils.geometry.stencil import Stencil
from grid_stencils.utils.exceptions import ConstructionError, SizeError, validate_array_dimensions
from grid_stencils.utils.logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from grid_stencils.geometry.protocol import StencilLike

logger = get_logger(__name__)

_STENCIL_TYPES = (Stencil, Kernel, Layered)


def _as_index(index: tuple) -> tuple[int, ...]:
    # stencil_at((5, 6)) and stencil_at(5, 6) are equivalent
    if len(index) == 1 and isinstance(index[0], (tuple, list, np.ndarray)):
        index = tuple(index[0])
    return tuple(int(i) for i in index)


class StencilArray:
    """
    A grid with a Stencil, a BoundaryCondition and Padding.

    Args:
        data: N-dimensional array-like grid
        stencil: Stencil, Kernel or Layered with matching ndims
        boundary: BoundaryCondition, BCType or name (default remove())
        padding: Padding, PaddingType or name (default conditional())

    Raises:
        DimensionMismatchError: data.ndim differs from stencil.ndims
        ConstructionError: Incompatible boundary/padding or halo too narrow
        SizeError: A halo('in') buffer smaller than its own margin
    """

    def __init__(
        self,
        data: ArrayLike,
        stencil: StencilLike,
        boundary: BoundaryCondition | BCType | str | None = None,
        padding: Padding | PaddingType | str | None = None,
    ):
        if not isinstance(stencil, _STENCIL_TYPES):
            raise ConstructionError(
                "stencil must be a Stencil, Kernel or Layered",
                component="StencilArray",
                diagnostic_data={"provided_type": type(stencil).__name__},
            )
        boundary = as_boundary(remove() if boundary is None else boundary)
        padding = as_padding(conditional() if padding is None else padding)

        data = np.asarray(data)
        validate_array_dimensions(data, stencil.ndims, "data", component="StencilArray")
        padding = check_pairing(boundary, padding, stencil.radius)
        width = padding.halo_width

        if padding.padding_type is PaddingType.HALO_OUT:
            parent = pad_array_with_halo(data, boundary, width)
            shape = data.shape
        elif padding.padding_type is PaddingType.HALO_IN:
            if any(n < 2 * width for n in data.shape):
                raise SizeError(
                    array_name="data",
                    provided_shape=data.shape,
                    expected_shapes=[tuple(max(n, 2 * width) for n in data.shape)],
                    component="StencilArray",
                    context=f"halo('in') needs at least {width} margin cells on every side",
                )
            parent = data
            shape = tuple(n - 2 * width for n in data.shape)
        else:
            parent = data
            shape = data.shape

        self._init_fields(parent, stencil, boundary, padding, tuple(shape))
        logger.debug(f"StencilArray over grid {self._shape} with {boundary!r}, {padding!r}")

    def _init_fields(
        self,
        parent: NDArray,
        stencil: StencilLike,
        boundary: BoundaryCondition,
        padding: Padding,
        shape: tuple[int, ...],
    ) -> None:
        self._parent = parent
        self._stencil = stencil
        self._boundary = boundary
        self._padding = padding
        self._shape = shape
        self._width = padding.halo_width
        self._interior = interior_slices(parent.shape, self._width)
        self._halo_stale = False

    @classmethod
    def _from_parent(
        cls,
        parent: NDArray,
        stencil: StencilLike,
        boundary: BoundaryCondition,
        padding: Padding,
        shape: tuple[int, ...],
    ) -> StencilArray:
        new = object.__new__(cls)
        new._init_fields(parent, stencil, boundary, padding, shape)
        return new

    def copy(self) -> StencilArray:
        """Independent StencilArray with a copy of the backing buffer."""
        return self._from_parent(self._parent.copy(), self._stencil, self._boundary, self._padding, self._shape)

    # -------------------------------------------------------------------------
    # Array-like surface
    # -------------------------------------------------------------------------

    @property
    def shape(self) -> tuple[int, ...]:
        """Logical extents (without halo)."""
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return int(np.prod(self._shape))

    @property
    def dtype(self) -> np.dtype:
        return self._parent.dtype

    @property
    def stencil(self) -> StencilLike:
        return self._stencil

    @property
    def boundary(self) -> BoundaryCondition:
        return self._boundary

    @property
    def padding(self) -> Padding:
        return self._padding

    @property
    def halo_width(self) -> int:
        return self._width

    @property
    def parent(self) -> NDArray:
        """Backing buffer, including the halo for halo padding."""
        return self._parent

    @property
    def values(self) -> NDArray:
        """Writable view of the logical grid."""
        if self._width:
            return self._parent[self._interior]
        return self._parent

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self.values, dtype=dtype)
        return np.asarray(self.values, dtype=dtype)

    def __len__(self) -> int:
        return self._shape[0]

    def __getitem__(self, key: Any) -> Any:
        return self.values[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self.values[key] = value
        self.mark_halo_stale()

    def mark_halo_stale(self) -> None:
        """Record that the interior changed and a halo('out') margin needs refilling."""
        if self._padding.padding_type is PaddingType.HALO_OUT:
            self._halo_stale = True

    def update_boundary(self) -> None:
        """Refill a halo('out') margin from the current interior."""
        if self._padding.padding_type is PaddingType.HALO_OUT and self._width:
            refresh_halo(self._parent, self._boundary, self._width)
        self._halo_stale = False

    def _ensure_halo(self) -> None:
        if self._halo_stale:
            self.update_boundary()

    def __repr__(self) -> str:
        return (
            f"StencilArray(shape={self._shape}, dtype={self.dtype}, stencil={self._stencil!r}, "
            f"boundary={self._boundary!r}, padding={self._padding!r})"
        )

    # -------------------------------------------------------------------------
    # Neighbour access
    # -------------------------------------------------------------------------

    def _check_inbounds(self, index: tuple[int, ...]) -> None:
        if len(index) != len(self._shape) or not all(0 <= i < n for i, n in zip(index, self._shape, strict=True)):
            raise IndexError(f"index {index} is outside the grid of shape {self._shape}")

    def _gather(self, center: NDArray[np.intp], offsets: NDArray[np.intp]) -> NDArray:
        """Neighbour values for one center, in offset order."""
        coords = offsets + center
        if self._width:
            # Halo reads never leave the buffer
            return self._parent[tuple((coords + self._width).T)]

        resolved, valid = resolve_indices(self._boundary, self._shape, coords)
        values = self._parent[tuple(resolved.T)]
        if valid is None:
            return values
        if values.dtype == object:
            # Fancy indexing already copied
            for k in np.flatnonzero(~valid):
                values[k] = self._boundary.padval
            return values
        return np.where(valid, values, self._boundary.padval)

    def unsafe_stencil_at(self, index: tuple[int, ...]) -> StencilLike:
        """
        Positioned stencil at index without checking that index is in the grid.

        Neighbours still go through the boundary condition.
        """
        center = np.asarray(index, dtype=np.intp)
        value = self._parent[tuple(center + self._width)]
        return self._stencil.positioned(lambda offsets: self._gather(center, offsets), value)

    def stencil_at(self, *index: Any) -> StencilLike:
        """
        Positioned stencil centred on a logical index.

        Raises:
            IndexError: index is outside the logical grid
        """
        index = _as_index(index)
        self._check_inbounds(index)
        self._ensure_halo()
        return self.unsafe_stencil_at(index)

    def neighbors(self, *index: Any) -> Any:
        """Neighbour values around index, in offset order (one group per layer for Layered)."""
        return self.stencil_at(*index).neighbors

    def unsafe_neighbors(self, *index: Any) -> Any:
        return self.unsafe_stencil_at(_as_index(index)).neighbors

    def getneighbor(self, *coordinate: Any) -> Any:
        """
        Value at a possibly out-of-grid coordinate, applying padding and boundary.
        """
        coord = _as_index(coordinate)
        self._ensure_halo()
        w = self._width
        if w and all(-w <= c < n + w for c, n in zip(coord, self._shape, strict=True)):
            return self._parent[tuple(c + w for c in coord)]
        if self._boundary.bc_type is BCType.USE:
            raise IndexError(f"coordinate {coord} lies outside the halo of width {w}")

        resolution = resolve(self._boundary, self._shape, coord)
        if resolution.kind is ResolutionKind.SUBSTITUTE:
            return resolution.value
        return self._parent[tuple(c + w for c in resolution.coordinate)]

    def indices(self, *index: Any) -> Any:
        """
        Boundary-resolved coordinates of every offset around index.

        Removed points are None. Layered stencils give one list per layer.
        """
        index = _as_index(index)
        self._check_inbounds(index)
        return self._resolved_indices(self._stencil, np.asarray(index, dtype=np.intp))

    def _resolved_indices(self, hood: StencilLike, center: NDArray[np.intp]) -> Any:
        if isinstance(hood, Layered):
            return hood._map(lambda layer: self._resolved_indices(layer, center))
        coords = hood.offset_array + center
        if self._boundary.bc_type is BCType.USE:
            return [tuple(int(c) for c in row) for row in coords]
        resolved, valid = resolve_indices(self._boundary, self._shape, coords)
        rows = [tuple(int(c) for c in row) for row in resolved]
        if valid is None:
            return rows
        return [row if ok else None for row, ok in zip(rows, valid, strict=True)]


# =============================================================================
# Function interface
# =============================================================================


def stencil(A: Any, *index: Any) -> StencilLike:
    """
    stencil(A) returns the stencil of a stencil array (or the stencil itself);
    stencil(A, I) returns the positioned stencil at logical index I.
    """
    if not index:
        return A if isinstance(A, _STENCIL_TYPES) else A.stencil
    return A.stencil_at(*index)


def neighbors(A: Any, *index: Any) -> Any:
    """Neighbour values of a positioned stencil, or of A's stencil at index."""
    if not index:
        return A.neighbors
    return A.neighbors(*index)


def unsafe_stencil(A: Any, *index: Any) -> StencilLike:
    return A.unsafe_stencil_at(_as_index(index))


def unsafe_neighbors(A: Any, *index: Any) -> Any:
    return A.unsafe_neighbors(*index)


def getneighbor(A: Any, *coordinate: Any) -> Any:
    return A.getneighbor(*coordinate)


def indices(x: Any, *index: Any) -> Any:
    """Raw offsets + index for a stencil; boundary-resolved coordinates for a stencil array."""
    if isinstance(x, _STENCIL_TYPES):
        return x.indices(_as_index(index))
    return x.indices(*index)


def boundary(A: Any) -> BoundaryCondition:
    """Boundary condition of a stencil array."""
    return A.boundary


def padding(A: Any) -> Padding:
    """Padding of a stencil array."""
    return A.padding
