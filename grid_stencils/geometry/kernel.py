"""
Kernel stencils: a stencil paired with one weight per offset.

The weights follow the offset order of the wrapped stencil. Because offsets
are generated in C order, a dense weight array of shape (2R+1,)*N lines up
with window(R, N) after ravel():

    >>> sharpen = [[0, -1, 0], [-1, 5, -1], [0, -1, 0]]
    >>> k = Kernel(window(1), sharpen)
    >>> out = mapstencil(kernelproduct, StencilArray(image, k))

kernelproduct() is a plain sum of neighbour * weight products. Each
neighbour is multiplied as a single value, so grids whose elements are
themselves small vectors are weighted element-wise rather than reduced by
a recursive dot product.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from grid_stencils.geometry.stencil import Stencil
from grid_stencils.utils.exceptions import ConstructionError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from numpy.typing import ArrayLike, NDArray


class Kernel:
    """
    A stencil with a weight vector of the same length and order.

    Args:
        stencil: Geometry to wrap
        weights: Array-like of weights, flattened in C order; its size must
            equal the number of offsets
    """

    __slots__ = ("_stencil", "_weights")

    def __init__(self, stencil: Stencil, weights: ArrayLike):
        if isinstance(stencil, Kernel):
            stencil = stencil.stencil
        if not isinstance(stencil, Stencil):
            raise ConstructionError(
                "a Kernel wraps a single Stencil",
                component="Kernel",
                diagnostic_data={"provided_type": type(stencil).__name__},
            )
        flat = np.asarray(weights).ravel()
        if flat.size != len(stencil):
            raise ConstructionError(
                "kernel weights must have one entry per stencil offset",
                component="Kernel",
                suggested_action=f"Provide {len(stencil)} weights in offset order",
                diagnostic_data={"offsets": len(stencil), "weights": flat.size},
            )
        flat = flat.copy()
        flat.flags.writeable = False
        self._stencil = stencil
        self._weights = flat

    @property
    def stencil(self) -> Stencil:
        return self._stencil

    @property
    def weights(self) -> NDArray:
        return self._weights

    # Geometry is delegated to the wrapped stencil

    @property
    def offsets(self) -> tuple[tuple[int, ...], ...]:
        return self._stencil.offsets

    @property
    def offset_array(self) -> NDArray[np.intp]:
        return self._stencil.offset_array

    @property
    def ndims(self) -> int:
        return self._stencil.ndims

    @property
    def radius(self) -> int:
        return self._stencil.radius

    @property
    def diameter(self) -> int:
        return self._stencil.diameter

    @property
    def distances(self) -> NDArray[np.floating]:
        return self._stencil.distances

    @property
    def distance_zones(self) -> NDArray[np.intp]:
        return self._stencil.distance_zones

    @property
    def names(self) -> tuple[str, ...] | None:
        return self._stencil.names

    @property
    def neighbors(self) -> NDArray | None:
        return self._stencil.neighbors

    @property
    def center(self) -> Any:
        return self._stencil.center

    def indices(self, index) -> list[tuple[int, ...]]:
        return self._stencil.indices(index)

    def rebuild(self, neighbors: Any, center: Any = None) -> Kernel:
        new = object.__new__(Kernel)
        new._stencil = self._stencil.rebuild(neighbors, center)
        new._weights = self._weights
        return new

    def positioned(self, fetch: Callable[[NDArray[np.intp]], NDArray], center: Any) -> Kernel:
        return self.rebuild(fetch(self.offset_array), center)

    def __len__(self) -> int:
        return len(self._stencil)

    def __iter__(self) -> Iterator:
        return iter(self._stencil)

    def __array__(self, dtype=None, copy=None):
        return self._stencil.__array__(dtype=dtype, copy=copy)

    def __getitem__(self, key: int | str) -> Any:
        return self._stencil[key]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Kernel):
            return NotImplemented
        return self._stencil == other._stencil and np.array_equal(self._weights, other._weights)

    def __hash__(self) -> int:
        return hash((self._stencil, self._weights.tobytes()))

    def __repr__(self) -> str:
        return f"Kernel({self._stencil!r}, weights={self._weights!r})"


def kernel_from_function(f: Callable[[float], float], stencil: Stencil) -> Kernel:
    """
    Build a kernel whose weight for each offset is f(distance of that offset).

    Example:
        >>> k = kernel_from_function(lambda d: np.exp(-d), moore(2))
    """
    weights = np.array([f(float(d)) for d in stencil.distances])
    return Kernel(stencil, weights)


def kernel(hood: Kernel) -> NDArray:
    """Return the weight vector of a kernel stencil."""
    return hood.weights


def kernelproduct(hood: Kernel | Stencil, weights: ArrayLike | None = None) -> Any:
    """
    Weighted sum of the neighbour values: sum(neighbors[i] * weights[i]).

    Args:
        hood: A positioned Kernel, or a positioned Stencil together with weights
        weights: Weights in offset order, required when hood is a plain Stencil

    Returns:
        The scalar (or element-typed) weighted sum
    """
    if weights is None:
        if not isinstance(hood, Kernel):
            raise TypeError("kernelproduct() needs a Kernel or explicit weights")
        w = hood.weights
    else:
        w = np.asarray(weights).ravel()

    values = hood.neighbors
    if values is None:
        raise TypeError("kernelproduct() needs a positioned stencil")
    if len(values) != len(w):
        raise ValueError(f"{len(values)} neighbours but {len(w)} weights")

    if values.dtype != object:
        return np.dot(values, w)

    # Object elements (e.g. small vectors) are scaled as whole values
    if len(values) == 0:
        return w.dtype.type(0)
    total = values[0] * w[0]
    for value, weight in zip(values[1:], w[1:], strict=True):
        total = total + value * weight
    return total
