"""
Stencil objects: an immutable offset geometry plus optional neighbour values.

A Stencil built by one of the factories (moore(), window(), ...) describes
only geometry. StencilArray.stencil_at() returns a *positioned* copy that
also holds the neighbour values around one cell and the value of that
cell itself. Positioned copies share the offset tuple and the derived
arrays of the shape they came from, so rebuilding one per cell is cheap.

Usage:
    >>> hood = moore(radius=1, ndims=2)
    >>> len(hood), hood.radius, hood.diameter
    (8, 1, 3)
    >>> hood.offsets[0]
    (-1, -1)
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import numpy as np

from grid_stencils.geometry.shapes import (
    StencilShape,
    annulus_params,
    coordinate_params,
    generate_offsets,
    radial_params,
    rectangle_params,
)
from grid_stencils.utils.exceptions import ConstructionError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    from numpy.typing import NDArray


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


class _Derived:
    """Arrays computed once per geometry and shared by every rebuilt copy."""

    __slots__ = ("offset_array", "distances", "distance_zones", "radius", "name_index")

    def __init__(self, offsets: tuple[tuple[int, ...], ...], ndims: int, names: tuple[str, ...] | None):
        offset_array = np.array(offsets, dtype=np.intp).reshape(len(offsets), ndims)
        self.offset_array = _readonly(offset_array)
        self.distances = _readonly(np.sqrt((offset_array.astype(float) ** 2).sum(axis=1)))
        # Round so that sqrt(2) from different offsets lands in one zone
        _, zones = np.unique(np.round(self.distances, 12), return_inverse=True)
        self.distance_zones = _readonly(zones.astype(np.intp).reshape(-1))
        self.radius = int(np.abs(offset_array).max()) if len(offsets) else 0
        self.name_index = {name: i for i, name in enumerate(names)} if names else {}


@functools.lru_cache(maxsize=None)
def _derive(offsets: tuple[tuple[int, ...], ...], ndims: int, names: tuple[str, ...] | None) -> _Derived:
    return _Derived(offsets, ndims, names)


class Stencil:
    """
    A fixed, ordered neighbourhood of integer offsets around a center cell.

    Attributes:
        shape: StencilShape tag the offsets were generated from
        params: Parameter tuple of the shape
        offsets: Tuple of N-tuples, in generation order
        names: Per-offset names for NAMED stencils, else None
        neighbors: Neighbour values in offset order (positioned only)
        center: Value of the center cell (positioned only)
    """

    __slots__ = ("_shape", "_params", "_offsets", "_ndims", "_names", "_derived", "_neighbors", "_center")

    def __init__(
        self,
        shape: StencilShape,
        params: tuple,
        ndims: int,
        names: tuple[str, ...] | None = None,
    ):
        self._shape = shape
        self._params = params
        self._offsets = generate_offsets(shape, params)
        self._ndims = ndims
        self._names = names
        self._derived = _derive(self._offsets, ndims, names)
        self._neighbors = None
        self._center = None

    # -------------------------------------------------------------------------
    # Geometry queries
    # -------------------------------------------------------------------------

    @property
    def shape(self) -> StencilShape:
        return self._shape

    @property
    def params(self) -> tuple:
        return self._params

    @property
    def offsets(self) -> tuple[tuple[int, ...], ...]:
        return self._offsets

    @property
    def offset_array(self) -> NDArray[np.intp]:
        """Read-only (K, N) integer array of the offsets."""
        return self._derived.offset_array

    @property
    def ndims(self) -> int:
        return self._ndims

    @property
    def radius(self) -> int:
        """Largest absolute offset coordinate, 0 for an empty stencil."""
        return self._derived.radius

    @property
    def diameter(self) -> int:
        return 2 * self.radius + 1

    @property
    def distances(self) -> NDArray[np.floating]:
        """Euclidean distance of each offset from the center cell."""
        return self._derived.distances

    @property
    def distance_zones(self) -> NDArray[np.intp]:
        """Integer zone per offset; equal distances share a zone, zones increase with distance."""
        return self._derived.distance_zones

    @property
    def names(self) -> tuple[str, ...] | None:
        return self._names

    def indices(self, index: Sequence[int]) -> list[tuple[int, ...]]:
        """Raw coordinates index + offset for every offset. No boundary handling."""
        base = np.asarray(index, dtype=np.intp)
        return [tuple(int(c) for c in row) for row in self.offset_array + base]

    def __len__(self) -> int:
        return len(self._offsets)

    # -------------------------------------------------------------------------
    # Positioned state
    # -------------------------------------------------------------------------

    @property
    def is_positioned(self) -> bool:
        return self._neighbors is not None

    @property
    def neighbors(self) -> NDArray | None:
        """Neighbour values in offset order, None for an unpositioned stencil."""
        return self._neighbors

    @property
    def center(self) -> Any:
        """Value of the cell the stencil is centred on. It may or may not be one of the neighbours."""
        return self._center

    def rebuild(self, neighbors: Any, center: Any = None) -> Stencil:
        """
        Return a stencil of the same geometry holding new neighbour values.

        Args:
            neighbors: Values in offset order, one per offset
            center: Value of the center cell

        Returns:
            New positioned Stencil sharing this stencil's geometry
        """
        values = np.asarray(neighbors) if not isinstance(neighbors, np.ndarray) else neighbors
        if values.shape[:1] != (len(self._offsets),):
            raise ConstructionError(
                "neighbour count does not match the stencil",
                component="Stencil",
                diagnostic_data={"expected": len(self._offsets), "provided": values.shape[:1]},
            )
        new = object.__new__(Stencil)
        new._shape = self._shape
        new._params = self._params
        new._offsets = self._offsets
        new._ndims = self._ndims
        new._names = self._names
        new._derived = self._derived
        new._neighbors = values
        new._center = center
        return new

    def positioned(self, fetch: Callable[[NDArray[np.intp]], NDArray], center: Any) -> Stencil:
        """Rebuild with neighbours fetched for this stencil's offset array."""
        return self.rebuild(fetch(self.offset_array), center)

    # -------------------------------------------------------------------------
    # Value access
    # -------------------------------------------------------------------------

    def __iter__(self) -> Iterator:
        if self._neighbors is None:
            return iter(self._offsets)
        return iter(self._neighbors)

    def __array__(self, dtype=None, copy=None):
        # Lets np.mean(hood), np.sum(hood) etc. reduce over the neighbour values
        if self._neighbors is None:
            raise TypeError("stencil has no neighbour values to convert")
        if copy:
            return np.array(self._neighbors, dtype=dtype)
        return np.asarray(self._neighbors, dtype=dtype)

    def __getitem__(self, key: int | str) -> Any:
        if self._neighbors is None:
            raise TypeError("stencil has no neighbour values; use StencilArray.stencil_at() first")
        if isinstance(key, str):
            try:
                key = self._derived.name_index[key]
            except KeyError:
                raise KeyError(f"stencil has no offset named {key!r}") from None
        return self._neighbors[key]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        derived = self._derived
        if name in derived.name_index and self._neighbors is not None:
            return self._neighbors[derived.name_index[name]]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    # -------------------------------------------------------------------------
    # Equality and display (geometry only)
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stencil):
            return NotImplemented
        return (
            self._shape == other._shape
            and self._params == other._params
            and self._ndims == other._ndims
            and self._names == other._names
        )

    def __hash__(self) -> int:
        return hash((self._shape, self._params, self._ndims, self._names))

    def __repr__(self) -> str:
        text = f"Stencil({self._shape.value}, radius={self.radius}, ndims={self._ndims}, n={len(self)})"
        if self._neighbors is not None:
            text += f" with neighbors {self._neighbors!r}"
        return text


# =============================================================================
# Factories for the radius-based shapes
# =============================================================================


def _radial(shape: StencilShape, radius: int, ndims: int) -> Stencil:
    radius, ndims = radial_params(shape, radius, ndims)
    return Stencil(shape, (radius, ndims), ndims)


def window(radius: int = 1, ndims: int = 2) -> Stencil:
    """Every cell within Chebyshev distance radius, including the center."""
    return _radial(StencilShape.WINDOW, radius, ndims)


def moore(radius: int = 1, ndims: int = 2) -> Stencil:
    """Every cell within Chebyshev distance radius, excluding the center."""
    return _radial(StencilShape.MOORE, radius, ndims)


def von_neumann(radius: int = 1, ndims: int = 2) -> Stencil:
    """Diamond of Manhattan distance radius without the center. Same as moore() in 1-D."""
    return _radial(StencilShape.VON_NEUMANN, radius, ndims)


def cross(radius: int = 1, ndims: int = 2) -> Stencil:
    """Offsets with at most one non-zero coordinate, center included."""
    return _radial(StencilShape.CROSS, radius, ndims)


def horizontal(radius: int = 1, ndims: int = 2) -> Stencil:
    """A bar along axis 1 (columns), or axis 0 for 1-D grids."""
    return _radial(StencilShape.HORIZONTAL, radius, ndims)


def vertical(radius: int = 1, ndims: int = 2) -> Stencil:
    """A bar along axis 0 (rows)."""
    return _radial(StencilShape.VERTICAL, radius, ndims)


def forward_slash(radius: int = 1, ndims: int = 2) -> Stencil:
    """The '/' diagonal: o = k * (1, -1, ..., -1) for k != 0."""
    return _radial(StencilShape.FORWARD_SLASH, radius, ndims)


def back_slash(radius: int = 1, ndims: int = 2) -> Stencil:
    """The '\\' diagonal: o = k * (1, 1, ..., 1) for k != 0."""
    return _radial(StencilShape.BACK_SLASH, radius, ndims)


def angled_cross(radius: int = 1, ndims: int = 2) -> Stencil:
    """All diagonal directions, without the center."""
    return _radial(StencilShape.ANGLED_CROSS, radius, ndims)


def diamond(radius: int = 1, ndims: int = 2) -> Stencil:
    """Cross-polytope of Manhattan distance radius, center included."""
    return _radial(StencilShape.DIAMOND, radius, ndims)


def circle(radius: int = 1, ndims: int = 2) -> Stencil:
    """Offsets with Euclidean norm <= radius, excluding the center."""
    return _radial(StencilShape.CIRCLE, radius, ndims)


def cardinal(radius: int = 1, ndims: int = 2) -> Stencil:
    """The axis directions (N, S, W, E in 2-D) at distance radius."""
    return _radial(StencilShape.CARDINAL, radius, ndims)


def ordinal(radius: int = 1, ndims: int = 2) -> Stencil:
    """The diagonal corners (NE, SE, SW, NW in 2-D) at distance radius."""
    return _radial(StencilShape.ORDINAL, radius, ndims)


def annulus(outer_radius: int = 2, inner_radius: int = 1, ndims: int = 2) -> Stencil:
    """Offsets with inner_radius < Euclidean norm <= outer_radius."""
    params = annulus_params(outer_radius, inner_radius, ndims)
    return Stencil(StencilShape.ANNULUS, params, params[2])


# =============================================================================
# Factories for explicit shapes
# =============================================================================


def _unpack_coordinates(args: tuple) -> tuple:
    # positional((0, 1), (1, 0)) and positional(((0, 1), (1, 0))) are equivalent
    if len(args) == 1 and len(args[0]) and all(isinstance(a, (tuple, list, np.ndarray)) for a in args[0]):
        return tuple(args[0])
    return args


def positional(*offsets: Sequence[int]) -> Stencil:
    """
    Stencil of arbitrary shape given by explicit offset coordinates.

    The radius is the most distant coordinate and the dimensionality is the
    length of the first coordinate.

    Example:
        >>> p = positional((0, -1), (2, 1), (-1, 1), (0, 1))
        >>> p.radius, p.ndims
        (2, 2)
    """
    coords = coordinate_params(_unpack_coordinates(offsets))
    return Stencil(StencilShape.POSITIONAL, coords, len(coords[0]))


def rectangle(*bounds: Sequence[int]) -> Stencil:
    """
    Rectangular stencil given by one (lo, hi) bound pair per axis.

    Example:
        >>> r = rectangle((-1, 1), (0, 2))
        >>> len(r)
        9
    """
    pairs = rectangle_params(_unpack_coordinates(bounds))
    return Stencil(StencilShape.RECTANGLE, pairs, len(pairs))


def named_stencil(
    names: Sequence[str] | Mapping[str, Sequence[int]] | None = None,
    stencil: Stencil | None = None,
    **named_offsets: Sequence[int],
) -> Stencil:
    """
    Stencil whose offsets each carry a name, so values read like fields.

    Accepted forms:
        named_stencil(west=(0, -1), north=(-1, 0))
        named_stencil({"west": (0, -1), "north": (-1, 0)})
        named_stencil(("w", "n", "s", "e"), von_neumann(1))

    Positioned named stencils support ``s.west`` and ``s["west"]``.
    """
    if isinstance(names, Mapping):
        if named_offsets or stencil is not None:
            raise ConstructionError("pass offsets either as a mapping or as keywords", component="NamedStencil")
        named_offsets = dict(names)
        names = None

    if stencil is not None:
        if names is None or named_offsets:
            raise ConstructionError("naming an existing stencil needs a names sequence only", component="NamedStencil")
        keys = tuple(names)
        offsets = stencil.offsets
    else:
        if names is not None:
            raise ConstructionError("names without a stencil need offsets", component="NamedStencil")
        keys = tuple(named_offsets)
        offsets = tuple(named_offsets.values())

    if len(keys) != len(offsets):
        raise ConstructionError(
            "the number of names must equal the number of offsets",
            component="NamedStencil",
            diagnostic_data={"names": len(keys), "offsets": len(offsets)},
        )
    if len(set(keys)) != len(keys) or not all(isinstance(k, str) and k.isidentifier() for k in keys):
        raise ConstructionError(
            "names must be unique identifiers",
            component="NamedStencil",
            diagnostic_data={"names": keys},
        )

    coords = coordinate_params(offsets, component="NamedStencil")
    return Stencil(StencilShape.NAMED, coords, len(coords[0]), names=keys)


_FACTORIES: dict[StencilShape, Callable[..., Stencil]] = {
    StencilShape.WINDOW: window,
    StencilShape.MOORE: moore,
    StencilShape.VON_NEUMANN: von_neumann,
    StencilShape.CROSS: cross,
    StencilShape.HORIZONTAL: horizontal,
    StencilShape.VERTICAL: vertical,
    StencilShape.FORWARD_SLASH: forward_slash,
    StencilShape.BACK_SLASH: back_slash,
    StencilShape.ANGLED_CROSS: angled_cross,
    StencilShape.DIAMOND: diamond,
    StencilShape.CIRCLE: circle,
    StencilShape.ANNULUS: annulus,
    StencilShape.CARDINAL: cardinal,
    StencilShape.ORDINAL: ordinal,
    StencilShape.RECTANGLE: rectangle,
    StencilShape.POSITIONAL: positional,
}


def create_stencil(shape: StencilShape | str, *args: Any, **kwargs: Any) -> Stencil:
    """
    Build a stencil from a shape tag or its string name.

    Example:
        >>> create_stencil("von_neumann", radius=2, ndims=3)
    """
    if isinstance(shape, str):
        try:
            shape = StencilShape(shape.lower())
        except ValueError:
            valid = ", ".join(s.value for s in StencilShape)
            raise ConstructionError(
                f"unknown stencil shape {shape!r}",
                component="create_stencil",
                suggested_action=f"Use one of: {valid}",
            ) from None
    if shape is StencilShape.NAMED:
        return named_stencil(*args, **kwargs)
    return _FACTORIES[shape](*args, **kwargs)
