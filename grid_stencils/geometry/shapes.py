"""
Offset generation for the named stencil shapes.

Every shape is a tag (StencilShape) plus a parameter tuple. A single
dispatch table maps the tag to a pure generator, and generate_offsets()
memoises the result per (tag, params), so a Moore(1, 2) built a thousand
times shares one offset tuple.

Radius-based shapes enumerate the candidate box [-R, R]^N in C order (last
axis varying fastest) and keep the offsets satisfying the shape rule:

    WINDOW         every offset, center included
    MOORE          every offset except the center
    VON_NEUMANN    0 < |o|_1 <= R
    CROSS          at most one non-zero coordinate (center included)
    VERTICAL       only axis 0 varies (center included)
    HORIZONTAL     only axis 1 varies, axis 0 for 1-D (center included)
    BACK_SLASH     o = k * (1, 1, ..., 1), k != 0
    FORWARD_SLASH  o = k * (1, -1, ..., -1), k != 0
    ANGLED_CROSS   all |o_i| equal and non-zero
    DIAMOND        |o|_1 <= R (center included)
    CIRCLE         0 < |o|_2 <= R
    ANNULUS        Ri < |o|_2 <= Ro
    CARDINAL       one non-zero coordinate of magnitude R
    ORDINAL        every coordinate is +-R

Explicit shapes (RECTANGLE, POSITIONAL, NAMED) carry their coordinates in
params and are validated here as well.
"""

from __future__ import annotations

import functools
import itertools
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from grid_stencils.utils.exceptions import ConstructionError, validate_ndims, validate_radius

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

Offset = tuple[int, ...]


class StencilShape(Enum):
    """Closed set of stencil geometries."""

    WINDOW = "window"
    MOORE = "moore"
    VON_NEUMANN = "von_neumann"
    CROSS = "cross"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    FORWARD_SLASH = "forward_slash"
    BACK_SLASH = "back_slash"
    ANGLED_CROSS = "angled_cross"
    DIAMOND = "diamond"
    CIRCLE = "circle"
    ANNULUS = "annulus"
    CARDINAL = "cardinal"
    ORDINAL = "ordinal"
    RECTANGLE = "rectangle"
    POSITIONAL = "positional"
    NAMED = "named"

    @property
    def is_explicit(self) -> bool:
        """True for shapes built from caller-supplied coordinates."""
        return self in (StencilShape.RECTANGLE, StencilShape.POSITIONAL, StencilShape.NAMED)


# =============================================================================
# Radius-based generators
# =============================================================================


def _candidates(radius: int, ndims: int) -> Iterable[Offset]:
    return itertools.product(range(-radius, radius + 1), repeat=ndims)


def _filtered(radius: int, ndims: int, keep: Callable[[Offset], bool]) -> tuple[Offset, ...]:
    return tuple(o for o in _candidates(radius, ndims) if keep(o))


def _nonzero(o: Offset) -> int:
    return sum(1 for c in o if c != 0)


def _window(radius: int, ndims: int) -> tuple[Offset, ...]:
    return tuple(_candidates(radius, ndims))


def _moore(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: any(o))


def _von_neumann(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: 0 < sum(abs(c) for c in o) <= radius)


def _cross(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: _nonzero(o) <= 1)


def _vertical(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: not any(o[1:]))


def _horizontal(radius: int, ndims: int) -> tuple[Offset, ...]:
    axis = 1 if ndims > 1 else 0
    return _filtered(radius, ndims, lambda o: all(c == 0 for i, c in enumerate(o) if i != axis))


def _back_slash(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: o[0] != 0 and all(c == o[0] for c in o))


def _forward_slash(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: o[0] != 0 and all(c == -o[0] for c in o[1:]))


def _angled_cross(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: o[0] != 0 and all(abs(c) == abs(o[0]) for c in o))


def _diamond(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: sum(abs(c) for c in o) <= radius)


def _circle(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: 0 < sum(c * c for c in o) <= radius * radius)


def _annulus(outer_radius: int, inner_radius: int, ndims: int) -> tuple[Offset, ...]:
    lo, hi = inner_radius * inner_radius, outer_radius * outer_radius
    return _filtered(outer_radius, ndims, lambda o: lo < sum(c * c for c in o) <= hi)


def _cardinal(radius: int, ndims: int) -> tuple[Offset, ...]:
    return _filtered(radius, ndims, lambda o: _nonzero(o) == 1 and max(abs(c) for c in o) == radius)


def _ordinal(radius: int, ndims: int) -> tuple[Offset, ...]:
    if radius == 0:
        return ()
    return _filtered(radius, ndims, lambda o: all(abs(c) == radius for c in o))


# =============================================================================
# Explicit generators
# =============================================================================


def _rectangle(*bounds: tuple[int, int]) -> tuple[Offset, ...]:
    axes = [range(lo, hi + 1) for lo, hi in bounds]
    return tuple(itertools.product(*axes))


def _verbatim(*offsets: Offset) -> tuple[Offset, ...]:
    return tuple(offsets)


_GENERATORS: dict[StencilShape, Callable[..., tuple[Offset, ...]]] = {
    StencilShape.WINDOW: _window,
    StencilShape.MOORE: _moore,
    StencilShape.VON_NEUMANN: _von_neumann,
    StencilShape.CROSS: _cross,
    StencilShape.HORIZONTAL: _horizontal,
    StencilShape.VERTICAL: _vertical,
    StencilShape.FORWARD_SLASH: _forward_slash,
    StencilShape.BACK_SLASH: _back_slash,
    StencilShape.ANGLED_CROSS: _angled_cross,
    StencilShape.DIAMOND: _diamond,
    StencilShape.CIRCLE: _circle,
    StencilShape.ANNULUS: _annulus,
    StencilShape.CARDINAL: _cardinal,
    StencilShape.ORDINAL: _ordinal,
    StencilShape.RECTANGLE: _rectangle,
    StencilShape.POSITIONAL: _verbatim,
    StencilShape.NAMED: _verbatim,
}

# Shapes only defined along diagonals need at least two axes
_MIN_NDIMS = {
    StencilShape.FORWARD_SLASH: 2,
    StencilShape.BACK_SLASH: 2,
    StencilShape.ANGLED_CROSS: 2,
}


@functools.lru_cache(maxsize=None)
def generate_offsets(shape: StencilShape, params: tuple) -> tuple[Offset, ...]:
    """
    Return the canonical ordered offsets for a shape and its parameters.

    Args:
        shape: Shape tag
        params: Validated parameter tuple, e.g. (radius, ndims) or
            (outer_radius, inner_radius, ndims) or the explicit coordinates

    Returns:
        Tuple of integer offset tuples, identical object for equal inputs
    """
    return _GENERATORS[shape](*params)


# =============================================================================
# Parameter validation
# =============================================================================


def radial_params(shape: StencilShape, radius, ndims) -> tuple[int, int]:
    """Validate (radius, ndims) for a radius-based shape."""
    component = f"{shape.name.title()}Stencil"
    radius = validate_radius(radius, component=component)
    ndims = validate_ndims(ndims, minimum=_MIN_NDIMS.get(shape, 1), component=component)
    return radius, ndims


def annulus_params(outer_radius, inner_radius, ndims) -> tuple[int, int, int]:
    """Validate (outer_radius, inner_radius, ndims) for an annulus."""
    outer = validate_radius(outer_radius, "outer_radius", component="AnnulusStencil")
    inner = validate_radius(inner_radius, "inner_radius", component="AnnulusStencil")
    ndims = validate_ndims(ndims, component="AnnulusStencil")
    if inner >= outer:
        raise ConstructionError(
            "inner_radius must be smaller than outer_radius",
            component="AnnulusStencil",
            diagnostic_data={"outer_radius": outer, "inner_radius": inner},
        )
    return outer, inner, ndims


def coordinate_params(offsets, component: str = "PositionalStencil") -> tuple[Offset, ...]:
    """
    Validate explicit offset coordinates.

    All coordinate tuples must be integer tuples with the length of the
    first one, which fixes the dimensionality.
    """
    coords = tuple(tuple(o) for o in offsets)
    if not coords:
        raise ConstructionError(
            "at least one offset is required to infer the stencil dimensionality",
            component=component,
        )

    ndims = len(coords[0])
    if ndims == 0:
        raise ConstructionError("offsets must have at least one coordinate", component=component)

    for i, coord in enumerate(coords):
        if len(coord) != ndims:
            raise ConstructionError(
                "all offsets must have the same number of coordinates",
                component=component,
                suggested_action=f"Give every offset {ndims} coordinates",
                diagnostic_data={"offset_index": i, "offset": coord, "expected_length": ndims},
            )
        if not all(_is_int(c) for c in coord):
            raise ConstructionError(
                "offset coordinates must be integers",
                component=component,
                diagnostic_data={"offset_index": i, "offset": coord},
            )

    return tuple(tuple(int(c) for c in coord) for coord in coords)


def rectangle_params(bounds) -> tuple[tuple[int, int], ...]:
    """Validate per-axis (lo, hi) bounds of a rectangle stencil."""
    pairs = tuple(tuple(b) for b in bounds)
    if not pairs:
        raise ConstructionError("a rectangle needs bounds for at least one axis", component="RectangleStencil")

    for axis, pair in enumerate(pairs):
        if len(pair) != 2 or not all(_is_int(c) for c in pair):
            raise ConstructionError(
                "each rectangle bound must be an integer (lo, hi) pair",
                component="RectangleStencil",
                diagnostic_data={"axis": axis, "bound": pair},
            )
        if pair[0] > pair[1]:
            raise ConstructionError(
                "rectangle lower bound exceeds upper bound",
                component="RectangleStencil",
                diagnostic_data={"axis": axis, "bound": pair},
            )

    return tuple((int(lo), int(hi)) for lo, hi in pairs)


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)
