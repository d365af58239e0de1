"""
Boundary conditions for stencil reads that fall outside the grid.

This module provides:
- BCType: Enum of the boundary policies (REMOVE, USE, WRAP, REFLECT)
- BoundaryCondition: The policy object stored on a StencilArray
- resolve / resolve_axis / resolve_indices: Coordinate resolution

Policies (each axis resolved independently, L = extent of the axis):
    REMOVE   out-of-range reads return padval instead of touching the grid
    USE      coordinates pass through unchanged; the buffer must already
             hold valid data there (only meaningful with Halo-in padding)
    WRAP     i -> i mod L (toroidal topology)
    REFLECT  symmetric mirror including the edge: -1 -> 0, -2 -> 1,
             L -> L-1; offsets beyond one grid length keep reflecting with
             period 2L

For a corner read out of range on several axes, every axis goes through
the same rule before the coordinate is reassembled. With REMOVE a single
out-of-range axis removes the whole point.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np

from grid_stencils.utils.exceptions import ConstructionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray


class BCType(Enum):
    """Boundary condition types."""

    REMOVE = "remove"
    USE = "use"
    WRAP = "wrap"
    REFLECT = "reflect"


@dataclass(frozen=True)
class BoundaryCondition:
    """
    Boundary policy of a stencil array.

    Attributes:
        bc_type: Which policy to apply
        padval: Substitute value for REMOVE (ignored by the other policies)

    Examples:
        >>> BoundaryCondition(BCType.WRAP)
        >>> remove(padval=np.nan)
    """

    bc_type: BCType
    padval: Any = 0

    def __repr__(self) -> str:
        if self.bc_type is BCType.REMOVE:
            return f"remove(padval={self.padval!r})"
        return f"{self.bc_type.value}()"


def remove(padval: Any = 0) -> BoundaryCondition:
    """Out-of-range neighbours read as padval."""
    return BoundaryCondition(BCType.REMOVE, padval)


def use() -> BoundaryCondition:
    """Read the existing halo of the buffer (requires Halo-in padding)."""
    return BoundaryCondition(BCType.USE)


def wrap() -> BoundaryCondition:
    """Out-of-range neighbours wrap around to the opposite side."""
    return BoundaryCondition(BCType.WRAP)


def reflect() -> BoundaryCondition:
    """Out-of-range neighbours are mirrored back into the grid."""
    return BoundaryCondition(BCType.REFLECT)


def as_boundary(boundary: BoundaryCondition | BCType | str) -> BoundaryCondition:
    """
    Normalise a boundary specification.

    Args:
        boundary: A BoundaryCondition, a BCType, or one of
            "remove", "use", "wrap", "reflect"

    Returns:
        BoundaryCondition (REMOVE gets padval 0 unless given as an object)
    """
    if isinstance(boundary, BoundaryCondition):
        return boundary
    if isinstance(boundary, BCType):
        return BoundaryCondition(boundary)
    if isinstance(boundary, str):
        try:
            return BoundaryCondition(BCType(boundary.lower()))
        except ValueError:
            pass
    valid = ", ".join(repr(t.value) for t in BCType)
    raise ConstructionError(
        f"unknown boundary condition {boundary!r}",
        component="BoundaryCondition",
        suggested_action=f"Use a BoundaryCondition or one of {valid}",
    )


# =============================================================================
# Resolution
# =============================================================================


class ResolutionKind(Enum):
    """What resolve() decided for a raw coordinate."""

    PASS_THROUGH = "pass_through"
    ADJUSTED = "adjusted"
    SUBSTITUTE = "substitute"


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving one raw coordinate.

    Attributes:
        kind: PASS_THROUGH (in range or USE), ADJUSTED (wrapped/reflected)
            or SUBSTITUTE (removed)
        coordinate: Coordinate to read, None for SUBSTITUTE
        value: Substitute value for SUBSTITUTE, else None
    """

    kind: ResolutionKind
    coordinate: tuple[int, ...] | None = None
    value: Any = None


def resolve_axis(bc_type: BCType, length: int, index: int) -> int | None:
    """
    Resolve a single axis coordinate.

    Args:
        bc_type: Boundary policy
        length: Extent L of the axis
        index: Raw coordinate, possibly outside [0, L)

    Returns:
        In-range coordinate, or None when REMOVE drops the point

    Examples:
        >>> resolve_axis(BCType.WRAP, 4, -1)
        3
        >>> resolve_axis(BCType.REFLECT, 4, 4)
        3
    """
    if 0 <= index < length or bc_type is BCType.USE:
        return index
    if bc_type is BCType.REMOVE:
        return None
    if bc_type is BCType.WRAP:
        return index % length
    folded = index % (2 * length)
    return folded if folded < length else 2 * length - 1 - folded


def resolve(
    boundary: BoundaryCondition | BCType | str,
    extents: Sequence[int],
    raw_coordinate: Sequence[int],
) -> Resolution:
    """
    Translate a raw grid coordinate according to a boundary policy.

    Args:
        boundary: Boundary policy
        extents: Grid shape
        raw_coordinate: Coordinate that may lie outside the grid

    Returns:
        Resolution telling the caller what to read
    """
    boundary = as_boundary(boundary)
    raw = tuple(int(c) for c in raw_coordinate)
    if len(raw) != len(extents):
        raise ValueError(f"coordinate {raw} does not match grid extents {tuple(extents)}")

    if all(0 <= c < n for c, n in zip(raw, extents, strict=True)) or boundary.bc_type is BCType.USE:
        return Resolution(ResolutionKind.PASS_THROUGH, coordinate=raw)

    resolved = tuple(resolve_axis(boundary.bc_type, n, c) for c, n in zip(raw, extents, strict=True))
    if any(c is None for c in resolved):
        return Resolution(ResolutionKind.SUBSTITUTE, value=boundary.padval)
    return Resolution(ResolutionKind.ADJUSTED, coordinate=resolved)


def resolve_index_array(bc_type: BCType, length: int, indices: NDArray[np.intp]) -> NDArray[np.intp]:
    """
    Vectorised resolve_axis() for WRAP, REFLECT and USE.

    REMOVE has no index form; callers mask removed points instead.
    """
    if bc_type is BCType.WRAP:
        return np.mod(indices, length)
    if bc_type is BCType.REFLECT:
        folded = np.mod(indices, 2 * length)
        return np.where(folded < length, folded, 2 * length - 1 - folded)
    if bc_type is BCType.USE:
        return indices
    raise ValueError("REMOVE cannot be resolved to indices")


def resolve_indices(
    boundary: BoundaryCondition,
    extents: Sequence[int],
    coords: NDArray[np.intp],
) -> tuple[NDArray[np.intp], NDArray[np.bool_] | None]:
    """
    Resolve a (K, N) block of raw coordinates.

    Args:
        boundary: Boundary policy
        extents: Grid shape (N,)
        coords: Raw coordinates, one row per stencil offset

    Returns:
        (resolved, valid) where resolved is safe to index the grid with and
        valid marks rows that were not removed. valid is None when every
        row is readable, which is the common interior case.
    """
    shape = np.asarray(extents, dtype=np.intp)
    inside = (coords >= 0) & (coords < shape)
    if inside.all():
        return coords, None

    bc_type = boundary.bc_type
    if bc_type is BCType.REMOVE:
        valid = inside.all(axis=1)
        return np.where(inside, coords, 0), valid

    resolved = np.empty_like(coords)
    for axis, length in enumerate(shape):
        resolved[:, axis] = resolve_index_array(bc_type, int(length), coords[:, axis])
    return resolved, None
