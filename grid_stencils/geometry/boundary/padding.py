"""
Padding strategies: per-read bound checks or a pre-extended halo buffer.

Padding kinds:
    CONDITIONAL  no extra memory; every stencil read tests its raw
                 coordinates and resolves out-of-range ones through the
                 boundary condition
    HALO_OUT     a new buffer, larger by `width` on every side, is allocated
                 and its margin filled once from the boundary condition;
                 reads never leave the buffer so no per-read branch is needed
    HALO_IN      the outer `width` cells of the caller's buffer already are
                 the halo; nothing is copied

Pairing rules (check_pairing):
    - USE is only valid with HALO_IN, and HALO_IN only with USE
    - CONDITIONAL and HALO_OUT accept REMOVE, WRAP and REFLECT
    - an explicit halo width must be at least the stencil radius

HALO_IN + USE trusts the caller that the margin holds correct values. This
is not checked at runtime.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from grid_stencils.geometry.boundary.conditions import BCType, BoundaryCondition, resolve_index_array
from grid_stencils.utils.exceptions import ConstructionError
from grid_stencils.utils.logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)


class PaddingType(Enum):
    """Padding strategies."""

    CONDITIONAL = "conditional"
    HALO_IN = "halo_in"
    HALO_OUT = "halo_out"


@dataclass(frozen=True)
class Padding:
    """
    Padding policy of a stencil array.

    Attributes:
        padding_type: Strategy
        width: Halo width for the HALO kinds. None means "use the stencil
            radius" and is filled in when the stencil array is built.
    """

    padding_type: PaddingType
    width: int | None = None

    @property
    def is_halo(self) -> bool:
        return self.padding_type is not PaddingType.CONDITIONAL

    @property
    def halo_width(self) -> int:
        """Margin width of the backing buffer (0 for CONDITIONAL)."""
        return (self.width or 0) if self.is_halo else 0

    def __repr__(self) -> str:
        if self.padding_type is PaddingType.CONDITIONAL:
            return "conditional()"
        side = "in" if self.padding_type is PaddingType.HALO_IN else "out"
        return f"halo({side!r}, width={self.width!r})"


def conditional() -> Padding:
    """Bound-check every read. No memory overhead."""
    return Padding(PaddingType.CONDITIONAL)


def halo(side: str = "out", width: int | None = None) -> Padding:
    """
    Halo padding.

    Args:
        side: "out" to allocate an extended copy, "in" to treat the outer
            margin of the given buffer as the halo
        width: Halo width, defaults to the stencil radius
    """
    kinds = {"out": PaddingType.HALO_OUT, "in": PaddingType.HALO_IN}
    if side not in kinds:
        raise ConstructionError(
            f"halo side must be 'in' or 'out', got {side!r}",
            component="Padding",
        )
    if width is not None and (isinstance(width, bool) or not isinstance(width, (int, np.integer)) or width < 0):
        raise ConstructionError(
            "halo width must be a non-negative integer",
            component="Padding",
            diagnostic_data={"provided_value": repr(width)},
        )
    return Padding(kinds[side], None if width is None else int(width))


_PADDING_ALIASES = {
    "conditional": PaddingType.CONDITIONAL,
    "halo_in": PaddingType.HALO_IN,
    "in": PaddingType.HALO_IN,
    "halo_out": PaddingType.HALO_OUT,
    "out": PaddingType.HALO_OUT,
    "halo": PaddingType.HALO_OUT,
}


def as_padding(padding: Padding | PaddingType | str) -> Padding:
    """Normalise a padding specification given as object, enum or string."""
    if isinstance(padding, Padding):
        return padding
    if isinstance(padding, PaddingType):
        return Padding(padding)
    if isinstance(padding, str) and padding.lower() in _PADDING_ALIASES:
        return Padding(_PADDING_ALIASES[padding.lower()])
    raise ConstructionError(
        f"unknown padding {padding!r}",
        component="Padding",
        suggested_action="Use conditional(), halo('out'), halo('in') or one of " + ", ".join(_PADDING_ALIASES),
    )


def check_pairing(boundary: BoundaryCondition, padding: Padding, radius: int) -> Padding:
    """
    Validate a boundary/padding pair and fill in the halo width.

    Args:
        boundary: Boundary policy
        padding: Padding policy
        radius: Stencil radius

    Returns:
        Padding with its width set (radius when it was None)

    Raises:
        ConstructionError: For incompatible pairs or a halo narrower than radius
    """
    is_use = boundary.bc_type is BCType.USE
    is_halo_in = padding.padding_type is PaddingType.HALO_IN

    if is_use != is_halo_in:
        if is_use:
            suggestion = "Use halo('in') padding with a buffer whose margin already holds the boundary values"
        else:
            suggestion = "Use the use() boundary with halo('in'), or halo('out') to have the margin filled"
        raise ConstructionError(
            f"boundary {boundary!r} cannot be combined with padding {padding!r}",
            component="StencilArray",
            suggested_action=suggestion,
            diagnostic_data={"boundary": boundary.bc_type.value, "padding": padding.padding_type.value},
        )

    if not padding.is_halo:
        return padding

    if padding.width is None:
        return dataclasses.replace(padding, width=radius)
    if padding.width < radius:
        raise ConstructionError(
            "halo width is smaller than the stencil radius",
            component="StencilArray",
            suggested_action=f"Use a halo width of at least {radius}",
            diagnostic_data={"halo_width": padding.width, "radius": radius},
        )
    return padding


# =============================================================================
# Halo construction
# =============================================================================


def _padded_dtype(data: NDArray, padval) -> np.dtype:
    return np.result_type(data.dtype, padval)


def pad_array_with_halo(data: NDArray, boundary: BoundaryCondition, width: int) -> NDArray:
    """
    Return a copy of data extended by `width` cells on every side.

    The margin follows the boundary policy: REMOVE fills padval, WRAP and
    REFLECT gather the interior through the same per-axis resolution used
    for conditional reads, so both padding strategies see identical values
    (also when width exceeds an axis length).

    Args:
        data: Grid without halo
        boundary: REMOVE, WRAP or REFLECT
        width: Halo width

    Returns:
        New array of shape data.shape + 2 * width
    """
    bc_type = boundary.bc_type
    if bc_type is BCType.USE:
        raise ConstructionError("the use() boundary has no rule to fill a halo", component="pad_array_with_halo")

    logger.debug(f"Allocating halo of width {width} around grid {data.shape} ({bc_type.value})")

    if bc_type is BCType.REMOVE:
        if data.dtype == object:
            # padval may itself be a sequence, store it per cell
            padded = np.empty(tuple(n + 2 * width for n in data.shape), dtype=object)
            padded.fill(boundary.padval)
            padded[interior_slices(padded.shape, width)] = data
            return padded
        dtype = _padded_dtype(data, boundary.padval)
        return np.pad(data.astype(dtype, copy=False), width, mode="constant", constant_values=boundary.padval)

    if width and 0 in data.shape:
        raise ConstructionError(
            f"cannot {bc_type.value} an empty axis",
            component="pad_array_with_halo",
            diagnostic_data={"shape": data.shape},
        )

    padded = data
    for axis, length in enumerate(data.shape):
        source = resolve_index_array(bc_type, length, np.arange(-width, length + width, dtype=np.intp))
        padded = np.take(padded, source, axis=axis)
    return padded


def interior_slices(shape: tuple[int, ...], width: int) -> tuple[slice, ...]:
    """Slices selecting the non-halo region of a padded buffer."""
    return tuple(slice(width, n - width) for n in shape)


def refresh_halo(buffer: NDArray, boundary: BoundaryCondition, width: int) -> None:
    """
    Re-fill the margin of a padded buffer from its interior, in place.

    Used after a mapping pass wrote new interior values into a HALO_OUT
    destination.
    """
    if width == 0:
        return
    interior = buffer[interior_slices(buffer.shape, width)]
    buffer[...] = pad_array_with_halo(np.array(interior), boundary, width)
