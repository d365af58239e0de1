"""
Stencil mapping: apply a function to the positioned stencil of every cell.

    out[I] = f(A.stencil_at(I), aux_1[I], aux_2[I], ...)

mapstencil() allocates the result; mapstencil_into() writes into an
existing array or into the destination buffer of a SwitchingStencilArray.

Destination sizes accepted by mapstencil_into (L = source shape, R = radius):
    L          every cell is a center
    L - 2R     only centers whose whole stencil lies inside the grid,
               R <= I_k < L_k - R, written at I - R
A destination with another number of axes raises DimensionMismatchError,
any other shape SizeError, both before a single cell is written.

The engine makes no promise about traversal order. With
MapStencilConfig(n_workers > 1) the center domain is split into bands
along axis 0, each band evaluated by a worker thread; the call returns
after every band is done. f must therefore not rely on side effects
between cells.

Kernel fast path:
    When f is kernelproduct and the stencil is a numeric Kernel, the pass
    is evaluated as sum_i weight_i * shifted_view_i over a halo-padded
    buffer. The per-cell definition above still describes the result.
"""

from __future__ import annotations

import itertools
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

import numpy as np

from grid_stencils.arrays.stencil_array import StencilArray
from grid_stencils.arrays.switching import SwitchingStencilArray
from grid_stencils.config.core import MapStencilConfig
from grid_stencils.geometry.boundary.padding import pad_array_with_halo
from grid_stencils.geometry.kernel import Kernel, kernelproduct
from grid_stencils.geometry.layered import Layered
from grid_stencils.geometry.stencil import Stencil
from grid_stencils.utils.exceptions import DimensionMismatchError, SizeError
from grid_stencils.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from numpy.typing import NDArray

logger = get_logger(__name__)

_NUMERIC_KINDS = "iufc"


# =============================================================================
# Argument preparation
# =============================================================================


def _as_source(source: Any) -> StencilArray:
    if isinstance(source, SwitchingStencilArray):
        return source.source
    if isinstance(source, StencilArray):
        return source
    raise TypeError(f"expected a StencilArray or SwitchingStencilArray, got {type(source).__name__}")


def _prepare_aux(args: Sequence[Any], shape: tuple[int, ...], check: bool, component: str) -> tuple[NDArray, ...]:
    """Auxiliary arrays as plain ndarrays of the logical grid shape."""
    prepared = []
    for position, arg in enumerate(args):
        if isinstance(arg, (StencilArray, SwitchingStencilArray)):
            array = arg.values
        else:
            array = np.asarray(arg)
        if check and array.shape != shape:
            name = f"args[{position}]"
            if array.ndim != len(shape):
                raise DimensionMismatchError(
                    array_name=name,
                    provided_ndim=array.ndim,
                    expected_ndim=len(shape),
                    component=component,
                    context="auxiliary arrays are indexed with the center index",
                )
            raise SizeError(
                array_name=name,
                provided_shape=array.shape,
                expected_shapes=[shape],
                component=component,
                context="auxiliary arrays must match the grid shape",
            )
        prepared.append(array)
    return tuple(prepared)


def _destination_box(
    source_shape: tuple[int, ...], dest_shape: tuple[int, ...], radius: int
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """
    Center domain [lo, hi) written by a pass into a destination of dest_shape.

    Raises:
        DimensionMismatchError: dest has a different number of axes
        SizeError: dest_shape is neither the full nor the shrunk shape
    """
    full = tuple(source_shape)
    if len(dest_shape) != len(full):
        raise DimensionMismatchError(
            array_name="dest",
            provided_ndim=len(dest_shape),
            expected_ndim=len(full),
            component="mapstencil_into",
            context="dest is indexed with the center index",
        )
    if tuple(dest_shape) == full:
        return (0,) * len(full), full
    shrunk = tuple(n - 2 * radius for n in full)
    if tuple(dest_shape) == shrunk and all(n >= 0 for n in shrunk):
        return (radius,) * len(full), tuple(n - radius for n in full)
    expected = [full] + ([shrunk] if all(n >= 0 for n in shrunk) else [])
    raise SizeError(
        array_name="dest",
        provided_shape=tuple(dest_shape),
        expected_shapes=expected,
        component="mapstencil_into",
        context=f"stencil radius is {radius}",
    )


# =============================================================================
# Evaluation
# =============================================================================


def _row_bands(lo: int, hi: int, n_workers: int) -> list[tuple[int, int]]:
    """Split [lo, hi) into at most n_workers contiguous non-empty bands."""
    count = hi - lo
    n = max(1, min(n_workers, count))
    step, extra = divmod(count, n)
    bands = []
    start = lo
    for k in range(n):
        stop = start + step + (1 if k < extra else 0)
        bands.append((start, stop))
        start = stop
    return bands


def _centers(lo: tuple[int, ...], hi: tuple[int, ...], band: tuple[int, int]):
    ranges = [range(*band)] + [range(low, high) for low, high in zip(lo[1:], hi[1:], strict=True)]
    return itertools.product(*ranges)


def _apply_band(
    f: Callable,
    A: StencilArray,
    aux: tuple[NDArray, ...],
    lo: tuple[int, ...],
    hi: tuple[int, ...],
    band: tuple[int, int],
) -> list:
    return [f(A.unsafe_stencil_at(index), *(a[index] for a in aux)) for index in _centers(lo, hi, band)]


def _write_band(
    f: Callable,
    A: StencilArray,
    aux: tuple[NDArray, ...],
    target: NDArray,
    lo: tuple[int, ...],
    hi: tuple[int, ...],
    band: tuple[int, int],
) -> None:
    for index in _centers(lo, hi, band):
        target[tuple(i - s for i, s in zip(index, lo, strict=True))] = f(
            A.unsafe_stencil_at(index), *(a[index] for a in aux)
        )


def _run_bands(task: Callable[[tuple[int, int]], Any], bands: list[tuple[int, int]], n_workers: int) -> list:
    if n_workers == 1 or len(bands) == 1:
        return [task(band) for band in bands]
    logger.debug(f"Evaluating {len(bands)} bands on {n_workers} threads")
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        futures = [executor.submit(task, band) for band in bands]
        # result() re-raises the first failure of a band
        return [future.result() for future in futures]


def _assemble(results: list, shape: tuple[int, ...]) -> NDArray:
    """Stack per-cell results (C order) into an array of the grid shape."""
    try:
        stacked = np.asarray(results)
    except ValueError:
        # Ragged per-cell results stay as Python objects
        stacked = None
    if stacked is None or stacked.dtype == object:
        out = np.empty(len(results), dtype=object)
        for position, value in enumerate(results):
            out[position] = value
        return out.reshape(shape)
    return stacked.reshape(shape + stacked.shape[1:])


def _kernel_fast_path_applies(f: Callable, A: StencilArray, aux: tuple, config: MapStencilConfig) -> bool:
    hood = A.stencil
    return (
        config.use_kernel_fast_path
        and f is kernelproduct
        and not aux
        and A.size > 0
        and isinstance(hood, Kernel)
        and A.dtype.kind in _NUMERIC_KINDS
        and hood.weights.dtype.kind in _NUMERIC_KINDS
    )


def _kernel_pass(A: StencilArray, lo: tuple[int, ...], hi: tuple[int, ...]) -> NDArray:
    """kernelproduct over the centers [lo, hi) as a sum of weighted shifted views."""
    hood = A.stencil
    if A.padding.is_halo:
        padded, width = A.parent, A.halo_width
    else:
        width = hood.radius
        padded = pad_array_with_halo(A.parent, A.boundary, width)

    box = tuple(high - low for low, high in zip(lo, hi, strict=True))
    total = np.zeros(box, dtype=np.result_type(padded.dtype, hood.weights.dtype))
    for offset, weight in zip(hood.offset_array, hood.weights, strict=True):
        view = padded[
            tuple(slice(width + low + o, width + low + o + n) for low, o, n in zip(lo, offset, box, strict=True))
        ]
        total += weight * view
    return total


# =============================================================================
# Public interface
# =============================================================================


def mapstencil(
    f: Callable,
    source: Any,
    *args: Any,
    boundary: Any = None,
    padding: Any = None,
    config: MapStencilConfig | None = None,
) -> NDArray:
    """
    Apply f to the stencil of every cell and collect the results.

    Accepted forms:
        mapstencil(f, stencil_array, *aux)
        mapstencil(f, stencil, data, *aux, boundary=..., padding=...)

    Args:
        f: Called as f(positioned_stencil, aux_1[I], ...) for every index I
        source: StencilArray, SwitchingStencilArray, or a stencil followed
            by the grid data in args
        *args: Auxiliary arrays of the grid shape
        boundary: Boundary policy when source is a bare stencil
        padding: Padding when source is a bare stencil
        config: Mapping configuration

    Returns:
        New array of the logical grid shape (trailing axes are added when f
        returns equally shaped arrays)

    Example:
        >>> blurred = mapstencil(np.mean, moore(1), image, boundary=reflect())
    """
    if isinstance(source, (Stencil, Kernel, Layered)):
        if not args:
            raise TypeError("mapstencil(f, stencil, data, ...) needs the grid data")
        data, *args = args
        source = StencilArray(data, source, boundary=boundary, padding=padding)
    elif boundary is not None or padding is not None:
        raise TypeError("boundary and padding only apply when mapping a bare stencil over data")

    config = config or MapStencilConfig()
    A = _as_source(source)
    aux = _prepare_aux(args, A.shape, config.check_aux_shapes, "mapstencil")
    A._ensure_halo()

    lo, hi = (0,) * A.ndim, A.shape
    if _kernel_fast_path_applies(f, A, aux, config):
        logger.debug(f"mapstencil: kernel fast path over {A.shape}")
        return _kernel_pass(A, lo, hi)

    logger.debug(f"mapstencil: {A.size} cells of {A.stencil!r}")
    if A.size == 0:
        return _assemble([], A.shape)
    bands = _row_bands(lo[0], hi[0], config.n_workers)
    chunks = _run_bands(lambda band: _apply_band(f, A, aux, lo, hi, band), bands, config.n_workers)
    return _assemble(list(itertools.chain.from_iterable(chunks)), A.shape)


def mapstencil_into(f: Callable, dest: Any, *args: Any, config: MapStencilConfig | None = None) -> Any:
    """
    Apply f to the stencil of every cell and write the results into dest.

    Accepted forms:
        mapstencil_into(f, dest, source, *aux) -> dest
        mapstencil_into(f, switching, *aux)    -> switching.switch()

    Args:
        f: Called as f(positioned_stencil, aux_1[I], ...)
        dest: ndarray or StencilArray of the full or shrunk grid shape, or a
            SwitchingStencilArray whose destination buffer is written
        *args: The source stencil array (unless dest is switching), then
            auxiliary arrays
        config: Mapping configuration

    Returns:
        dest, or the switched SwitchingStencilArray

    Raises:
        DimensionMismatchError: dest or an auxiliary array has the wrong
            number of axes
        SizeError: dest or an auxiliary array has the wrong shape; raised
            before anything is written
        ValueError: dest shares memory with the source buffer
    """
    config = config or MapStencilConfig()
    switching = isinstance(dest, SwitchingStencilArray)
    if switching:
        A = dest.source
        target_array = dest.dest
        aux_args = args
    else:
        if not args:
            raise TypeError("mapstencil_into(f, dest, source, ...) needs a source stencil array")
        A = _as_source(args[0])
        aux_args = args[1:]
        if isinstance(dest, StencilArray):
            target_array = dest
        elif isinstance(dest, np.ndarray):
            target_array = None
        else:
            raise TypeError(f"dest must be a numpy array or StencilArray, got {type(dest).__name__}")

    target = target_array.values if target_array is not None else dest
    lo, hi = _destination_box(A.shape, target.shape, A.stencil.radius)
    aux = _prepare_aux(aux_args, A.shape, config.check_aux_shapes, "mapstencil_into")
    if np.may_share_memory(target, A.parent):
        raise ValueError("dest must not share memory with the source grid")

    A._ensure_halo()
    if _kernel_fast_path_applies(f, A, aux, config):
        logger.debug(f"mapstencil_into: kernel fast path over centers {lo}..{hi}")
        target[...] = _kernel_pass(A, lo, hi)
    elif all(high > low for low, high in zip(lo, hi, strict=True)):
        logger.debug(f"mapstencil_into: centers {lo}..{hi} of {A.stencil!r}")
        bands = _row_bands(lo[0], hi[0], config.n_workers)
        _run_bands(lambda band: _write_band(f, A, aux, target, lo, hi, band), bands, config.n_workers)

    if target_array is not None:
        target_array.update_boundary()
    if switching:
        logger.debug("mapstencil_into: switching source and destination")
        return dest.switch()
    return dest
