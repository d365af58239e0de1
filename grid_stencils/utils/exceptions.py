"""
Exception classes for grid_stencils with helpful error messages.

Every error carries the component that raised it, an optional suggested
action, an error code and a block of diagnostic values, so a failing
construction or mapping call explains itself without a debugger.

Errors are raised synchronously at the call that detects them. Nothing in
the library logs or swallows them.
"""

from __future__ import annotations

from typing import Any

import numpy as np


class StencilError(Exception):
    """
    Base exception for stencil errors with context and suggestions.

    The formatted message contains:
    - the component name in brackets
    - the error description
    - an optional suggestion line
    - an optional error code
    - optional diagnostic key/value pairs
    """

    def __init__(
        self,
        message: str,
        component: str | None = None,
        suggested_action: str | None = None,
        error_code: str | None = None,
        diagnostic_data: dict[str, Any] | None = None,
    ):
        self.component = component or "grid_stencils"
        self.suggested_action = suggested_action
        self.error_code = error_code
        self.diagnostic_data = diagnostic_data or {}

        full_message = f"[{self.component}] {message}"

        if self.suggested_action:
            full_message += f"\nSuggestion: {self.suggested_action}"

        if self.error_code:
            full_message += f"\nError Code: {self.error_code}"

        if self.diagnostic_data:
            full_message += "\nDiagnostic Information:"
            for key, value in self.diagnostic_data.items():
                full_message += f"\n   - {key}: {value}"

        super().__init__(full_message)


class ConstructionError(StencilError, ValueError):
    """Exception raised when a stencil, kernel or stencil array cannot be built."""

    def __init__(
        self,
        message: str,
        component: str | None = None,
        suggested_action: str | None = None,
        diagnostic_data: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            component=component,
            suggested_action=suggested_action,
            error_code="INVALID_CONSTRUCTION",
            diagnostic_data=diagnostic_data,
        )


class DimensionMismatchError(StencilError, ValueError):
    """Exception raised when array and stencil dimensionality disagree."""

    def __init__(
        self,
        array_name: str,
        provided_ndim: int,
        expected_ndim: int,
        component: str | None = None,
        context: str | None = None,
    ):
        diagnostic_data: dict[str, Any] = {
            "array_name": array_name,
            "provided_ndim": provided_ndim,
            "expected_ndim": expected_ndim,
        }

        if context:
            diagnostic_data["context"] = context

        suggested_action = _generate_dimension_suggestions(array_name, provided_ndim, expected_ndim)

        super().__init__(
            message=f"Dimension mismatch for {array_name}",
            component=component,
            suggested_action=suggested_action,
            error_code="DIMENSION_MISMATCH",
            diagnostic_data=diagnostic_data,
        )


class SizeError(StencilError, ValueError):
    """Exception raised when an array has extents incompatible with the operation."""

    def __init__(
        self,
        array_name: str,
        provided_shape: tuple,
        expected_shapes: list[tuple],
        component: str | None = None,
        context: str | None = None,
    ):
        diagnostic_data: dict[str, Any] = {
            "array_name": array_name,
            "provided_shape": str(tuple(provided_shape)),
            "accepted_shapes": " or ".join(str(tuple(s)) for s in expected_shapes),
        }

        if context:
            diagnostic_data["context"] = context

        if expected_shapes:
            mismatch = _describe_shape_mismatch(tuple(provided_shape), tuple(expected_shapes[0]))
            diagnostic_data["shape_mismatch"] = mismatch

        super().__init__(
            message=f"Size mismatch for {array_name}",
            component=component,
            suggested_action=f"Allocate {array_name} with one of the accepted shapes",
            error_code="SIZE_MISMATCH",
            diagnostic_data=diagnostic_data,
        )


def _describe_shape_mismatch(provided_shape: tuple, expected_shape: tuple) -> str:
    """Describe the specific nature of a shape mismatch."""

    if len(provided_shape) != len(expected_shape):
        return f"Wrong number of dimensions: got {len(provided_shape)}, expected {len(expected_shape)}"

    mismatches = []
    for i, (provided, expected) in enumerate(zip(provided_shape, expected_shape, strict=False)):
        if provided != expected:
            mismatches.append(f"axis {i}: got {provided}, expected {expected}")

    return " | ".join(mismatches) if mismatches else "none"


def _generate_dimension_suggestions(array_name: str, provided_ndim: int, expected_ndim: int) -> str:
    """Generate specific suggestions for dimension errors."""

    if provided_ndim < expected_ndim:
        return f"Add missing axes to {array_name} or build the stencil with ndims={provided_ndim}"
    return f"Remove extra axes from {array_name} or build the stencil with ndims={provided_ndim}"


# Convenience functions for common error scenarios


def validate_array_dimensions(array: np.ndarray, expected_ndim: int, array_name: str, component: str | None = None):
    """Validate that an array has the expected number of axes."""
    if np.ndim(array) != expected_ndim:
        raise DimensionMismatchError(
            array_name=array_name,
            provided_ndim=np.ndim(array),
            expected_ndim=expected_ndim,
            component=component,
        )


def validate_array_shape(
    array: np.ndarray, expected_shape: tuple, array_name: str, component: str | None = None
):
    """Validate that an array has exactly the expected extents."""
    if tuple(np.shape(array)) != tuple(expected_shape):
        raise SizeError(
            array_name=array_name,
            provided_shape=np.shape(array),
            expected_shapes=[tuple(expected_shape)],
            component=component,
        )


def validate_radius(radius: Any, parameter_name: str = "radius", component: str | None = None) -> int:
    """Validate that a radius is a non-negative integer and return it as int."""
    if isinstance(radius, bool) or not isinstance(radius, (int, np.integer)):
        raise ConstructionError(
            f"{parameter_name} must be an integer",
            component=component,
            diagnostic_data={"provided_value": repr(radius), "provided_type": type(radius).__name__},
        )
    if radius < 0:
        raise ConstructionError(
            f"{parameter_name} must be non-negative",
            component=component,
            suggested_action=f"Increase {parameter_name} to at least 0",
            diagnostic_data={"provided_value": int(radius)},
        )
    return int(radius)


def validate_ndims(ndims: Any, minimum: int = 1, component: str | None = None) -> int:
    """Validate the dimensionality parameter of a stencil shape."""
    if isinstance(ndims, bool) or not isinstance(ndims, (int, np.integer)) or ndims < minimum:
        raise ConstructionError(
            f"ndims must be an integer >= {minimum}",
            component=component,
            diagnostic_data={"provided_value": repr(ndims)},
        )
    return int(ndims)
