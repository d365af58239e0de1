#!/usr/bin/env python3
"""
Unit tests for grid_stencils/utils/exceptions.py

Tests the exception hierarchy and validation helpers:
- StencilError (base exception and message formatting)
- ConstructionError (invalid stencils, kernels, policies)
- DimensionMismatchError (grid vs stencil dimensionality)
- SizeError (destination and auxiliary extents)
- Validation utilities
"""

import pytest

import numpy as np

from grid_stencils.utils.exceptions import (
    ConstructionError,
    DimensionMismatchError,
    SizeError,
    StencilError,
    validate_array_dimensions,
    validate_array_shape,
    validate_ndims,
    validate_radius,
)

# =============================================================================
# Test StencilError (Base Exception)
# =============================================================================


def test_stencil_error_basic():
    """Test basic StencilError creation."""
    error = StencilError("Test error message", component="Moore")

    assert "[Moore]" in str(error)
    assert "Test error message" in str(error)
    assert error.component == "Moore"


def test_stencil_error_default_component():
    error = StencilError("Something")
    assert str(error).startswith("[grid_stencils]")


def test_stencil_error_with_suggestion_and_code():
    error = StencilError("Error occurred", suggested_action="Try a smaller radius", error_code="ERR001")

    error_str = str(error)
    assert "Suggestion: Try a smaller radius" in error_str
    assert "Error Code: ERR001" in error_str


def test_stencil_error_with_diagnostics():
    error = StencilError("Diagnostic test", diagnostic_data={"radius": 3, "ndims": 2})

    error_str = str(error)
    assert "Diagnostic Information" in error_str
    assert "radius: 3" in error_str
    assert "ndims: 2" in error_str


# =============================================================================
# Test Subclasses
# =============================================================================


def test_construction_error():
    error = ConstructionError("bad bounds", component="RectangleStencil")

    assert isinstance(error, StencilError)
    assert isinstance(error, ValueError)
    assert error.error_code == "INVALID_CONSTRUCTION"


def test_dimension_mismatch_error():
    error = DimensionMismatchError("data", provided_ndim=1, expected_ndim=2, component="StencilArray")

    assert error.error_code == "DIMENSION_MISMATCH"
    assert error.diagnostic_data["provided_ndim"] == 1
    assert "Add missing axes" in str(error)


def test_dimension_mismatch_error_too_many_axes():
    error = DimensionMismatchError("data", provided_ndim=3, expected_ndim=2, context="grid")

    assert "Remove extra axes" in str(error)
    assert error.diagnostic_data["context"] == "grid"


def test_size_error_lists_accepted_shapes():
    error = SizeError("dest", provided_shape=(5, 5), expected_shapes=[(10, 10), (8, 8)], component="mapstencil_into")

    error_str = str(error)
    assert error.error_code == "SIZE_MISMATCH"
    assert "(10, 10) or (8, 8)" in error_str
    assert "axis 0: got 5, expected 10" in error_str


def test_errors_can_be_caught_as_value_error():
    with pytest.raises(ValueError):
        raise SizeError("dest", (1,), [(2,)])


# =============================================================================
# Test Validation Utilities
# =============================================================================


def test_validate_array_dimensions():
    validate_array_dimensions(np.zeros((3, 3)), 2, "grid")
    with pytest.raises(DimensionMismatchError):
        validate_array_dimensions(np.zeros(3), 2, "grid")


def test_validate_array_shape():
    validate_array_shape(np.zeros((3, 4)), (3, 4), "aux")
    with pytest.raises(SizeError):
        validate_array_shape(np.zeros((3, 4)), (4, 3), "aux")


@pytest.mark.parametrize("value", [0, 1, np.int64(4)])
def test_validate_radius_accepts(value):
    assert validate_radius(value) == int(value)


@pytest.mark.parametrize("value", [-1, 1.0, True, "2", None])
def test_validate_radius_rejects(value):
    with pytest.raises(ConstructionError):
        validate_radius(value)


def test_validate_ndims():
    assert validate_ndims(3) == 3
    with pytest.raises(ConstructionError):
        validate_ndims(1, minimum=2)
