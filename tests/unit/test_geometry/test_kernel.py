"""
Unit tests for Kernel stencils and kernelproduct.
"""

import pytest

import numpy as np

from grid_stencils import ConstructionError, Kernel, kernel, kernel_from_function, kernelproduct, moore, window
from grid_stencils.geometry.stencil import positional


class TestKernelConstruction:
    """Weights follow the offset order of the wrapped stencil."""

    def test_dense_weights_are_raveled(self):
        weights = [[0, -1, 0], [-1, 5, -1], [0, -1, 0]]
        k = Kernel(window(1), weights)
        np.testing.assert_array_equal(k.weights, [0, -1, 0, -1, 5, -1, 0, -1, 0])
        np.testing.assert_array_equal(kernel(k), k.weights)

    def test_geometry_is_delegated(self):
        k = Kernel(moore(2), np.ones(24))
        assert k.radius == 2
        assert k.ndims == 2
        assert len(k) == 24
        assert k.offsets == moore(2).offsets

    def test_weight_count_mismatch(self):
        with pytest.raises(ConstructionError, match="one entry per stencil offset"):
            Kernel(moore(1), np.ones(9))

    def test_weights_are_readonly(self):
        k = Kernel(moore(1), np.ones(8))
        with pytest.raises(ValueError):
            k.weights[0] = 2.0

    def test_weights_are_copied(self):
        weights = np.ones(8)
        k = Kernel(moore(1), weights)
        weights[0] = 10.0
        assert k.weights[0] == 1.0

    def test_kernel_from_function(self):
        k = kernel_from_function(lambda d: 1.0 / d, moore(1))
        np.testing.assert_allclose(k.weights, 1.0 / moore(1).distances)

    def test_equality(self):
        assert Kernel(moore(1), np.ones(8)) == Kernel(moore(1), np.ones(8))
        assert Kernel(moore(1), np.ones(8)) != Kernel(moore(1), np.zeros(8))


class TestKernelProduct:
    """sum(neighbors * weights)."""

    def test_scalar_values(self):
        k = Kernel(positional((0, 1), (1, 0)), [2.0, 3.0])
        positioned = k.rebuild(np.array([10.0, 100.0]), center=0.0)
        assert kernelproduct(positioned) == 320.0

    def test_plain_stencil_with_weights(self):
        positioned = moore(1).rebuild(np.arange(8.0))
        assert kernelproduct(positioned, np.ones(8)) == 28.0

    def test_plain_stencil_without_weights(self):
        positioned = moore(1).rebuild(np.arange(8.0))
        with pytest.raises(TypeError):
            kernelproduct(positioned)

    def test_unpositioned(self):
        with pytest.raises(TypeError, match="positioned"):
            kernelproduct(Kernel(moore(1), np.ones(8)))

    def test_vector_elements_are_scaled_whole(self):
        values = np.empty(2, dtype=object)
        values[0] = np.array([1.0, 2.0])
        values[1] = np.array([10.0, 20.0])
        k = Kernel(positional((0, 1), (1, 0)), [1.0, 2.0])
        result = kernelproduct(k.rebuild(values))
        np.testing.assert_array_equal(result, [21.0, 42.0])

    def test_empty_kernel(self):
        k = Kernel(moore(0), np.zeros(0))
        assert kernelproduct(k.rebuild(np.zeros(0))) == 0.0

    @pytest.mark.parametrize("value", [0.0, 1.5, -4.0])
    def test_constant_neighbourhood_gives_value_times_weight_sum(self, value):
        weights = np.array([[1.0, 2.0, 1.0], [2.0, 4.0, 2.0], [1.0, 2.0, 1.0]])
        k = Kernel(window(1), weights)
        positioned = k.rebuild(np.full(9, value), center=value)
        assert kernelproduct(positioned) == pytest.approx(value * weights.sum())
