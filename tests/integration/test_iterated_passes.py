"""
Integration tests: repeated stencil passes over switching buffers.

Covers cellular-automaton style updates, smoothing to a fixed point and the
interplay of halo refresh with switching.
"""

import pytest

import numpy as np

from grid_stencils import (
    Kernel,
    StencilArray,
    SwitchingStencilArray,
    halo,
    kernelproduct,
    mapstencil,
    mapstencil_into,
    moore,
    reflect,
    use,
    von_neumann,
    wrap,
)
from grid_stencils.config import StencilArrayConfig, create_fast_config


def life_rule(hood):
    alive = int(np.sum(hood))
    if hood.center:
        return int(alive in (2, 3))
    return int(alive == 3)


class TestSmoothing:
    def test_constant_grid_is_a_fixed_point(self):
        sw = SwitchingStencilArray(np.full((16, 16), 3.5), moore(1), boundary=wrap(), padding=halo("out"))
        for _ in range(10):
            sw = mapstencil_into(np.mean, sw)
        np.testing.assert_allclose(np.asarray(sw), 3.5)

    def test_mean_passes_converge_to_global_mean(self):
        rng = np.random.default_rng(3)
        data = rng.random((8, 8))
        target = data.mean()
        sw = SwitchingStencilArray(data, moore(1), boundary=wrap())
        for _ in range(200):
            sw = mapstencil_into(np.mean, sw)
        np.testing.assert_allclose(np.asarray(sw), target, atol=1e-6)

    def test_wrapped_averaging_conserves_total(self):
        rng = np.random.default_rng(11)
        data = rng.random((10, 7))
        k = Kernel(von_neumann(1), np.full(4, 0.25))
        sw = SwitchingStencilArray(data, k, boundary=wrap())
        for _ in range(5):
            sw = mapstencil_into(kernelproduct, sw)
        assert np.sum(np.asarray(sw)) == pytest.approx(data.sum())

    def test_switching_equals_manual_double_buffer(self):
        rng = np.random.default_rng(5)
        data = rng.random((9, 9))
        sw = SwitchingStencilArray(data, moore(1), boundary=reflect(), padding=halo("out"))
        manual = data.copy()
        for _ in range(4):
            sw = mapstencil_into(np.max, sw)
            manual = mapstencil(np.max, moore(1), manual, boundary=reflect())
        np.testing.assert_allclose(np.asarray(sw), manual)


class TestGameOfLife:
    def test_blinker_oscillates(self):
        grid = np.zeros((5, 5), dtype=int)
        grid[2, 1:4] = 1
        sw = SwitchingStencilArray(grid, moore(1), boundary=wrap())

        sw = mapstencil_into(life_rule, sw)
        vertical = np.zeros((5, 5), dtype=int)
        vertical[1:4, 2] = 1
        np.testing.assert_array_equal(np.asarray(sw), vertical)

        sw = mapstencil_into(life_rule, sw)
        np.testing.assert_array_equal(np.asarray(sw), grid)

    def test_glider_wraps_around_torus(self):
        grid = np.zeros((6, 6), dtype=int)
        for i, j in [(0, 1), (1, 2), (2, 0), (2, 1), (2, 2)]:
            grid[i, j] = 1
        sw = SwitchingStencilArray(grid, moore(1), boundary=wrap(), padding=halo("out"))
        for _ in range(24):
            sw = mapstencil_into(life_rule, sw, config=create_fast_config(n_workers=3))
        # A glider moves one cell diagonally every four generations
        np.testing.assert_array_equal(np.asarray(sw), grid)


class TestHaloIn:
    def test_caller_managed_halo(self):
        interior = np.arange(16.0).reshape(4, 4)
        buffer = np.pad(interior, 1, mode="wrap")
        sa = StencilArray(buffer, von_neumann(1), boundary=use(), padding=halo("in"))
        expected = mapstencil(np.sum, von_neumann(1), interior, boundary=wrap())
        np.testing.assert_allclose(mapstencil(np.sum, sa), expected)


class TestConfiguredArrays:
    def test_array_config_builds_equivalent_arrays(self):
        rng = np.random.default_rng(1)
        data = rng.random((6, 6))
        cfg = StencilArrayConfig(boundary="reflect", padding="halo_out")
        sa = cfg.create_array(data, moore(1))
        np.testing.assert_allclose(
            mapstencil(np.mean, sa),
            mapstencil(np.mean, moore(1), data, boundary=reflect()),
        )
