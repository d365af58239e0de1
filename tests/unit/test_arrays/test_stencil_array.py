"""
Unit tests for StencilArray construction and neighbour access.
"""

import pytest

import numpy as np

from grid_stencils import (
    ConstructionError,
    DimensionMismatchError,
    Layered,
    SizeError,
    StencilArray,
    boundary,
    conditional,
    getneighbor,
    halo,
    indices,
    moore,
    named_stencil,
    neighbors,
    padding,
    reflect,
    remove,
    stencil,
    unsafe_neighbors,
    use,
    von_neumann,
    wrap,
)

# =============================================================================
# Construction
# =============================================================================


class TestConstruction:
    def test_defaults(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1)
        assert sa.boundary == remove()
        assert sa.padding == conditional()
        assert sa.shape == (10, 10)
        assert sa.halo_width == 0

    def test_conditional_borrows_data(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap())
        assert sa.parent is grid_10x10

    def test_halo_out_allocates_padded_copy(self, grid_10x10):
        sa = StencilArray(grid_10x10, moore(2), boundary=wrap(), padding=halo("out"))
        assert sa.parent.shape == (14, 14)
        assert sa.shape == (10, 10)
        assert sa.halo_width == 2
        np.testing.assert_array_equal(np.asarray(sa), grid_10x10)

    def test_halo_in_logical_shape(self):
        data = np.zeros((8, 6))
        sa = StencilArray(data, moore(1), boundary=use(), padding=halo("in"))
        assert sa.shape == (6, 4)
        assert sa.parent is data

    def test_dimension_mismatch(self, moore1):
        with pytest.raises(DimensionMismatchError):
            StencilArray(np.zeros(5), moore1)

    def test_not_a_stencil(self, grid_10x10):
        with pytest.raises(ConstructionError):
            StencilArray(grid_10x10, [(0, 1)])

    def test_use_without_halo_in(self, grid_10x10, moore1):
        with pytest.raises(ConstructionError):
            StencilArray(grid_10x10, moore1, boundary=use())

    def test_halo_narrower_than_radius(self, grid_10x10):
        with pytest.raises(ConstructionError):
            StencilArray(grid_10x10, moore(2), boundary=wrap(), padding=halo("out", width=1))

    def test_halo_in_buffer_too_small(self):
        with pytest.raises(SizeError):
            StencilArray(np.zeros((3, 8)), moore(2), boundary=use(), padding=halo("in"))

    def test_string_policies(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary="reflect", padding="halo_out")
        assert sa.boundary == reflect()
        assert sa.padding.is_halo


# =============================================================================
# Positioned stencils
# =============================================================================


class TestStencilAt:
    def test_wrap_corner(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap())
        hood = sa.stencil_at((0, 0))
        assert hood.center == 0
        np.testing.assert_array_equal(hood.neighbors, [99, 90, 91, 9, 1, 19, 10, 11])

    def test_index_forms(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap())
        np.testing.assert_array_equal(sa.neighbors(3, 4), sa.neighbors((3, 4)))
        np.testing.assert_array_equal(neighbors(sa, [3, 4]), sa.neighbors((3, 4)))

    def test_wrap_mean_at_corner(self, grid_4x4, moore1):
        sa = StencilArray(grid_4x4, moore1, boundary=wrap())
        expected = np.mean([grid_4x4[i % 4, j % 4] for i in (-1, 0, 1) for j in (-1, 0, 1) if (i, j) != (0, 0)])
        assert np.mean(sa.stencil_at((0, 0))) == pytest.approx(expected)

    def test_remove_substitutes_padval(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=remove(padval=-1))
        np.testing.assert_array_equal(sa.neighbors((0, 0)), [-1, -1, -1, -1, 1, -1, 10, 11])

    def test_remove_nan_promotes(self, grid_10x10, von_neumann1):
        sa = StencilArray(grid_10x10, von_neumann1, boundary=remove(padval=np.nan))
        values = sa.neighbors((0, 5))
        assert np.isnan(values[0])
        np.testing.assert_array_equal(values[1:], [4, 6, 15])

    def test_reflect_edge(self, grid_10x10, von_neumann1):
        sa = StencilArray(grid_10x10, von_neumann1, boundary=reflect())
        # up (-1, 5) reflects onto (0, 5)
        np.testing.assert_array_equal(sa.neighbors((0, 5)), [5, 4, 6, 15])

    def test_interior_ignores_boundary(self, grid_10x10, moore1):
        reads = [StencilArray(grid_10x10, moore1, boundary=b).neighbors((4, 4)) for b in (remove(), wrap(), reflect())]
        for values in reads[1:]:
            np.testing.assert_array_equal(values, reads[0])

    def test_out_of_grid_index(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1)
        with pytest.raises(IndexError):
            sa.stencil_at((10, 0))
        with pytest.raises(IndexError):
            sa.stencil_at((0, -1))

    def test_unsafe_access_matches_safe(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap())
        np.testing.assert_array_equal(unsafe_neighbors(sa, (9, 9)), sa.neighbors((9, 9)))

    def test_halo_in_reads_margin(self):
        data = np.arange(36).reshape(6, 6)
        sa = StencilArray(data, moore(1), boundary=use(), padding=halo("in"))
        hood = sa.stencil_at((0, 0))
        assert hood.center == 7
        np.testing.assert_array_equal(hood.neighbors, [0, 1, 2, 6, 8, 12, 13, 14])

    @pytest.mark.parametrize("bc", [remove(padval=-5), wrap(), reflect()])
    def test_halo_out_matches_conditional(self, random_grid, bc):
        hood = moore(2)
        plain = StencilArray(random_grid, hood, boundary=bc)
        padded = StencilArray(random_grid, hood, boundary=bc, padding=halo("out"))
        for index in np.ndindex(*random_grid.shape):
            np.testing.assert_array_equal(plain.neighbors(index), padded.neighbors(index))


class TestStencilKinds:
    def test_named_stencil_fields(self, grid_10x10):
        hood = named_stencil(west=(0, -1), north=(-1, 0))
        s = StencilArray(grid_10x10, hood, boundary=wrap()).stencil_at((5, 5))
        assert s.west == 54
        assert s.north == 45

    def test_layered_groups(self, grid_10x10):
        hood = Layered(inner=von_neumann(1), outer=moore(2))
        sa = StencilArray(grid_10x10, hood, boundary=wrap())
        assert sa.halo_width == 0
        s = sa.stencil_at((5, 5))
        assert s.center == 55
        np.testing.assert_array_equal(s.inner.neighbors, [45, 54, 56, 65])
        assert len(s.outer.neighbors) == 24

    def test_object_grid_with_vector_padval(self):
        data = np.empty((2, 2), dtype=object)
        for i, j in np.ndindex(2, 2):
            data[i, j] = np.array([i, j])
        sa = StencilArray(data, von_neumann(1), boundary=remove(padval=np.zeros(2)))
        values = sa.neighbors((0, 0))
        np.testing.assert_array_equal(values[0], [0, 0])
        np.testing.assert_array_equal(values[3], [1, 0])


# =============================================================================
# Array-like behaviour
# =============================================================================


class TestArrayInterface:
    def test_getitem_uses_logical_coordinates(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap(), padding=halo("out"))
        assert sa[0, 0] == 0
        np.testing.assert_array_equal(sa[2], grid_10x10[2])

    def test_setitem_refreshes_halo(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10.copy(), moore1, boundary=wrap(), padding=halo("out"))
        sa[9, 9] = -1
        assert sa.neighbors((0, 0))[0] == -1

    def test_setitem_conditional_writes_through(self, grid_10x10, moore1):
        data = grid_10x10.copy()
        sa = StencilArray(data, moore1)
        sa[1, 1] = 500
        assert data[1, 1] == 500

    def test_len_and_metadata(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1)
        assert len(sa) == 10
        assert sa.ndim == 2
        assert sa.size == 100
        assert sa.dtype == grid_10x10.dtype

    def test_copy_is_independent(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap(), padding=halo("out"))
        other = sa.copy()
        other[0, 0] = 42
        assert sa[0, 0] == 0


# =============================================================================
# Function interface
# =============================================================================


class TestFunctionInterface:
    def test_stencil_and_policies(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap())
        assert stencil(sa) == moore1
        assert stencil(moore1) is moore1
        assert stencil(sa, (1, 1)).center == 11
        assert boundary(sa) == wrap()
        assert padding(sa) == conditional()

    def test_getneighbor(self, grid_10x10, moore1):
        assert getneighbor(StencilArray(grid_10x10, moore1, boundary=wrap()), (-1, -1)) == 99
        assert getneighbor(StencilArray(grid_10x10, moore1, boundary=remove(padval=7)), (-1, 3)) == 7
        assert getneighbor(StencilArray(grid_10x10, moore1, boundary=reflect()), (10, 0)) == 90

    def test_getneighbor_halo_out_beyond_margin(self, grid_10x10, moore1):
        sa = StencilArray(grid_10x10, moore1, boundary=wrap(), padding=halo("out"))
        assert sa.getneighbor((-1, 0)) == 90
        assert sa.getneighbor((-3, 0)) == 70

    def test_getneighbor_halo_in_beyond_margin(self):
        sa = StencilArray(np.zeros((6, 6)), moore(1), boundary=use(), padding=halo("in"))
        assert sa.getneighbor((-1, -1)) == 0
        with pytest.raises(IndexError):
            sa.getneighbor((-2, 0))

    def test_indices_apply_boundary(self, grid_10x10, von_neumann1):
        assert indices(von_neumann1, (0, 0)) == [(-1, 0), (0, -1), (0, 1), (1, 0)]
        wrapped = StencilArray(grid_10x10, von_neumann1, boundary=wrap())
        assert indices(wrapped, (0, 0)) == [(9, 0), (0, 9), (0, 1), (1, 0)]
        removed = StencilArray(grid_10x10, von_neumann1, boundary=remove())
        assert indices(removed, (0, 0)) == [None, None, (0, 1), (1, 0)]
