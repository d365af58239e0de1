"""
Unit tests for explicit stencils: positional, rectangle and named.
"""

import pytest

import numpy as np

from grid_stencils import ConstructionError, named_stencil, positional, rectangle, von_neumann


class TestPositional:
    """Stencils from verbatim offset coordinates."""

    def test_order_and_radius(self):
        hood = positional((0, -1), (2, 1), (-1, 1), (0, 1))
        assert hood.offsets == ((0, -1), (2, 1), (-1, 1), (0, 1))
        assert hood.radius == 2
        assert hood.ndims == 2

    def test_sequence_form(self):
        assert positional([(1, 0), (0, 1)]) == positional((1, 0), (0, 1))

    def test_one_dimensional(self):
        hood = positional((-3,), (4,))
        assert hood.ndims == 1
        assert hood.radius == 4

    def test_unequal_lengths(self):
        with pytest.raises(ConstructionError, match="same number of coordinates"):
            positional((0, 1), (1, 0, 0))

    def test_no_offsets(self):
        with pytest.raises(ConstructionError):
            positional()

    def test_non_integer_coordinates(self):
        with pytest.raises(ConstructionError, match="integers"):
            positional((0.5, 1))


class TestRectangle:
    """Stencils from per-axis bounds."""

    def test_count_and_order(self):
        hood = rectangle((-1, 1), (0, 2))
        assert len(hood) == 9
        assert hood.offsets[0] == (-1, 0)
        assert hood.offsets[-1] == (1, 2)
        assert hood.radius == 2

    def test_three_dimensions(self):
        assert len(rectangle((0, 1), (0, 1), (-2, 2))) == 20

    def test_lower_exceeds_upper(self):
        with pytest.raises(ConstructionError, match="lower bound"):
            rectangle((2, 1), (0, 0))

    def test_bad_pair(self):
        with pytest.raises(ConstructionError):
            rectangle((0, 1, 2),)


class TestNamedStencil:
    """Offsets addressable by name."""

    def test_keyword_form(self):
        hood = named_stencil(west=(0, -1), north=(-1, 0))
        assert hood.names == ("west", "north")
        assert hood.offsets == ((0, -1), (-1, 0))

    def test_mapping_form(self):
        hood = named_stencil({"a": (1,), "b": (-1,)})
        assert hood.ndims == 1
        assert hood.names == ("a", "b")

    def test_names_for_existing_stencil(self):
        hood = named_stencil(("n", "w", "e", "s"), von_neumann(1))
        assert hood.offsets == von_neumann(1).offsets

    def test_value_access_after_rebuild(self):
        hood = named_stencil(west=(0, -1), north=(-1, 0))
        positioned = hood.rebuild(np.array([3.0, 7.0]), center=1.0)
        assert positioned.west == 3.0
        assert positioned["north"] == 7.0
        assert positioned.center == 1.0

    def test_name_count_mismatch(self):
        with pytest.raises(ConstructionError, match="number of names"):
            named_stencil(("a", "b"), von_neumann(1))

    def test_duplicate_names(self):
        with pytest.raises(ConstructionError, match="unique"):
            named_stencil(("a", "a", "b", "c"), von_neumann(1))

    def test_unknown_name(self):
        positioned = named_stencil(a=(0, 1)).rebuild([1])
        with pytest.raises(KeyError):
            positioned["b"]
        with pytest.raises(AttributeError):
            positioned.b


class TestRebuild:
    """Positioned copies share geometry."""

    def test_rebuild_keeps_geometry(self):
        hood = von_neumann(1)
        positioned = hood.rebuild([1, 2, 3, 4], center=0)
        assert positioned == hood
        assert positioned.offsets is hood.offsets
        assert positioned.is_positioned
        assert not hood.is_positioned
        np.testing.assert_array_equal(positioned.neighbors, [1, 2, 3, 4])

    def test_rebuild_wrong_count(self):
        with pytest.raises(ConstructionError, match="neighbour count"):
            von_neumann(1).rebuild([1, 2, 3])

    def test_numpy_reductions(self):
        positioned = von_neumann(1).rebuild(np.array([1.0, 2.0, 3.0, 4.0]))
        assert np.mean(positioned) == 2.5
        assert np.sum(positioned) == 10.0

    def test_unpositioned_cannot_convert(self):
        with pytest.raises(TypeError):
            np.asarray(von_neumann(1))

    def test_indices(self):
        assert von_neumann(1).indices((5, 6)) == [(4, 6), (5, 5), (5, 7), (6, 6)]
