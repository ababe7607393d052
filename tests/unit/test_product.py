"""Tests for crosstest.cartesian.product module."""

import itertools

import pytest

from crosstest.cartesian.product import CartesianProduct, ProductState
from crosstest.cartesian.values import ValueSet


class TestCartesianProduct:
    """Tests for the lazy Cartesian product generator."""

    def test_last_dimension_varies_fastest(self):
        product = CartesianProduct([[1, 2], ["a", "b", "c"]])

        assert list(product) == [
            (1, "a"), (1, "b"), (1, "c"),
            (2, "a"), (2, "b"), (2, "c"),
        ]

    def test_matches_itertools_product(self):
        dimensions = [[0, 1, 2], ["x"], [True, False], [None, 5]]
        assert list(CartesianProduct(dimensions)) == list(itertools.product(*dimensions))

    def test_total_is_product_of_sizes(self):
        product = CartesianProduct([range(3), range(4), range(5)])
        assert product.total == 60
        assert len(product) == 60
        assert len(set(product)) == 60

    def test_deduplicated_inputs(self):
        product = CartesianProduct([ValueSet([1, 1, 3]), ValueSet([2, 2])])
        assert list(product) == [(1, 2), (3, 2)]

    def test_state_transitions(self):
        product = CartesianProduct([[1], [2, 3]])
        assert product.state is ProductState.INITIALIZED

        assert next(product) == (1, 2)
        assert product.state is ProductState.PRODUCING

        assert next(product) == (1, 3)
        assert product.state is ProductState.EXHAUSTED
        assert product.produced == 2

    def test_exhausted_stays_exhausted(self):
        product = CartesianProduct([[1]])
        list(product)

        for _ in range(3):
            with pytest.raises(StopIteration):
                next(product)
        assert list(product) == []

    def test_empty_dimension_yields_nothing(self):
        product = CartesianProduct([[1, 2], []])
        assert product.total == 0
        assert product.state is ProductState.EXHAUSTED
        assert list(product) == []

    def test_no_dimensions_yields_nothing(self):
        assert list(CartesianProduct([])) == []

    def test_tuple_at_follows_mixed_radix_order(self):
        dimensions = [["a", "b"], [1, 2, 3], [True, False]]
        product = CartesianProduct(dimensions)
        expected = list(itertools.product(*dimensions))

        for k, combination in enumerate(expected):
            assert product.tuple_at(k) == combination
        # random access does not move the iterator
        assert next(product) == expected[0]

    def test_tuple_at_rejects_out_of_range(self):
        product = CartesianProduct([[1, 2]])
        with pytest.raises(IndexError):
            product.tuple_at(2)
        with pytest.raises(IndexError):
            product.tuple_at(-1)

    def test_order_is_lexicographic_by_index(self):
        sizes = [2, 3, 2]
        product = CartesianProduct([list(range(s)) for s in sizes])
        tuples = list(product)
        assert tuples == sorted(tuples)

    def test_large_product_is_lazy(self):
        product = CartesianProduct([range(1000)] * 4)
        assert product.total == 10**12
        assert next(product) == (0, 0, 0, 0)
        assert next(product) == (0, 0, 0, 1)
        assert product.tuple_at(10**12 - 1) == (999, 999, 999, 999)
