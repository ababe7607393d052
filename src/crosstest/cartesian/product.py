"""Lazy n-ary Cartesian product over value sets."""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import Any


class ProductState(Enum):
    """Lifecycle of a :class:`CartesianProduct`."""

    INITIALIZED = "initialized"
    PRODUCING = "producing"
    EXHAUSTED = "exhausted"


class CartesianProduct(Iterator[tuple[Any, ...]]):
    """Iterator over every combination of the given dimensions.

    Tuples come in lexicographic order with the last dimension varying
    fastest: tuple ``k`` is the mixed-radix decomposition of ``k`` with the
    last dimension as least significant digit. Only the current digit of
    each dimension is kept, so the product is never materialized.

    After the last tuple the iterator stays exhausted; further ``next()``
    calls raise ``StopIteration`` again.

    Examples:
    --------
    >>> list(CartesianProduct([[1, 3], [2]]))
    [(1, 2), (3, 2)]
    """

    def __init__(self, dimensions: Sequence[Sequence[Any]]) -> None:
        self._dimensions: tuple[tuple[Any, ...], ...] = tuple(tuple(d) for d in dimensions)
        self._sizes: tuple[int, ...] = tuple(len(d) for d in self._dimensions)
        self._total = math.prod(self._sizes) if self._dimensions else 0
        self._digits: list[int] = [0] * len(self._dimensions)
        self._produced = 0
        self._state = ProductState.INITIALIZED if self._total else ProductState.EXHAUSTED

    @property
    def state(self) -> ProductState:
        return self._state

    @property
    def total(self) -> int:
        """Number of tuples in the full product."""
        return self._total

    @property
    def produced(self) -> int:
        """Number of tuples handed out so far."""
        return self._produced

    def __len__(self) -> int:
        return self._total

    def __iter__(self) -> CartesianProduct:
        return self

    def __next__(self) -> tuple[Any, ...]:
        if self._state is ProductState.EXHAUSTED:
            raise StopIteration
        if self._state is ProductState.INITIALIZED:
            self._state = ProductState.PRODUCING
        else:
            self._advance()

        current = tuple(dim[digit] for dim, digit in zip(self._dimensions, self._digits))
        self._produced += 1
        if self._produced == self._total:
            self._state = ProductState.EXHAUSTED
        return current

    def _advance(self) -> None:
        for position in range(len(self._digits) - 1, -1, -1):
            self._digits[position] += 1
            if self._digits[position] < self._sizes[position]:
                return
            self._digits[position] = 0

    def tuple_at(self, k: int) -> tuple[Any, ...]:
        """Return tuple ``k`` (0-based) without moving the iterator."""
        if not 0 <= k < self._total:
            msg = f"tuple index {k} out of range for a product of {self._total}"
            raise IndexError(msg)
        digits: list[int] = []
        for size in reversed(self._sizes):
            k, digit = divmod(k, size)
            digits.append(digit)
        digits.reverse()
        return tuple(dim[digit] for dim, digit in zip(self._dimensions, digits))
