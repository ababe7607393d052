"""Value containers handed from the resolvers to the product generator."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Sequence
from typing import Any, overload


class ValueSet(Sequence[Any]):
    """Ordered, duplicate-free and immutable sequence of candidate values.

    Equal values collapse onto the position of their first occurrence.
    Hashable values are tracked through a set; unhashable ones (lists,
    dicts, ...) are compared by equality against the unhashable values
    already kept.

    Examples:
    --------
    >>> list(ValueSet([1, 1, 3]))
    [1, 3]
    """

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[Any] = ()) -> None:
        kept: list[Any] = []
        seen: set[Any] = set()
        unhashable: list[Any] = []
        for value in values:
            if isinstance(value, Hashable):
                try:
                    if value in seen:
                        continue
                    seen.add(value)
                except TypeError:
                    # tuples holding unhashable members
                    if value in unhashable:
                        continue
                    unhashable.append(value)
            else:
                if value in unhashable:
                    continue
                unhashable.append(value)
            kept.append(value)
        self._values: tuple[Any, ...] = tuple(kept)

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Any, ...]: ...

    def __getitem__(self, index: int | slice) -> Any:
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ValueSet):
            return self._values == other._values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"ValueSet({list(self._values)!r})"


class ArgumentSets:
    """Per-parameter value sets returned by a whole-method factory.

    Each call registers the candidate values of the next test parameter,
    in parameter declaration order.

    Examples:
    --------
    >>> def bit_sets() -> ArgumentSets:
    ...     return (
    ...         ArgumentSets.arguments_for_first_parameter("0", "1")
    ...         .arguments_for_next_parameter("0", "1")
    ...     )
    """

    def __init__(self) -> None:
        self._sets: list[ValueSet] = []

    @classmethod
    def arguments_for_first_parameter(cls, *values: Any) -> ArgumentSets:
        """Start a new instance with the values of the first parameter."""
        return cls().arguments_for_next_parameter(*values)

    @classmethod
    def of(cls, *iterables: Iterable[Any]) -> ArgumentSets:
        """Build an instance with one iterable of values per parameter."""
        sets = cls()
        for values in iterables:
            sets.arguments_for_next_parameter(*values)
        return sets

    def arguments_for_next_parameter(self, *values: Any) -> ArgumentSets:
        """Register the values of the next parameter and return ``self``."""
        self._sets.append(ValueSet(values))
        return self

    @property
    def sets(self) -> tuple[ValueSet, ...]:
        return tuple(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def __iter__(self) -> Iterator[ValueSet]:
        return iter(tuple(self._sets))

    def __repr__(self) -> str:
        return f"ArgumentSets({[list(s) for s in self._sets]!r})"
