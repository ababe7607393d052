"""Per-parameter source declarations.

A source is attached to a test parameter as ``typing.Annotated`` metadata::

    @cartesian_test
    def cross_login(
        user: Annotated[str, Values("alice", "bob")],
        role: Annotated[Role, EnumValues(names=("ADMIN",), mode=SelectionMode.EXCLUDE)],
        retries: Annotated[int, IntRange(0, 3)],
    ): ...

Each declaration only carries configuration; turning it into values is the
job of :mod:`crosstest.cartesian.resolvers`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from crosstest.cartesian.declarations import ParameterDescriptor, ResolutionContext


class Source:
    """Marker base class for every per-parameter source declaration."""

    kind: str = "source"

    def describe(self) -> str:
        return self.kind


@dataclass(frozen=True, init=False)
class Values(Source):
    """Literal candidate values, in declaration order."""

    values: tuple[Any, ...]
    kind = "values"

    def __init__(self, *values: Any) -> None:
        object.__setattr__(self, "values", tuple(values))


class SelectionMode(Enum):
    """How the names of an :class:`EnumValues` source select constants."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    MATCH_ALL = "match_all"
    MATCH_ANY = "match_any"

    @property
    def uses_patterns(self) -> bool:
        return self in {SelectionMode.MATCH_ALL, SelectionMode.MATCH_ANY}


@dataclass(frozen=True)
class EnumValues(Source):
    """Constants of an enum, optionally filtered by name.

    Attributes
    ----------
    enum
        Enum class to draw constants from. Inferred from the parameter's
        declared type when omitted.
    names
        Constant names (``INCLUDE``/``EXCLUDE``) or regular expressions
        (``MATCH_ALL``/``MATCH_ANY``). Empty selects every constant.
    mode
        Selection policy applied to ``names``.
    """

    enum: type[Enum] | None = None
    names: tuple[str, ...] = ()
    mode: SelectionMode = SelectionMode.INCLUDE
    kind = "enum"

    def __post_init__(self) -> None:
        if isinstance(self.names, str):
            object.__setattr__(self, "names", (self.names,))
        else:
            object.__setattr__(self, "names", tuple(self.names))
        if isinstance(self.mode, str):
            object.__setattr__(self, "mode", SelectionMode(self.mode))


@dataclass(frozen=True)
class _NumericRange(Source):
    start: Any
    end: Any
    step: Any = 1
    closed: bool = False
    kind = "range"

    def describe(self) -> str:
        bracket = "]" if self.closed else ")"
        return f"{self.kind}[{self.start}, {self.end}{bracket} step {self.step}"


@dataclass(frozen=True)
class IntRange(_NumericRange):
    """Integers from ``start`` towards ``end`` by ``step``.

    ``end`` is excluded unless ``closed`` is true.
    """

    start: int
    end: int
    step: int = 1
    closed: bool = False
    kind = "int range"


@dataclass(frozen=True)
class FloatRange(_NumericRange):
    """Floats from ``start`` towards ``end`` by ``step``.

    Values are computed as ``start + i * step`` so rounding errors do not
    accumulate.
    """

    start: float
    end: float
    step: float = 1.0
    closed: bool = False
    kind = "float range"


class ArgumentsProvider(ABC):
    """User-supplied two-phase value source.

    A fresh instance is created for every parameter occurrence being
    resolved. ``initialize`` is called exactly once with the ``config`` of
    the :class:`Custom` declaration, then ``produce`` exactly once.
    """

    @abstractmethod
    def initialize(self, config: Any) -> None:
        """Receive the declaration's configuration."""

    @abstractmethod
    def produce(self, context: ResolutionContext, parameter: ParameterDescriptor) -> Iterable[Any]:
        """Return the ordered candidate values for ``parameter``."""


@dataclass(frozen=True)
class Custom(Source):
    """Values produced by an :class:`ArgumentsProvider` subclass."""

    provider: type[ArgumentsProvider]
    config: Any = field(default=None, hash=False)
    kind = "custom"

    def describe(self) -> str:
        name = getattr(self.provider, "__qualname__", repr(self.provider))
        return f"{self.kind} provider {name}"
