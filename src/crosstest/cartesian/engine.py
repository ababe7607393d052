"""Planning of Cartesian test invocations.

:func:`plan_invocations` validates the declarations of a test function,
resolves every source and returns a :class:`CartesianPlan`, which yields
one :class:`InvocationRecord` per combination. Every failure surfaces
before the first record.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Collection, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from crosstest.cartesian.declarations import ResolutionContext, describe_parameters, get_declaration
from crosstest.cartesian.naming import DEFAULT_NAME_PATTERN, DisplayNameFormatter
from crosstest.cartesian.product import CartesianProduct
from crosstest.cartesian.resolvers import resolve_factory, resolve_source
from crosstest.cartesian.validation import ConfigurationKind, validate_configuration
from crosstest.cartesian.values import ValueSet
from crosstest.errors import ConfigurationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationRecord:
    """One combination of arguments, ready to be handed to the test body."""

    index: int
    arguments: tuple[Any, ...]
    name: str
    parameters: tuple[str, ...]

    @property
    def kwargs(self) -> dict[str, Any]:
        return dict(zip(self.parameters, self.arguments))


class CartesianPlan:
    """Resolved arguments of one Cartesian test method.

    Iterating the plan walks the product lazily; each iteration starts over
    from the first combination, so a plan can be listed and then run.
    """

    def __init__(
        self,
        display_name: str,
        parameters: Sequence[str],
        dimensions: Sequence[ValueSet],
        formatter: DisplayNameFormatter,
        kind: ConfigurationKind,
    ) -> None:
        self.display_name = display_name
        self.parameters: tuple[str, ...] = tuple(parameters)
        self.dimensions: tuple[ValueSet, ...] = tuple(dimensions)
        self.formatter = formatter
        self.kind = kind
        self._total = math.prod(len(d) for d in self.dimensions) if self.dimensions else 0

    @property
    def total(self) -> int:
        """Number of invocation records the plan yields."""
        return self._total

    def __len__(self) -> int:
        return self.total

    def __iter__(self) -> Iterator[InvocationRecord]:
        for index, arguments in enumerate(CartesianProduct(self.dimensions), start=1):
            yield InvocationRecord(
                index=index,
                arguments=arguments,
                name=self.formatter.format(index, arguments, self.display_name),
                parameters=self.parameters,
            )

    def __repr__(self) -> str:
        return f"CartesianPlan({self.display_name!r}, parameters={self.parameters!r}, total={self.total})"


def plan_invocations(
    fn: Callable[..., Any],
    *,
    owner: type | None = None,
    injectable: Collection[str] = (),
    default_pattern: str = DEFAULT_NAME_PATTERN,
) -> CartesianPlan:
    """Build the invocation plan of a ``@cartesian_test`` function.

    Args:
        fn: The decorated test function (unbound for methods).
        owner: Class the test method was collected from, if any.
        injectable: Parameter names the caller injects itself.
        default_pattern: Display name pattern used when the declaration
            has none.

    Raises:
        ConfigurationError: For inconsistent declarations.
        ResolutionError: When a provider or factory fails.
        FormattingError: For an unparseable display name pattern.
    """
    declaration = get_declaration(fn)
    if declaration is None:
        msg = f"{fn.__qualname__} is not decorated with @cartesian_test"
        raise ConfigurationError(msg)

    display_name = declaration.display_name or fn.__name__
    parameters = describe_parameters(fn)
    configuration = validate_configuration(
        declaration, parameters, method=display_name, injectable=injectable
    )
    formatter = DisplayNameFormatter(declaration.name or default_pattern)
    context = ResolutionContext(fn=fn, display_name=display_name, owner=owner)

    if configuration.kind is ConfigurationKind.WHOLE_METHOD:
        sets = resolve_factory(configuration.factory, context, len(configuration.parameters))
        dimensions: list[ValueSet] = list(sets)
        names = [p.name for p in configuration.parameters[: len(dimensions)]]
    else:
        dimensions = [resolve_source(p, context) for p in configuration.parameters]
        names = [p.name for p in configuration.parameters]

    plan = CartesianPlan(display_name, names, dimensions, formatter, configuration.kind)
    logger.debug(f"Planned {plan.total} invocation(s) of {display_name} over {names}")
    return plan
