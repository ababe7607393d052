"""Resolvers turning source declarations into value sets.

Every per-parameter declaration type maps to one resolver function in
``RESOLVER_REGISTRY``; whole-method factories go through
:func:`resolve_factory`.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable
from enum import Enum
from numbers import Integral, Real
from typing import Any

from crosstest.cartesian.declarations import ParameterDescriptor, ResolutionContext
from crosstest.cartesian.lookup import find_factory
from crosstest.cartesian.sources import (
    Custom,
    EnumValues,
    FloatRange,
    IntRange,
    SelectionMode,
    Source,
    Values,
)
from crosstest.cartesian.validation import check_enum_source
from crosstest.cartesian.values import ArgumentSets, ValueSet
from crosstest.errors import ConfigurationError, ResolutionError


logger = logging.getLogger(__name__)

Resolver = Callable[[Any, ParameterDescriptor, ResolutionContext], ValueSet]


def resolve_values(source: Values, parameter: ParameterDescriptor, context: ResolutionContext) -> ValueSet:
    if not source.values:
        msg = f"Values source of parameter '{parameter.name}' of {context.display_name} declares no values"
        raise ConfigurationError(msg)
    return ValueSet(source.values)


def _select_constants(enum: type[Enum], source: EnumValues, where: str) -> list[Enum]:
    constants = list(enum)
    if not source.names:
        return constants

    mode = source.mode
    if mode.uses_patterns:
        try:
            patterns = [re.compile(name) for name in source.names]
        except re.error as exc:
            msg = f"Invalid regular expression in enum source of {where}: {exc}"
            raise ConfigurationError(msg) from exc
        if mode is SelectionMode.MATCH_ALL:
            return [c for c in constants if all(p.fullmatch(c.name) for p in patterns)]
        return [c for c in constants if any(p.fullmatch(c.name) for p in patterns)]

    members = enum.__members__
    unknown = [name for name in source.names if name not in members]
    if unknown:
        msg = f"Invalid enum constant name(s) {unknown} for {enum.__qualname__} in enum source of {where}"
        raise ConfigurationError(msg)
    # aliases select their canonical member
    selected = {members[name] for name in source.names}
    if mode is SelectionMode.INCLUDE:
        return [c for c in constants if c in selected]
    return [c for c in constants if c not in selected]


def resolve_enum(source: EnumValues, parameter: ParameterDescriptor, context: ResolutionContext) -> ValueSet:
    enum = check_enum_source(source, parameter, context.display_name)
    where = f"parameter '{parameter.name}' of {context.display_name}"
    return ValueSet(_select_constants(enum, source, where))


def _check_range(source: IntRange | FloatRange, where: str) -> None:
    start, end, step = source.start, source.end, source.step
    for label, bound in (("start", start), ("end", end), ("step", step)):
        if isinstance(bound, bool) or not isinstance(bound, Real) or not math.isfinite(bound):
            msg = f"Illegal range for {where}. {label} must be a finite number, got {bound!r}"
            raise ConfigurationError(msg)
        if isinstance(source, IntRange) and not isinstance(bound, Integral):
            msg = f"Illegal range for {where}. {label} of an IntRange must be an integer, got {bound!r}"
            raise ConfigurationError(msg)
    if step == 0:
        msg = f"Illegal range for {where}. The step cannot be zero."
        raise ConfigurationError(msg)
    if start == end and not source.closed:
        msg = f"Illegal range for {where}. Equal start and end will produce an empty range."
        raise ConfigurationError(msg)
    if (start < end and step < 0) or (start > end and step > 0):
        msg = f"Illegal range for {where}. There's no way to get from {start} to {end} with a step of {step}."
        raise ConfigurationError(msg)


def _range_values(source: IntRange | FloatRange) -> Iterable[Any]:
    start, end, step = source.start, source.end, source.step
    if isinstance(source, IntRange):
        stop = end + (1 if step > 0 else -1) if source.closed else end
        yield from range(start, stop, step)
        return

    ascending = step > 0
    i = 0
    while True:
        value = start + i * step
        if ascending:
            in_range = value <= end if source.closed else value < end
        else:
            in_range = value >= end if source.closed else value > end
        if not in_range:
            return
        yield float(value)
        i += 1


def resolve_range(
    source: IntRange | FloatRange, parameter: ParameterDescriptor, context: ResolutionContext
) -> ValueSet:
    _check_range(source, f"parameter '{parameter.name}' of {context.display_name}")
    return ValueSet(_range_values(source))


def resolve_custom(source: Custom, parameter: ParameterDescriptor, context: ResolutionContext) -> ValueSet:
    provider_name = getattr(source.provider, "__qualname__", repr(source.provider))
    where = f"parameter '{parameter.name}' of {context.display_name}"
    try:
        provider = source.provider()
        provider.initialize(source.config)
        produced = provider.produce(context, parameter)
        return ValueSet(produced)
    except Exception as exc:
        msg = f"Custom provider {provider_name} failed for {where}: {type(exc).__name__}: {exc}"
        raise ResolutionError(msg) from exc


RESOLVER_REGISTRY: dict[type[Source], Resolver] = {
    Values: resolve_values,
    EnumValues: resolve_enum,
    IntRange: resolve_range,
    FloatRange: resolve_range,
    Custom: resolve_custom,
}


def resolve_source(parameter: ParameterDescriptor, context: ResolutionContext) -> ValueSet:
    """Resolve the single source declared on ``parameter``."""
    source = parameter.source
    if source is None:
        msg = f"Parameter '{parameter.name}' of {context.display_name} has no single source to resolve"
        raise ConfigurationError(msg)
    for source_type in type(source).__mro__:
        resolver = RESOLVER_REGISTRY.get(source_type)
        if resolver is not None:
            break
    else:
        msg = f"No resolver registered for {type(source).__qualname__} on parameter '{parameter.name}'"
        raise ConfigurationError(msg)

    values = resolver(source, parameter, context)
    logger.debug(f"Resolved {len(values)} value(s) for '{parameter.name}' of {context.display_name}")
    return values


def resolve_factory(
    reference: Any,
    context: ResolutionContext,
    parameter_count: int,
) -> ArgumentSets:
    """Invoke a whole-method factory and check its result.

    Raises:
        ConfigurationError: If the factory cannot be found or does not
            return ``ArgumentSets``.
        ResolutionError: If the factory raises, or registers more sets than
            the test method has parameters.
    """
    factory = find_factory(reference, context.fn, owner=context.owner)
    label = getattr(factory, "__qualname__", repr(factory))
    try:
        sets = factory()
    except Exception as exc:
        msg = f"Factory `{label}` of {context.display_name} failed: {type(exc).__name__}: {exc}"
        raise ResolutionError(msg) from exc

    if not isinstance(sets, ArgumentSets):
        msg = f"Factory `{label}` must return a `{ArgumentSets.__name__}` object, got {type(sets).__name__}"
        raise ConfigurationError(msg)

    count = len(sets)
    if count > parameter_count:
        # fewer sets than parameters is legal; the rest are injected by the runner
        msg = (
            f"Factory `{label}` must register values for each parameter exactly once. "
            f"Expected [{parameter_count}] parameter sets, but got [{count}]."
        )
        raise ResolutionError(msg)
    logger.debug(f"Factory {label} registered {count} parameter set(s) for {context.display_name}")
    return sets
