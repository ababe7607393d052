"""Configuration checks run before any source is resolved."""

from __future__ import annotations

import inspect
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic

from crosstest.cartesian.declarations import MethodDeclaration, ParameterDescriptor
from crosstest.cartesian.sources import ArgumentsProvider, Custom, EnumValues
from crosstest.errors import ConfigurationError


class ConfigurationKind(Enum):
    """Where the arguments of a Cartesian test come from."""

    PER_PARAMETER = "per_parameter"
    WHOLE_METHOD = "whole_method"


@dataclass(frozen=True)
class Configuration:
    """Outcome of a successful validation.

    ``parameters`` lists the parameters that take part in the product, in
    declaration order. For whole-method factories this is every parameter;
    the factory's set count decides how many of them are used.
    """

    kind: ConfigurationKind
    parameters: tuple[ParameterDescriptor, ...]
    factory: Any = None


def _type_name(tp: Any) -> str:
    if tp is inspect.Parameter.empty:
        return "<unannotated>"
    return getattr(tp, "__qualname__", repr(tp))


def _protocol_members(protocol: type) -> set[str]:
    members: set[str] = set()
    for klass in protocol.__mro__:
        if klass in (object, Generic) or klass.__name__ == "Protocol":
            continue
        members.update(name for name in vars(klass) if not name.startswith("_"))
        members.update(getattr(klass, "__annotations__", {}))
    return members


def _is_assignable(explicit: type[Enum], declared: type) -> bool:
    try:
        return issubclass(explicit, declared)
    except TypeError:
        # protocols without @runtime_checkable are matched structurally
        defined = {name for klass in explicit.__mro__ for name in vars(klass)}
        return all(name in defined or hasattr(explicit, name) for name in _protocol_members(declared))


def check_enum_source(source: EnumValues, parameter: ParameterDescriptor, method: str) -> type[Enum]:
    """Return the enum class an :class:`EnumValues` source draws from.

    Raises:
        ConfigurationError: If no enum type can be determined or the explicit
            enum is not assignable to the parameter's declared type.
    """
    declared = parameter.annotation
    if source.enum is None:
        if isinstance(declared, type) and issubclass(declared, Enum):
            return declared
        msg = (
            f"Parameter '{parameter.name}' of {method} uses an enum source but its declared type "
            f"{_type_name(declared)} is not an Enum; pass EnumValues(enum=...) explicitly"
        )
        raise ConfigurationError(msg)

    explicit = source.enum
    if not (isinstance(explicit, type) and issubclass(explicit, Enum)):
        msg = f"Enum source of parameter '{parameter.name}' of {method} names {explicit!r}, which is not an Enum"
        raise ConfigurationError(msg)
    if isinstance(declared, type) and declared not in (object, Any) and not _is_assignable(explicit, declared):
        msg = (
            f"Enum source of parameter '{parameter.name}' of {method} is incompatible with the declared type: "
            f"expected a subclass of {_type_name(declared)}, got {_type_name(explicit)}"
        )
        raise ConfigurationError(msg)
    return explicit


def _check_source(parameter: ParameterDescriptor, method: str) -> None:
    source = parameter.source
    if isinstance(source, EnumValues):
        check_enum_source(source, parameter, method)
    elif isinstance(source, Custom):
        provider = source.provider
        if not (isinstance(provider, type) and issubclass(provider, ArgumentsProvider)):
            msg = (
                f"Custom source of parameter '{parameter.name}' of {method} must name an "
                f"ArgumentsProvider subclass, got {provider!r}"
            )
            raise ConfigurationError(msg)


def validate_configuration(
    declaration: MethodDeclaration,
    parameters: Sequence[ParameterDescriptor],
    *,
    method: str,
    injectable: Collection[str] = (),
) -> Configuration:
    """Decide whether a test is driven per parameter or by a whole-method factory.

    Args:
        declaration: The ``@cartesian_test`` declaration.
        parameters: Parameter descriptors in declaration order.
        method: Name of the test method, used in error messages.
        injectable: Parameter names the caller can inject itself; these may
            go without a source in per-parameter mode.

    Raises:
        ConfigurationError: On duplicate, conflicting, missing or
            type-incompatible source declarations.
    """
    for parameter in parameters:
        if len(parameter.sources) > 1:
            kinds = ", ".join(s.describe() for s in parameter.sources)
            msg = f"Parameter '{parameter.name}' of {method} declares more than one source: {kinds}"
            raise ConfigurationError(msg)

    sourced = [p for p in parameters if p.sources]

    if declaration.factory is not None:
        if sourced:
            names = ", ".join(f"'{p.name}'" for p in sourced)
            msg = (
                f"{method} declares a factory and per-parameter sources for {names}; "
                "use either the factory or one source per parameter"
            )
            raise ConfigurationError(msg)
        return Configuration(
            kind=ConfigurationKind.WHOLE_METHOD,
            parameters=tuple(parameters),
            factory=declaration.factory,
        )

    if not sourced:
        msg = f"{method} declares neither a factory nor a source for any of its parameters"
        raise ConfigurationError(msg)

    for parameter in parameters:
        if not parameter.sources and parameter.name not in injectable:
            msg = f"Parameter '{parameter.name}' of {method} has no source and cannot be injected"
            raise ConfigurationError(msg)
        if parameter.sources:
            _check_source(parameter, method)

    return Configuration(kind=ConfigurationKind.PER_PARAMETER, parameters=tuple(sourced))
