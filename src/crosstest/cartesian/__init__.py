"""Cartesian argument combination engine.

Resolves per-parameter sources (or a whole-method factory) into value
sets and walks their Cartesian product lazily, naming each invocation.
"""

from .declarations import (
    MethodDeclaration,
    ParameterDescriptor,
    ResolutionContext,
    cartesian_test,
    describe_parameters,
    get_declaration,
    is_cartesian_test,
)
from .engine import CartesianPlan, InvocationRecord, plan_invocations
from .lookup import FactoryReference, find_factory
from .naming import DEFAULT_NAME_PATTERN, DisplayNameFormatter, render_value
from .product import CartesianProduct, ProductState
from .resolvers import RESOLVER_REGISTRY, resolve_factory, resolve_source
from .sources import (
    ArgumentsProvider,
    Custom,
    EnumValues,
    FloatRange,
    IntRange,
    SelectionMode,
    Source,
    Values,
)
from .validation import Configuration, ConfigurationKind, validate_configuration
from .values import ArgumentSets, ValueSet


__all__ = [
    "DEFAULT_NAME_PATTERN",
    "RESOLVER_REGISTRY",
    "ArgumentSets",
    "ArgumentsProvider",
    "CartesianPlan",
    "CartesianProduct",
    "Configuration",
    "ConfigurationKind",
    "Custom",
    "DisplayNameFormatter",
    "EnumValues",
    "FactoryReference",
    "FloatRange",
    "IntRange",
    "InvocationRecord",
    "MethodDeclaration",
    "ParameterDescriptor",
    "ProductState",
    "ResolutionContext",
    "SelectionMode",
    "Source",
    "ValueSet",
    "Values",
    "cartesian_test",
    "describe_parameters",
    "find_factory",
    "get_declaration",
    "is_cartesian_test",
    "plan_invocations",
    "render_value",
    "resolve_factory",
    "resolve_source",
    "validate_configuration",
]
