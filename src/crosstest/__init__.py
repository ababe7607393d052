"""crosstest - Cartesian parameterized testing."""

from .cartesian import (
    ArgumentSets,
    ArgumentsProvider,
    Custom,
    EnumValues,
    FloatRange,
    IntRange,
    SelectionMode,
    Values,
    cartesian_test,
    plan_invocations,
)
from .errors import CartesianError, ConfigurationError, FormattingError, ResolutionError
from .testing import Runner, Scope, collect, resource, run
from .version import __version__


__all__ = [
    # Declarations
    "cartesian_test",
    "Values",
    "EnumValues",
    "SelectionMode",
    "IntRange",
    "FloatRange",
    "Custom",
    "ArgumentsProvider",
    "ArgumentSets",
    "plan_invocations",
    # Errors
    "CartesianError",
    "ConfigurationError",
    "ResolutionError",
    "FormattingError",
    # Running
    "Runner",
    "Scope",
    "collect",
    "resource",
    "run",
    "__version__",
]
