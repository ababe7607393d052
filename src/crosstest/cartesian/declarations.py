"""Declaration boundary: the ``@cartesian_test`` decorator and parameter metadata."""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, ParamSpec, TypeVar, get_args, get_origin

from crosstest.cartesian.sources import Source
from crosstest.errors import ConfigurationError


logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

DECLARATION_ATTR = "__crosstest_cartesian__"


@dataclass(frozen=True)
class MethodDeclaration:
    """Method-level configuration recorded by ``@cartesian_test``.

    Attributes
    ----------
    name
        Display name pattern, or None for the configured default.
    factory
        Whole-method factory reference: a simple name, ``Class#name``,
        ``package.module.Class#name``, ``package.module:name`` or a callable.
    display_name
        Name of the test method itself; defaults to the function name.
    """

    name: str | None = None
    factory: str | Callable[[], Any] | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class ParameterDescriptor:
    """A single test parameter as seen by the combination engine."""

    name: str
    index: int
    annotation: Any = inspect.Parameter.empty
    sources: tuple[Source, ...] = ()

    @property
    def source(self) -> Source | None:
        """The only declared source, or None."""
        return self.sources[0] if len(self.sources) == 1 else None

    @property
    def has_annotation(self) -> bool:
        return self.annotation is not inspect.Parameter.empty


@dataclass(frozen=True)
class ResolutionContext:
    """Identity of the test method whose arguments are being resolved."""

    fn: Callable[..., Any]
    display_name: str
    owner: type | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.fn.__module__}.{self.fn.__qualname__}"


def cartesian_test(
    fn: Callable[P, T] | None = None,
    *,
    name: str | None = None,
    factory: str | Callable[[], Any] | None = None,
    display_name: str | None = None,
) -> Callable[P, T] | Callable[[Callable[P, T]], Callable[P, T]]:
    """Mark a function as a Cartesian test.

    Args:
        fn: The test function (when used without parentheses).
        name: Display name pattern for each invocation, e.g.
            ``"{index} => {0} and {1}"``.
        factory: Whole-method factory reference returning ``ArgumentSets``.
            Mutually exclusive with per-parameter sources.
        display_name: Name substituted for ``{displayName}``.

    Example:
        @cartesian_test(name="[{index}] x={0} y={1}")
        def cross_grid(x: Annotated[int, IntRange(0, 3)], y: Annotated[str, Values("a", "b")]):
            ...

        @cartesian_test(factory="bit_sets")
        def cross_bits(first, second):
            ...
    """
    if name is not None and not isinstance(name, str):
        msg = f"cartesian_test() name must be a string, got {type(name).__name__}"
        raise TypeError(msg)
    if factory is not None and not (isinstance(factory, str) or callable(factory)):
        msg = f"cartesian_test() factory must be a name or a callable, got {type(factory).__name__}"
        raise TypeError(msg)
    if isinstance(factory, str) and not factory.strip():
        msg = "cartesian_test() factory name must not be blank"
        raise ValueError(msg)

    declaration = MethodDeclaration(name=name, factory=factory, display_name=display_name)

    def decorator(fn: Callable[P, T]) -> Callable[P, T]:
        setattr(fn, DECLARATION_ATTR, declaration)
        return fn

    if fn is not None:
        return decorator(fn)
    return decorator


def get_declaration(fn: Callable[..., Any]) -> MethodDeclaration | None:
    """Return the ``@cartesian_test`` declaration of ``fn``, if any."""
    return getattr(fn, DECLARATION_ATTR, None)


def is_cartesian_test(obj: Any) -> bool:
    return callable(obj) and isinstance(get_declaration(obj), MethodDeclaration)


def _resolved_annotations(fn: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(fn, include_extras=True)
    except (NameError, TypeError) as exc:
        logger.debug(f"Cannot evaluate all annotations of {fn.__qualname__} at once: {exc}")

    # one unresolvable hint must not hide the sources on the others
    target = inspect.unwrap(fn)
    globalns = getattr(target, "__globals__", {})
    hints: dict[str, Any] = {}
    for name, raw in getattr(target, "__annotations__", {}).items():
        holder = types.SimpleNamespace(__annotations__={name: raw})
        try:
            hints.update(typing.get_type_hints(holder, globalns=globalns, include_extras=True))
        except (NameError, TypeError) as exc:
            if isinstance(raw, str) and "Annotated" in raw:
                msg = f"Cannot evaluate annotation {raw!r} of parameter '{name}' of {fn.__qualname__}: {exc}"
                raise ConfigurationError(msg) from exc
            logger.warning(f"Cannot evaluate annotation of '{name}' in {fn.__qualname__}: {exc}; using it as written")
    return hints


def describe_parameters(fn: Callable[..., Any]) -> list[ParameterDescriptor]:
    """Describe the parameters of ``fn`` (excluding ``self``) in declaration order.

    ``Annotated[T, source]`` metadata that is an instance of
    :class:`~crosstest.cartesian.sources.Source` is collected as the
    parameter's source declarations; ``T`` becomes the declared type.
    """
    hints = _resolved_annotations(fn)
    descriptors: list[ParameterDescriptor] = []
    params = [p for p in inspect.signature(fn).parameters.values() if p.name != "self"]
    for index, param in enumerate(params):
        annotation = hints.get(param.name, param.annotation)
        sources: tuple[Source, ...] = ()
        if get_origin(annotation) is Annotated:
            base, *metadata = get_args(annotation)
            sources = tuple(m for m in metadata if isinstance(m, Source))
            annotation = base
        descriptors.append(
            ParameterDescriptor(name=param.name, index=index, annotation=annotation, sources=sources)
        )
    return descriptors
