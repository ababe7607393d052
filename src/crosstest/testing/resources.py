"""Name-based injection for test parameters that carry no Cartesian source.

A resource is a factory registered under its function name. Any test
parameter with that name and no source of its own receives the factory's
value, including parameters left over when a whole-method factory
registers fewer sets than the test has parameters.
"""

import inspect
from collections.abc import AsyncGenerator, Callable, Generator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ParamSpec, TypeVar


P = ParamSpec("P")
T = TypeVar("T")


class Scope(Enum):
    """Resource lifetime."""

    INVOCATION = "invocation"  # fresh value per Cartesian invocation
    SESSION = "session"  # shared across the whole run


@dataclass
class ResourceDef:
    """Definition of a registered resource."""

    name: str
    fn: Callable[..., Any]
    scope: Scope
    dependencies: list[str] = field(default_factory=list)

    @property
    def is_generator(self) -> bool:
        return inspect.isgeneratorfunction(self.fn)

    @property
    def is_async_generator(self) -> bool:
        return inspect.isasyncgenfunction(self.fn)

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.fn) or self.is_async_generator


_registry: dict[str, ResourceDef] = {}


def resource(
    fn: Callable[P, T] | None = None,
    *,
    scope: Scope | str = Scope.INVOCATION,
) -> Callable[P, T] | Callable[[Callable[P, T]], Callable[P, T]]:
    """Register a function as an injectable resource.

    Example:
        @resource(scope="session")
        def http_client():
            client = Client()
            yield client
            client.close()
    """
    resolved_scope = Scope(scope) if isinstance(scope, str) else scope

    def decorator(fn: Callable[P, T]) -> Callable[P, T]:
        deps = list(inspect.signature(fn).parameters)
        _registry[fn.__name__] = ResourceDef(
            name=fn.__name__, fn=fn, scope=resolved_scope, dependencies=deps
        )
        return fn

    if fn is not None:
        return decorator(fn)
    return decorator


def get_registry() -> dict[str, ResourceDef]:
    """Get the global resource registry."""
    return _registry


def clear_registry() -> None:
    """Clear all registered resources."""
    _registry.clear()


class ResourceResolver:
    """Resolves resources for one run, caching by scope."""

    def __init__(
        self,
        registry: dict[str, ResourceDef] | None = None,
        *,
        parent: "ResourceResolver | None" = None,
    ) -> None:
        self._registry = dict(registry if registry is not None else _registry)
        self._cache: dict[str, Any] = {}
        self._teardowns: list[tuple[Scope, Generator[Any, None, None] | AsyncGenerator[Any, None]]] = []
        self._parent = parent

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._registry)

    def fork(self) -> "ResourceResolver":
        """Child resolver with its own INVOCATION cache; SESSION values come from ``self``."""
        return ResourceResolver(self._registry, parent=self)

    async def resolve(self, name: str, *, resolving: tuple[str, ...] = ()) -> Any:
        """Resolve a resource by name, including its dependencies.

        Raises:
            LookupError: For unknown resources or dependency cycles.
        """
        if name not in self._registry:
            msg = f"Unknown resource: {name}"
            raise LookupError(msg)
        if name in resolving:
            msg = f"Resource dependency cycle: {' -> '.join((*resolving, name))}"
            raise LookupError(msg)
        if name in self._cache:
            return self._cache[name]

        defn = self._registry[name]
        if defn.scope is Scope.SESSION and self._parent is not None:
            return await self._parent.resolve(name, resolving=resolving)
        kwargs = {dep: await self.resolve(dep, resolving=(*resolving, name)) for dep in defn.dependencies}

        if defn.is_async_generator:
            agen = defn.fn(**kwargs)
            value = await agen.__anext__()
            self._teardowns.append((defn.scope, agen))
        elif defn.is_generator:
            gen = defn.fn(**kwargs)
            value = next(gen)
            self._teardowns.append((defn.scope, gen))
        elif defn.is_async:
            value = await defn.fn(**kwargs)
        else:
            value = defn.fn(**kwargs)

        self._cache[name] = value
        return value

    async def _finish(self, gen: Generator[Any, None, None] | AsyncGenerator[Any, None]) -> None:
        if isinstance(gen, AsyncGenerator):
            try:
                await gen.__anext__()
            except StopAsyncIteration:
                pass
        else:
            try:
                next(gen)
            except StopIteration:
                pass

    async def teardown_scope(self, scope: Scope) -> None:
        """Finish generator resources of ``scope`` (LIFO) and forget their values."""
        remaining = []
        for s, gen in reversed(self._teardowns):
            if s is scope:
                await self._finish(gen)
            else:
                remaining.append((s, gen))
        self._teardowns = list(reversed(remaining))
        for name in [n for n in self._cache if self._registry[n].scope is scope]:
            del self._cache[name]

    async def teardown(self) -> None:
        """Finish every generator resource, newest first."""
        for scope in (Scope.INVOCATION, Scope.SESSION):
            await self.teardown_scope(scope)
