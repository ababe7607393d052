"""Lookup of whole-method factories by reference."""

from __future__ import annotations

import importlib
import inspect
import sys
import typing
from collections.abc import Callable
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from crosstest.cartesian.values import ArgumentSets
from crosstest.errors import ConfigurationError


@dataclass(frozen=True)
class FactoryReference:
    """Parsed form of a factory reference string.

    ``container`` is the class (``Class#name``), dotted class path
    (``pkg.mod.Class#name``) or module (``pkg.mod:name``) to search in;
    None means the test's own class, its enclosing classes and its module.
    """

    name: str
    container: str | None = None
    is_module: bool = False

    @classmethod
    def parse(cls, reference: str) -> FactoryReference:
        ref = reference.strip()
        if "(" in ref:
            ref = ref[: ref.index("(")]
        if "#" in ref:
            container, name = ref.split("#", 1)
            return cls(name=name, container=container)
        if ":" in ref:
            module, name = ref.split(":", 1)
            return cls(name=name, container=module, is_module=True)
        return cls(name=ref)


def _module_of(fn: Callable[..., Any]) -> ModuleType | None:
    return sys.modules.get(fn.__module__)


def _enclosing_classes(fn: Callable[..., Any], owner: type | None) -> list[type]:
    """Owning class first, then each enclosing class outward."""
    module = _module_of(fn)
    chain: list[type] = []
    # classes defined inside functions are only reachable through ``owner``
    if module is not None and "<locals>" not in fn.__qualname__:
        current: Any = module
        for part in fn.__qualname__.split(".")[:-1]:
            current = getattr(current, part, None)
            if not isinstance(current, type):
                break
            chain.append(current)
    classes = list(reversed(chain))
    if owner is not None and owner not in classes:
        classes.insert(0, owner)
    return classes


def _load_class(path: str, fn: Callable[..., Any], method: str) -> type:
    # "Outer.Inner" relative to the test module wins over an importable path
    candidate: Any = _module_of(fn)
    for part in path.split("."):
        candidate = getattr(candidate, part, None)
        if candidate is None:
            break
    if candidate is None and "." in path:
        module_name, _, class_name = path.rpartition(".")
        try:
            candidate = getattr(importlib.import_module(module_name), class_name, None)
        except (ImportError, ValueError) as exc:
            msg = f"Class {path} not found, referenced in method {method}"
            raise ConfigurationError(msg) from exc
    if not isinstance(candidate, type):
        msg = f"Class {path} not found, referenced in method {method}"
        raise ConfigurationError(msg)
    return candidate


def _load_module(path: str, method: str) -> ModuleType:
    try:
        return importlib.import_module(path)
    except (ImportError, ValueError) as exc:
        msg = f"Module {path} not found, referenced in method {method}"
        raise ConfigurationError(msg) from exc


def _static_member(cls: type, name: str, method: str) -> Callable[..., Any] | None:
    for klass in cls.__mro__:
        if name not in vars(klass):
            continue
        raw = vars(klass)[name]
        if isinstance(raw, (staticmethod, classmethod)):
            return getattr(cls, name)
        if inspect.isfunction(raw):
            msg = f"Factory `{klass.__qualname__}.{name}` must be a staticmethod or classmethod"
            raise ConfigurationError(msg)
        return raw if callable(raw) else None
    return None


def _check_shape(factory: Callable[..., Any], label: str) -> None:
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError):
        return
    required = [
        p
        for p in signature.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    if required:
        msg = f"Factory `{label}` must take no arguments, but requires {[p.name for p in required]}"
        raise ConfigurationError(msg)

    try:
        returns = typing.get_type_hints(factory).get("return")
    except (NameError, TypeError):
        returns = None
    if returns is None:
        return
    if not (isinstance(returns, type) and issubclass(returns, ArgumentSets)):
        msg = f"Factory `{label}` must return a `{ArgumentSets.__name__}` object, declared {returns!r}"
        raise ConfigurationError(msg)


def find_factory(
    reference: str | Callable[[], Any],
    fn: Callable[..., Any],
    *,
    owner: type | None = None,
) -> Callable[[], Any]:
    """Resolve a factory reference of test ``fn`` to a zero-argument callable.

    Raises:
        ConfigurationError: If the factory cannot be found, is an instance
            method, takes arguments or declares a return type other than
            ``ArgumentSets``.
    """
    method = fn.__qualname__
    if callable(reference):
        label = getattr(reference, "__qualname__", repr(reference))
        _check_shape(reference, label)
        return reference

    ref = FactoryReference.parse(reference)
    segments = [] if ref.container is None else ref.container.split(".")
    if not ref.name or not all(segments):
        msg = f"Malformed factory reference {reference!r} in method {method}"
        raise ConfigurationError(msg)
    factory: Callable[..., Any] | None = None
    searched: list[str] = []

    if ref.is_module:
        module = _load_module(ref.container or "", method)
        searched.append(module.__name__)
        candidate = getattr(module, ref.name, None)
        factory = candidate if callable(candidate) else None
    elif ref.container is not None:
        cls = _load_class(ref.container, fn, method)
        searched.append(cls.__qualname__)
        factory = _static_member(cls, ref.name, method)
    else:
        for cls in _enclosing_classes(fn, owner):
            searched.append(cls.__qualname__)
            factory = _static_member(cls, ref.name, method)
            if factory is not None:
                break
        if factory is None:
            module = _module_of(fn)
            if module is not None:
                searched.append(module.__name__)
                candidate = getattr(module, ref.name, None)
                factory = candidate if callable(candidate) else None

    if factory is None:
        msg = (
            f"Factory `{ref.name}() -> ArgumentSets` not found in {' or '.join(searched) or fn.__module__} "
            f"(referenced by {method})"
        )
        raise ConfigurationError(msg)

    _check_shape(factory, ref.name)
    return factory
