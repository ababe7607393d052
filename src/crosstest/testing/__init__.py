"""Runner for Cartesian tests.

Provides discovery of cross_* files, resource injection for parameters
without a Cartesian source, and execution of every invocation.
"""

from .discovery import TestItem, collect
from .resources import ResourceResolver, Scope, resource
from .runner import InvocationResult, Runner, RunResult, TestResult, TestStatus, run


__all__ = [
    "InvocationResult",
    "ResourceResolver",
    "RunResult",
    "Runner",
    "Scope",
    "TestItem",
    "TestResult",
    "TestStatus",
    "collect",
    "resource",
    "run",
]
