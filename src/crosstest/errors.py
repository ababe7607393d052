"""Exceptions raised while planning Cartesian test invocations."""


class CartesianError(Exception):
    """Base class for every failure reported by the combination engine."""


class ConfigurationError(CartesianError):
    """The declared sources of a test method are inconsistent.

    Raised before any argument tuple is produced.
    """


class ResolutionError(CartesianError):
    """A source failed while its values were being materialized."""


class FormattingError(CartesianError):
    """A display name pattern cannot be parsed."""
