"""Tests for crosstest.cartesian.validation module."""

from enum import Enum
from typing import Annotated, Protocol

import pytest

from crosstest.cartesian.declarations import cartesian_test, describe_parameters, get_declaration
from crosstest.cartesian.sources import ArgumentsProvider, Custom, EnumValues, IntRange, Values
from crosstest.cartesian.validation import ConfigurationKind, validate_configuration
from crosstest.errors import ConfigurationError


class Shape:
    pass


class Polygon(Shape, Enum):
    TRIANGLE = 3
    SQUARE = 4


class Mood(Enum):
    HAPPY = "happy"
    SAD = "sad"


class Labelled(Protocol):
    def label(self) -> str: ...


class Planet(Enum):
    MARS = 4
    VENUS = 2

    def label(self) -> str:
        return self.name.title()


def validate(fn, injectable=()):
    return validate_configuration(
        get_declaration(fn),
        describe_parameters(fn),
        method=fn.__name__,
        injectable=injectable,
    )


class TestValidateConfiguration:
    """Tests for source exclusivity and shape checks."""

    def test_per_parameter_configuration(self):
        @cartesian_test
        def cross_sample(a: Annotated[int, Values(1, 2)], b: Annotated[Mood, EnumValues()]):
            pass

        configuration = validate(cross_sample)
        assert configuration.kind is ConfigurationKind.PER_PARAMETER
        assert [p.name for p in configuration.parameters] == ["a", "b"]

    def test_whole_method_configuration(self):
        @cartesian_test(factory="some_factory")
        def cross_sample(a, b):
            pass

        configuration = validate(cross_sample)
        assert configuration.kind is ConfigurationKind.WHOLE_METHOD
        assert configuration.factory == "some_factory"
        assert len(configuration.parameters) == 2

    def test_two_sources_on_one_parameter(self):
        @cartesian_test
        def cross_sample(mood: Annotated[Mood, Values(Mood.HAPPY), EnumValues()]):
            pass

        with pytest.raises(ConfigurationError, match="'mood' of cross_sample declares more than one source"):
            validate(cross_sample)

    def test_factory_with_parameter_sources(self):
        @cartesian_test(factory="some_factory")
        def cross_sample(a: Annotated[int, IntRange(0, 2)], b):
            pass

        with pytest.raises(ConfigurationError, match="declares a factory and per-parameter sources for 'a'"):
            validate(cross_sample)

    def test_neither_configuration(self):
        @cartesian_test
        def cross_sample(a, b):
            pass

        with pytest.raises(ConfigurationError, match="neither a factory nor a source"):
            validate(cross_sample)

    def test_no_parameters_and_no_factory(self):
        @cartesian_test
        def cross_sample():
            pass

        with pytest.raises(ConfigurationError, match="neither a factory nor a source"):
            validate(cross_sample)

    def test_parameter_without_source(self):
        @cartesian_test
        def cross_sample(a: Annotated[int, Values(1)], client):
            pass

        with pytest.raises(ConfigurationError, match="'client' of cross_sample has no source"):
            validate(cross_sample)

    def test_injectable_parameter_without_source(self):
        @cartesian_test
        def cross_sample(a: Annotated[int, Values(1)], client):
            pass

        configuration = validate(cross_sample, injectable={"client"})
        assert [p.name for p in configuration.parameters] == ["a"]

    def test_enum_source_on_non_enum_type(self):
        @cartesian_test
        def cross_sample(mood: Annotated[str, EnumValues()]):
            pass

        with pytest.raises(ConfigurationError, match="declared type str is not an Enum"):
            validate(cross_sample)

    def test_enum_source_on_unannotated_parameter(self):
        @cartesian_test
        def cross_sample(mood: Annotated[object, EnumValues()]):
            pass

        with pytest.raises(ConfigurationError, match="is not an Enum"):
            validate(cross_sample)

    def test_explicit_enum_implementing_declared_base(self):
        @cartesian_test
        def cross_sample(shape: Annotated[Shape, EnumValues(enum=Polygon)]):
            pass

        assert validate(cross_sample).kind is ConfigurationKind.PER_PARAMETER

    def test_explicit_enum_incompatible_with_declared_type(self):
        @cartesian_test
        def cross_sample(shape: Annotated[Shape, EnumValues(enum=Mood)]):
            pass

        with pytest.raises(ConfigurationError, match="expected a subclass of Shape, got Mood"):
            validate(cross_sample)

    def test_explicit_enum_satisfying_protocol(self):
        @cartesian_test
        def cross_sample(planet: Annotated[Labelled, EnumValues(enum=Planet)]):
            pass

        assert validate(cross_sample).kind is ConfigurationKind.PER_PARAMETER

    def test_explicit_enum_missing_protocol_members(self):
        @cartesian_test
        def cross_sample(mood: Annotated[Labelled, EnumValues(enum=Mood)]):
            pass

        with pytest.raises(ConfigurationError, match="expected a subclass of Labelled, got Mood"):
            validate(cross_sample)

    def test_explicit_enum_must_be_enum(self):
        @cartesian_test
        def cross_sample(value: Annotated[str, EnumValues(enum=str)]):
            pass

        with pytest.raises(ConfigurationError, match="which is not an Enum"):
            validate(cross_sample)

    def test_custom_source_requires_provider_subclass(self):
        class NotAProvider:
            pass

        @cartesian_test
        def cross_sample(value: Annotated[int, Custom(NotAProvider)]):
            pass

        with pytest.raises(ConfigurationError, match="must name an ArgumentsProvider subclass"):
            validate(cross_sample)

    def test_custom_source_with_provider(self):
        class Provider(ArgumentsProvider):
            def initialize(self, config):
                pass

            def produce(self, context, parameter):
                return [1]

        @cartesian_test
        def cross_sample(value: Annotated[int, Custom(Provider)]):
            pass

        assert validate(cross_sample).kind is ConfigurationKind.PER_PARAMETER
