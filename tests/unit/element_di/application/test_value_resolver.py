"""Unit tests for ValueResolver."""

import pytest

from element_di.application.container import Container
from element_di.application.value_resolver import ValueResolver
from element_di.domain import NotFoundError


class Logger:
    pass


@pytest.fixture
def container():
    container = Container()
    container.singleton("logger", Logger)
    container.set_parameter("a", "x")
    container.set_parameter("port", 5432)
    container.set_parameter("debug", True)
    container.set_parameter("hosts", ["h1", "h2"])
    return container


class TestValueResolver:
    """Test cases for token substitution."""

    def test_service_reference(self, container):
        assert ValueResolver().resolve(container, "@logger") is container.get("logger")

    def test_unknown_service_reference_raises(self, container):
        with pytest.raises(NotFoundError):
            ValueResolver().resolve(container, "@missing")

    def test_lone_at_sign_is_literal(self, container):
        assert ValueResolver().resolve(container, "@") == "@"

    def test_whole_token_keeps_type(self, container):
        resolver = ValueResolver()
        assert resolver.resolve(container, "%port%") == 5432
        assert resolver.resolve(container, "%debug%") is True
        assert resolver.resolve(container, "%hosts%") == ["h1", "h2"]

    def test_interpolation_uses_string_form(self, container):
        resolver = ValueResolver()
        assert resolver.resolve(container, "db:%port%") == "db:5432"
        assert resolver.resolve(container, "debug=%debug%") == "debug=True"

    def test_unknown_tokens_are_left_in_place(self, container):
        resolver = ValueResolver()
        assert resolver.resolve(container, "%a%-%b%") == "x-%b%"
        assert resolver.resolve(container, "%missing%") == "%missing%"

    def test_plain_values_are_unchanged(self, container):
        resolver = ValueResolver()
        assert resolver.resolve(container, "plain") == "plain"
        assert resolver.resolve(container, 42) == 42
        assert resolver.resolve(container, None) is None

    def test_nested_structures(self, container):
        resolved = ValueResolver().resolve(
            container,
            {"logger": "@logger", "ports": ["%port%", ("%a%",)]},
        )
        assert resolved["logger"] is container.get("logger")
        assert resolved["ports"] == [5432, ("x",)]
