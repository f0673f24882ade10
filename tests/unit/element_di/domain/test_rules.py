"""Unit tests for shared validation rules."""

import pytest

from element_di.domain.rules import apply_rule, is_numeric, is_object, matches_type


class Thing:
    pass


class TestIsNumeric:
    """Test cases for numeric detection."""

    @pytest.mark.parametrize("value", [1, 2.5, "42", " 3.14 ", "-7", "1e3"])
    def test_numeric_values(self, value):
        assert is_numeric(value) is True

    @pytest.mark.parametrize("value", [True, False, None, "abc", "", "  ", [1], {"a": 1}])
    def test_non_numeric_values(self, value):
        assert is_numeric(value) is False


class TestMatchesType:
    """Test cases for type-name checks."""

    def test_int_excludes_bool(self):
        """Test that booleans are not accepted as integers."""
        assert matches_type(5, "int") is True
        assert matches_type(True, "int") is False

    def test_object(self):
        """Test that only non-primitive values count as objects."""
        assert matches_type(Thing(), "object") is True
        assert matches_type({"a": 1}, "object") is False
        assert is_object("text") is False

    def test_unknown_type_compares_class_name(self):
        assert matches_type(Thing(), "Thing") is True
        assert matches_type(1, "Thing") is False


class TestApplyRule:
    """Test cases for individual validation rules."""

    def test_required(self):
        assert apply_rule(None, "required", True) is False
        assert apply_rule(None, "required", False) is True
        assert apply_rule("", "required", True) is True

    def test_min_max(self):
        assert apply_rule(50, "min", 10) is True
        assert apply_rule(5, "min", 10) is False
        assert apply_rule("150", "max", 100) is False
        assert apply_rule("abc", "max", 100) is False

    def test_lengths(self):
        assert apply_rule("hello world", "minLength", 5) is True
        assert apply_rule("hi", "minLength", 5) is False
        assert apply_rule("hello", "maxLength", 3) is False

    def test_in_is_strict(self):
        """Test that the in rule compares types as well as values."""
        assert apply_rule("blue", "in", ["red", "blue"]) is True
        assert apply_rule("yellow", "in", ["red", "blue"]) is False
        assert apply_rule(1, "in", [True]) is False
        assert apply_rule("1", "in", [1]) is False

    def test_regex(self):
        assert apply_rule("test@example.com", "regex", r"^[^@]+@[^@]+\.[^@]+$") is True
        assert apply_rule("invalid", "regex", r"^[^@]+@[^@]+\.[^@]+$") is False
        assert apply_rule(123, "regex", r"\d+") is False

    def test_email(self):
        assert apply_rule("jane.doe@company.org", "email", True) is True
        assert apply_rule("invalid-email", "email", True) is False

    def test_url(self):
        assert apply_rule("https://example.com", "url", True) is True
        assert apply_rule("not-a-url", "url", True) is False

    def test_unknown_rule_passes(self):
        assert apply_rule("anything", "whatever", 1) is True
