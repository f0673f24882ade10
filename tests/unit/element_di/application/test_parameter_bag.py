"""Unit tests for ParameterBag."""

from types import SimpleNamespace

import pytest

from element_di.application.parameter_bag import ParameterBag
from element_di.domain import IParameterBag, ParameterError, ParameterNotFoundError


class Settings:
    def __init__(self):
        self.host = "localhost"
        self.port = 5432


class TestBasicAccess:
    """Test cases for the mapping operations."""

    def test_implements_interface(self):
        assert isinstance(ParameterBag(), IParameterBag)

    def test_initial_parameters(self):
        bag = ParameterBag({"a": 1})
        assert bag.get("a") == 1
        assert bag.count() == 1

    def test_set_get_has(self):
        bag = ParameterBag()
        assert bag.set("name", "demo") is bag
        assert bag.get("name") == "demo"
        assert bag.has("name")
        assert "name" in bag

    def test_get_missing_raises(self):
        with pytest.raises(ParameterNotFoundError, match=r"Parameter \[missing\] not found"):
            ParameterBag().get("missing")

    def test_get_missing_is_a_value_error(self):
        with pytest.raises(ValueError):
            ParameterBag().get("missing")

    def test_get_with_default(self):
        bag = ParameterBag({"present": None})
        assert bag.get_with_default("missing", "fallback") == "fallback"
        assert bag.get_with_default("present", "fallback") is None

    def test_remove(self):
        bag = ParameterBag({"a": 1})
        bag.remove("a").remove("never-existed")
        assert not bag.has("a")

    def test_all_returns_copy(self):
        bag = ParameterBag({"a": 1})
        snapshot = bag.all()
        snapshot["b"] = 2
        assert not bag.has("b")

    def test_keys_count_len_clear(self):
        bag = ParameterBag({"a": 1, "b": 2})
        assert bag.keys() == ["a", "b"]
        assert bag.count() == len(bag) == 2
        bag.clear()
        assert bag.count() == 0

    def test_set_multiple_replaces_by_default(self):
        bag = ParameterBag({"a": 1})
        bag.set_multiple({"a": 10, "b": 2})
        assert bag.all() == {"a": 10, "b": 2}

    def test_set_multiple_without_replace_keeps_existing(self):
        bag = ParameterBag({"a": 1})
        bag.set_multiple({"a": 10, "b": 2}, replace=False)
        assert bag.all() == {"a": 1, "b": 2}

    def test_get_matching(self):
        bag = ParameterBag({"db.host": "h", "db.port": 1, "app.name": "n"})
        assert bag.get_matching(r"^db\.") == {"db.host": "h", "db.port": 1}


class TestResolve:
    """Test cases for typed retrieval."""

    def test_resolve_int_from_string(self):
        bag = ParameterBag({"port": "8080"})
        assert bag.resolve("port", "int") == 8080

    def test_resolve_int_from_float_string(self):
        assert ParameterBag({"n": "3.7"}).resolve("n", "integer") == 3

    def test_resolve_int_rejects_non_numeric(self):
        bag = ParameterBag({"port": "abc"})
        with pytest.raises(ParameterError, match=r"Cannot convert parameter \[port\] to integer"):
            bag.resolve("port", "int")

    def test_resolve_float(self):
        assert ParameterBag({"ratio": "0.25"}).resolve("ratio", "float") == 0.25

    def test_resolve_float_rejects_non_numeric(self):
        with pytest.raises(ParameterError):
            ParameterBag({"ratio": "high"}).resolve("ratio", "double")

    def test_resolve_string(self):
        bag = ParameterBag({"n": 42, "empty": None})
        assert bag.resolve("n", "string") == "42"
        assert bag.resolve("empty", "str") == ""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("true", True),
            ("YES", True),
            ("on", True),
            ("1", True),
            ("false", False),
            ("off", False),
            ("0", False),
            ("", False),
            ("anything", True),
            (0, False),
            (1, True),
        ],
    )
    def test_resolve_bool(self, raw, expected):
        assert ParameterBag({"flag": raw}).resolve("flag", "bool") is expected

    def test_resolve_array_from_json(self):
        assert ParameterBag({"hosts": '["a", "b"]'}).resolve("hosts", "array") == ["a", "b"]

    def test_resolve_array_from_comma_separated(self):
        assert ParameterBag({"hosts": "a, b,c"}).resolve("hosts", "array") == ["a", "b", "c"]

    def test_resolve_array_wraps_json_scalar(self):
        assert ParameterBag({"n": "5"}).resolve("n", "list") == [5]

    def test_resolve_array_from_tuple_and_list(self):
        bag = ParameterBag({"t": (1, 2), "l": [3]})
        assert bag.resolve("t", "array") == [1, 2]
        assert bag.resolve("l", "array") == [3]

    def test_resolve_array_from_object(self):
        assert ParameterBag({"s": Settings()}).resolve("s", "array") == {"host": "localhost", "port": 5432}

    def test_resolve_array_rejects_number(self):
        with pytest.raises(ParameterError, match="to array"):
            ParameterBag({"n": 5}).resolve("n", "array")

    def test_resolve_object_from_dict(self):
        value = ParameterBag({"db": {"host": "h", "port": 1}}).resolve("db", "object")
        assert isinstance(value, SimpleNamespace)
        assert value.host == "h"
        assert value.port == 1

    def test_resolve_object_from_json_string(self):
        value = ParameterBag({"db": '{"host": "h"}'}).resolve("db", "object")
        assert value.host == "h"

    def test_resolve_object_keeps_objects(self):
        settings = Settings()
        assert ParameterBag({"s": settings}).resolve("s", "object") is settings

    def test_resolve_object_rejects_scalar(self):
        with pytest.raises(ParameterError, match="to object"):
            ParameterBag({"s": "plain"}).resolve("s", "object")

    def test_resolve_unknown_type(self):
        with pytest.raises(ParameterError, match=r"Unsupported type \[complex\] for parameter \[n\]"):
            ParameterBag({"n": 1}).resolve("n", "complex")

    def test_resolve_missing_raises(self):
        with pytest.raises(ParameterNotFoundError):
            ParameterBag().resolve("missing", "int")

    def test_resolve_with_default(self):
        bag = ParameterBag({"port": "80"})
        assert bag.resolve_with_default("port", "int", 1) == 80
        assert bag.resolve_with_default("missing", "int", "raw") == "raw"


class TestValidate:
    """Test cases for rule-based validation."""

    def test_valid_schema(self):
        bag = ParameterBag({"db.port": 5432, "app.env": "prod"})
        schema = {
            "db.port": {"required": True, "type": "int", "min": 1, "max": 65535},
            "app.env": {"in": ["dev", "prod"]},
        }
        assert bag.validate(schema) is True

    def test_missing_required_parameter(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterBag().validate({"db.host": {"required": True}})
        assert exc_info.value.parameter_name == "db.host"
        assert "rule [required]" in str(exc_info.value)

    def test_range_violation_reports_value(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterBag({"db.port": 70000}).validate({"db.port": {"max": 65535}})
        assert exc_info.value.parameter_value == 70000

    def test_regex_rule(self):
        bag = ParameterBag({"app.name": "demo-app"})
        assert bag.validate({"app.name": {"regex": r"^[a-z-]+$"}})
        with pytest.raises(ParameterError):
            bag.validate({"app.name": {"regex": r"^\d+$"}})

    def test_type_rule(self):
        with pytest.raises(ParameterError):
            ParameterBag({"n": "5"}).validate({"n": {"type": "int"}})
