"""Validation rules shared by parameter bags and parameter descriptors."""

import re
from typing import Any

from pydantic import AnyUrl, TypeAdapter, ValidationError
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

_URL_ADAPTER = TypeAdapter(AnyUrl)

_PRIMITIVES = (str, bytes, int, float, bool, list, tuple, dict, set, type(None))


def is_numeric(value: Any) -> bool:
    """Return True for numbers and numeric strings (booleans excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value.strip())
        except ValueError:
            return False
        return bool(value.strip())
    return False


def is_object(value: Any) -> bool:
    """Return True for values that are not plain scalars or containers."""
    return not isinstance(value, _PRIMITIVES)


def matches_type(value: Any, expected: str) -> bool:
    """Check a value against a type name such as ``string`` or ``int``."""
    if expected == "string":
        return isinstance(value, str)
    if expected in ("int", "integer"):
        return isinstance(value, int) and not isinstance(value, bool)
    if expected in ("float", "double"):
        return isinstance(value, float)
    if expected in ("bool", "boolean"):
        return isinstance(value, bool)
    if expected == "array":
        return isinstance(value, (list, tuple, dict))
    if expected == "object":
        return is_object(value)
    if expected == "null":
        return value is None
    return type(value).__name__ == expected


def _is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value)
    except PydanticCustomError:
        return False
    return True


def _is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def apply_rule(value: Any, rule: str, constraint: Any) -> bool:
    """Apply a single validation rule to a value.

    Args:
        value: The value under validation.
        rule: Rule name (``required``, ``type``, ``min``, ``max``, ``minLength``,
            ``maxLength``, ``in``, ``regex``, ``email``, ``url``).
        constraint: The rule argument.

    Returns:
        True when the value satisfies the rule. Unknown rules always pass.
    """
    if rule == "required":
        return value is not None if constraint else True
    if rule == "type":
        return matches_type(value, constraint)
    if rule == "min":
        return is_numeric(value) and float(value) >= constraint
    if rule == "max":
        return is_numeric(value) and float(value) <= constraint
    if rule == "minLength":
        return isinstance(value, str) and len(value) >= constraint
    if rule == "maxLength":
        return isinstance(value, str) and len(value) <= constraint
    if rule == "in":
        options = constraint if isinstance(constraint, (list, tuple, set)) else [constraint]
        return any(value == option and type(value) is type(option) for option in options)
    if rule == "regex":
        return isinstance(value, str) and re.search(constraint, value) is not None
    if rule == "email":
        return _is_email(value) if constraint else True
    if rule == "url":
        return _is_url(value) if constraint else True
    return True
