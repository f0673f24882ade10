import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic_core import from_json

from element_di.domain import IParameterBag, ParameterError, ParameterNotFoundError, ParameterType
from element_di.domain.rules import apply_rule, is_numeric, is_object

_TRUE_TOKENS = frozenset({"true", "1", "yes", "on"})
_FALSE_TOKENS = frozenset({"false", "0", "no", "off", ""})


def _to_namespace(value: Any) -> Any:
    if isinstance(value, dict):
        return SimpleNamespace(**{key: _to_namespace(item) for key, item in value.items()})
    if isinstance(value, list):
        return [_to_namespace(item) for item in value]
    return value


class ParameterBag(IParameterBag):
    """Flat mapping of parameter names to values, with typed access and validation.

    Attributes:
        _parameters: Parameter name to raw value.
    """

    def __init__(self, parameters: Optional[Dict[str, Any]] = None) -> None:
        self._parameters: Dict[str, Any] = dict(parameters or {})

    def set(self, name: str, value: Any) -> "ParameterBag":
        self._parameters[name] = value
        return self

    def get(self, name: str) -> Any:
        if not self.has(name):
            raise ParameterNotFoundError(name)
        return self._parameters[name]

    def get_with_default(self, name: str, default: Any) -> Any:
        return self._parameters[name] if self.has(name) else default

    def has(self, name: str) -> bool:
        return name in self._parameters

    def remove(self, name: str) -> "ParameterBag":
        self._parameters.pop(name, None)
        return self

    def all(self) -> Dict[str, Any]:
        return dict(self._parameters)

    def keys(self) -> List[str]:
        return list(self._parameters)

    def clear(self) -> "ParameterBag":
        self._parameters.clear()
        return self

    def count(self) -> int:
        return len(self._parameters)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: object) -> bool:
        return name in self._parameters

    def set_multiple(self, parameters: Dict[str, Any], replace: bool = True) -> "ParameterBag":
        """Merge parameters into the bag.

        Args:
            parameters: Parameters to merge.
            replace: When False, existing keys keep their current value.
        """
        if replace:
            self._parameters.update(parameters)
        else:
            self._parameters = {**parameters, **self._parameters}
        return self

    def get_matching(self, pattern: str) -> Dict[str, Any]:
        """Return the parameters whose name matches a regular expression."""
        regex = re.compile(pattern)
        return {name: value for name, value in self._parameters.items() if regex.search(name)}

    def resolve(self, name: str, type_name: str) -> Any:
        """Fetch a parameter and coerce it to ``type_name``.

        Raises:
            ParameterNotFoundError: If the parameter does not exist.
            ParameterError: If the type is unknown or the value cannot be coerced.
        """
        return self._convert(self.get(name), type_name, name)

    def resolve_with_default(self, name: str, type_name: str, default: Any) -> Any:
        """Like ``resolve`` but returns ``default`` (uncoerced) for missing parameters."""
        if not self.has(name):
            return default
        return self._convert(self.get(name), type_name, name)

    def validate(self, schema: Dict[str, Dict[str, Any]]) -> bool:
        """Validate parameters against per-parameter rule sets.

        Supported rules: ``required``, ``type``, ``min``, ``max``, ``in``, ``regex``.

        Args:
            schema: Parameter name to ``{rule: constraint}`` mapping.

        Returns:
            True when every rule passes.

        Raises:
            ParameterError: On the first violated rule, naming the parameter.

        Example:
            >>> bag.validate({
            ...     "db.port": {"required": True, "type": "int", "min": 1, "max": 65535},
            ...     "app.env": {"in": ["dev", "prod"]},
            ... })
        """
        for name, rules in schema.items():
            value = self.get_with_default(name, None)
            for rule, constraint in rules.items():
                if not apply_rule(value, rule, constraint):
                    raise ParameterError(name, f"Parameter [{name}] validation failed on rule [{rule}]", value)
        return True

    def _convert(self, value: Any, type_name: str, name: str) -> Any:
        try:
            target = ParameterType.from_name(type_name)
        except ValueError:
            raise ParameterError(name, f"Unsupported type [{type_name}] for parameter [{name}]", value) from None

        if target is ParameterType.STRING:
            return "" if value is None else str(value)
        if target is ParameterType.INT:
            return self._convert_to_int(value, name)
        if target is ParameterType.FLOAT:
            return self._convert_to_float(value, name)
        if target is ParameterType.BOOL:
            return self._convert_to_bool(value)
        if target is ParameterType.ARRAY:
            return self._convert_to_array(value, name)
        if target is ParameterType.OBJECT:
            return self._convert_to_object(value, name)
        return None

    @staticmethod
    def _convert_to_int(value: Any, name: str) -> int:
        if not is_numeric(value):
            raise ParameterError(name, f"Cannot convert parameter [{name}] to integer", value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return int(float(value))
        return int(value)

    @staticmethod
    def _convert_to_float(value: Any, name: str) -> float:
        if not is_numeric(value):
            raise ParameterError(name, f"Cannot convert parameter [{name}] to float", value)
        return float(value)

    @staticmethod
    def _convert_to_bool(value: Any) -> bool:
        if isinstance(value, str):
            token = value.lower()
            if token in _TRUE_TOKENS:
                return True
            if token in _FALSE_TOKENS:
                return False
        return bool(value)

    @staticmethod
    def _convert_to_array(value: Any, name: str) -> Any:
        if isinstance(value, (list, dict)):
            return value
        if isinstance(value, tuple):
            return list(value)
        if isinstance(value, str):
            try:
                decoded = from_json(value)
            except ValueError:
                return [part.strip() for part in value.split(",")]
            return decoded if isinstance(decoded, (list, dict)) else [decoded]
        if isinstance(value, BaseModel):
            return value.model_dump()
        if is_object(value) and hasattr(value, "__dict__"):
            return dict(vars(value))
        raise ParameterError(name, f"Cannot convert parameter [{name}] to array", value)

    @staticmethod
    def _convert_to_object(value: Any, name: str) -> Any:
        if is_object(value):
            return value
        if isinstance(value, dict):
            return _to_namespace(value)
        if isinstance(value, str):
            try:
                decoded = from_json(value)
            except ValueError:
                decoded = None
            if isinstance(decoded, dict):
                return _to_namespace(decoded)
        raise ParameterError(name, f"Cannot convert parameter [{name}] to object", value)
