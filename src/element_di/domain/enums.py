from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a bound service.

    Attributes:
        SINGLETON: Built once, cached and shared across resolutions.
        TRANSIENT: Built anew on each resolution.
    """

    TRANSIENT = "transient"
    SINGLETON = "singleton"

    @classmethod
    def from_shared(cls, shared: bool) -> "Lifetime":
        return cls.SINGLETON if shared else cls.TRANSIENT

    def __str__(self) -> str:
        return self.value


class ParameterType(str, Enum):
    """Coercion targets understood by parameter bags.

    Attributes:
        STRING: Text value.
        INT: Integer value, from numbers or numeric strings.
        FLOAT: Floating point value, from numbers or numeric strings.
        BOOL: Boolean value, from booleans or on/off style tokens.
        ARRAY: List or mapping, from JSON or comma separated strings.
        OBJECT: Attribute-style object, from mappings or JSON objects.
        NULL: Always ``None``.
    """

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"

    @classmethod
    def from_name(cls, name: str) -> "ParameterType":
        """Look up a coercion target by name or alias.

        Args:
            name: Case-insensitive type name (``str``, ``integer``, ``double``...).

        Raises:
            ValueError: If the name is not a known type.
        """
        normalized = name.lower()
        return cls(_ALIASES.get(normalized, normalized))

    def __str__(self) -> str:
        return self.value


_ALIASES = {
    "str": "string",
    "integer": "int",
    "double": "float",
    "boolean": "bool",
    "list": "array",
    "dict": "array",
    "none": "null",
}
