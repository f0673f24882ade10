from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from element_di.domain.enums import Lifetime
from element_di.domain.exceptions import ParameterError
from element_di.domain.rules import apply_rule, is_numeric


class Binding(BaseModel):
    """Value object representing a service binding.

    Attributes:
        concrete: A class, a dotted class path, a factory callable or a ready value.
        shared: Whether the built instance is cached and reused.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    concrete: Any = Field(..., description="The class, class path, factory or value bound to the id.")
    shared: bool = Field(default=False, description="Whether the built instance is cached.")

    @property
    def lifetime(self) -> Lifetime:
        return Lifetime.from_shared(self.shared)


class ServiceDefinition(BaseModel):
    """Recipe for building a service through the container builder.

    Values held in ``service_class``, ``arguments``, ``properties`` and
    ``method_calls`` may be literals, ``"@service"`` references or
    ``"%parameter%"`` references; they are resolved when the service is built.

    Attributes:
        id: The service id this definition is registered under.
        service_class: Class, dotted class path or reference token.
        arguments: Positional constructor arguments.
        method_calls: Ordered ``(method_name, arguments)`` pairs invoked after construction.
        properties: Attributes assigned after construction.
        tags: Tag name to attribute mapping.
        public: Whether the service is meant to be fetched directly.
        shared: Whether the built service is cached.
        autowired: Whether missing constructor arguments are resolved from type hints.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(..., description="The id the definition is registered under.")
    service_class: Any = Field(..., description="Class, dotted class path or reference token.")
    arguments: List[Any] = Field(default_factory=list, description="Positional constructor arguments.")
    method_calls: List[Tuple[str, List[Any]]] = Field(
        default_factory=list,
        description="Ordered method calls applied after construction.",
    )
    properties: Dict[str, Any] = Field(default_factory=dict, description="Attributes set after construction.")
    tags: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Tags with their attributes.")
    public: bool = Field(default=True, description="Whether the service is public.")
    shared: bool = Field(default=True, description="Whether the service is cached once built.")
    autowired: bool = Field(default=False, description="Whether the constructor is auto-wired.")

    def set_class(self, service_class: Any) -> "ServiceDefinition":
        self.service_class = service_class
        return self

    def set_arguments(self, arguments: List[Any]) -> "ServiceDefinition":
        self.arguments = list(arguments)
        return self

    def add_argument(self, argument: Any) -> "ServiceDefinition":
        self.arguments.append(argument)
        return self

    def add_method_call(self, method: str, arguments: Optional[List[Any]] = None) -> "ServiceDefinition":
        self.method_calls.append((method, list(arguments or [])))
        return self

    def set_property(self, name: str, value: Any) -> "ServiceDefinition":
        self.properties[name] = value
        return self

    def add_tag(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> "ServiceDefinition":
        self.tags[name] = dict(attributes or {})
        return self

    def has_tag(self, name: str) -> bool:
        return name in self.tags

    def set_public(self, public: bool) -> "ServiceDefinition":
        self.public = public
        return self

    def set_shared(self, shared: bool) -> "ServiceDefinition":
        self.shared = shared
        return self

    def set_autowired(self, autowired: bool) -> "ServiceDefinition":
        self.autowired = autowired
        return self

    def is_public(self) -> bool:
        return self.public

    def is_shared(self) -> bool:
        return self.shared

    def is_autowired(self) -> bool:
        return self.autowired


class CompilerPassEntry(BaseModel):
    """A compiler pass queued on the builder together with its priority."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    compiler_pass: Callable[..., Any] = Field(..., description="Callable receiving (container, builder).")
    priority: int = Field(default=0, description="Higher priorities run first.")


class BuildConfig(BaseModel):
    """Options controlling ``ContainerBuilder.build``.

    Attributes:
        compile: Run compiler passes during build.
        cache: Reserved for builders that persist compiled containers.
        debug: Emit debug logging while building.
    """

    model_config = ConfigDict(extra="allow")

    compile: bool = Field(default=True, description="Whether compiler passes run on build.")
    cache: bool = Field(default=False, description="Whether the compiled container may be cached.")
    debug: bool = Field(default=False, description="Whether debug logging is enabled on build.")


class ServiceConfig(BaseModel):
    """Loader-produced description of a single service.

    Mirrors the mapping form accepted by ``ContainerBuilder.register_from_config``.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True, populate_by_name=True)

    service_class: Optional[Any] = Field(default=None, alias="class")
    arguments: List[Any] = Field(default_factory=list)
    calls: List[Union[Dict[str, Any], List[Any]]] = Field(default_factory=list)
    properties: Dict[str, Any] = Field(default_factory=dict)
    tags: List[Union[str, Dict[str, Any]]] = Field(default_factory=list)
    public: Optional[bool] = None
    shared: Optional[bool] = None
    autowire: Optional[bool] = None


class ContainerConfig(BaseModel):
    """Loader-produced configuration: flat parameters plus service specs."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    parameters: Dict[str, Any] = Field(default_factory=dict)
    services: Dict[str, Union[str, ServiceConfig]] = Field(default_factory=dict)


class Parameter(BaseModel):
    """Self-describing parameter with optional type, rules and metadata.

    Attributes:
        name: Parameter name.
        value: Raw value.
        type: Optional type name used by ``get_typed_value``.
        description: Free-form description.
        required: Whether ``None`` is rejected by ``validate``.
        default: Default value advertised to consumers.
        rules: Validation rules keyed by rule name.
        metadata: Arbitrary extra information.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    value: Any = None
    type: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    default: Any = None
    rules: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def set_value(self, value: Any) -> "Parameter":
        self.value = value
        return self

    def set_type(self, type_name: str) -> "Parameter":
        self.type = type_name
        return self

    def set_description(self, description: str) -> "Parameter":
        self.description = description
        return self

    def set_required(self, required: bool = True) -> "Parameter":
        self.required = required
        return self

    def set_default(self, default: Any) -> "Parameter":
        self.default = default
        return self

    def set_rules(self, rules: Dict[str, Any]) -> "Parameter":
        self.rules = dict(rules)
        return self

    def add_rule(self, rule: str, constraint: Any) -> "Parameter":
        self.rules[rule] = constraint
        return self

    def set_metadata(self, metadata: Dict[str, Any]) -> "Parameter":
        self.metadata = dict(metadata)
        return self

    def set_metadata_value(self, key: str, value: Any) -> "Parameter":
        self.metadata[key] = value
        return self

    def get_metadata_value(self, key: str) -> Any:
        if key not in self.metadata:
            raise ParameterError(self.name, f"Metadata key [{key}] not found")
        return self.metadata[key]

    def get_metadata_value_with_default(self, key: str, default: Any) -> Any:
        return self.metadata.get(key, default)

    def has_value(self) -> bool:
        return self.value is not None

    def validate(self) -> bool:
        """Check the value against ``required`` and every rule.

        Returns:
            True when all checks pass, False on the first failure.
        """
        if self.required and self.value is None:
            return False
        return all(apply_rule(self.value, rule, constraint) for rule, constraint in self.rules.items())

    def get_typed_value(self) -> Any:
        """Return the value cast to ``type`` using lenient casting rules.

        Unlike ``ParameterBag.resolve`` this never fails: unknown types return
        the raw value and non-numeric values cast to numbers become zero.
        """
        if self.type is None:
            return self.value

        value = self.value
        type_name = self.type.lower()
        if type_name in ("string", "str"):
            return "" if value is None else str(value)
        if type_name in ("int", "integer"):
            return int(float(value)) if is_numeric(value) else 0
        if type_name in ("float", "double"):
            return float(value) if is_numeric(value) else 0.0
        if type_name in ("bool", "boolean"):
            return bool(value)
        if type_name == "array":
            if value is None:
                return []
            if isinstance(value, (list, dict)):
                return value
            if isinstance(value, tuple):
                return list(value)
            return [value]
        if type_name == "object":
            if isinstance(value, dict):
                return SimpleNamespace(**value)
            return value
        return value

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Parameter":
        """Create a parameter from a mapping produced by ``to_dict``.

        Raises:
            ParameterError: If ``name`` is missing.
        """
        if "name" not in data:
            raise ParameterError("name", "Parameter name is required")
        return cls.model_validate(data)
