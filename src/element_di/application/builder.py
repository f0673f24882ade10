import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from element_di.application.container import Container
from element_di.application.container_bag import ContainerBag
from element_di.application.resolver import locate_class, service_key
from element_di.application.value_resolver import ValueResolver
from element_di.domain import (
    BuildConfig,
    CompilerPassEntry,
    ContainerConfig,
    ContainerError,
    IParameterBag,
    ServiceConfig,
    ServiceDefinition,
    ServiceDefinitionError,
    ServiceId,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class ContainerBuilder:
    """Compiles service definitions and parameters into a ready container.

    Definitions are turned into factory bindings on an internal container when
    ``build`` runs; constructor arguments, properties and method-call arguments
    are resolved lazily, each time the service is built. Compiler passes run in
    priority order (higher first) and may register further services, parameters
    or tags.

    Attributes:
        _container: The container being configured.
        _parameter_bag: Parameters copied into the container on build.
        _definitions: Service id to definition.
        _registered: Definitions already turned into container bindings.
        _tags: Tag name to ``{service id: attributes}``, rebuilt from the definitions.
        _external_tags: Tags added through ``tag_service`` for ids without a definition.
        _compiler_passes: Queued passes, sorted by descending priority.
        _build_config: Build options.
        _value_resolver: Resolves ``@service`` and ``%parameter%`` tokens.

    Example:
        >>> builder = ContainerBuilder()
        >>> builder.set_parameter("mailer.host", "smtp.local")
        >>> builder.register("mailer", "app.mail.Mailer").add_argument("%mailer.host%")
        >>> builder.register("newsletter", "app.mail.Newsletter").add_argument("@mailer")
        >>> container = builder.build()
        >>> container.get("newsletter").mailer is container.get("mailer")
        True
    """

    def __init__(self, parameter_bag: Optional[IParameterBag] = None) -> None:
        self._container = Container()
        self._parameter_bag: IParameterBag = parameter_bag if parameter_bag is not None else ContainerBag()
        if isinstance(self._parameter_bag, ContainerBag):
            self._parameter_bag.set_container(self._container)

        self._definitions: Dict[str, ServiceDefinition] = {}
        self._registered: Dict[str, ServiceDefinition] = {}
        self._synced_parameters: Dict[str, Any] = {}
        self._tags: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._external_tags: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._compiler_passes: List[CompilerPassEntry] = []
        self._build_config = BuildConfig()
        self._value_resolver = ValueResolver()

    def register(self, service_id: ServiceId, service_class: Any = None) -> ServiceDefinition:
        """Create (or replace) the definition for a service id.

        Args:
            service_id: The id to register. A class is registered under its dotted path.
            service_class: Class, dotted class path or reference token. Defaults to the id.

        Returns:
            The new definition, for fluent configuration.
        """
        key = service_key(service_id)
        definition = ServiceDefinition(
            id=key,
            service_class=service_id if service_class is None else service_class,
        )
        self._definitions[key] = definition
        logger.debug("Registered definition [%s]", key)
        return definition

    def autowire(self, service_id: ServiceId, service_class: Any = None) -> ServiceDefinition:
        return self.register(service_id, service_class).set_autowired(True)

    def has_definition(self, service_id: ServiceId) -> bool:
        return service_key(service_id) in self._definitions

    def get_definition(self, service_id: ServiceId) -> ServiceDefinition:
        key = service_key(service_id)
        if key not in self._definitions:
            raise ServiceDefinitionError(key, f"Service definition [{key}] does not exist")
        return self._definitions[key]

    def get_definitions(self) -> Dict[str, ServiceDefinition]:
        return dict(self._definitions)

    def set_parameter(self, name: str, value: Any) -> "ContainerBuilder":
        self._parameter_bag.set(name, value)
        return self

    def get_parameter(self, name: str) -> Any:
        return self._parameter_bag.get(name)

    def set_parameters(self, parameters: Dict[str, Any]) -> "ContainerBuilder":
        self._parameter_bag.set_multiple(parameters)
        return self

    def load_from_config(self, config: Union[Dict[str, Any], ContainerConfig]) -> "ContainerBuilder":
        """Load parameters and services from a loader-produced mapping.

        Args:
            config: ``{"parameters": {...}, "services": {id: class_path | {...}}}``.

        Raises:
            ContainerError: If the mapping does not have the expected shape.
            ServiceDefinitionError: If a service entry is malformed.

        Example:
            >>> builder.load_from_config({
            ...     "parameters": {"db.dsn": "sqlite://"},
            ...     "services": {
            ...         "db": {"class": "app.db.Database", "arguments": ["%db.dsn%"]},
            ...         "clock": "app.time.SystemClock",
            ...     },
            ... })
        """
        if not isinstance(config, ContainerConfig):
            try:
                config = ContainerConfig.model_validate(config)
            except ValidationError as e:
                raise ContainerError(f"Invalid container configuration: {e}") from e

        if config.parameters:
            self.set_parameters(config.parameters)
        for service_id, spec in config.services.items():
            self.register_from_config(service_id, spec)
        return self

    def register_from_config(
        self,
        service_id: str,
        spec: Union[str, Dict[str, Any], ServiceConfig],
    ) -> ServiceDefinition:
        """Register a service from its loader description.

        Args:
            service_id: The id to register.
            spec: A class path, or a mapping with the optional keys ``class``,
                ``arguments``, ``calls``, ``properties``, ``tags``, ``public``,
                ``shared`` and ``autowire``.

        Raises:
            ServiceDefinitionError: If the description is malformed.
        """
        if isinstance(spec, str):
            return self.register(service_id, spec)

        if not isinstance(spec, ServiceConfig):
            try:
                spec = ServiceConfig.model_validate(spec)
            except ValidationError as e:
                raise ServiceDefinitionError(service_id, f"Invalid definition for service [{service_id}]: {e}") from e

        definition = self.register(service_id, spec.service_class)
        definition.set_arguments(spec.arguments)
        for method, arguments in self._normalize_calls(service_id, spec.calls):
            definition.add_method_call(method, arguments)
        for name, value in spec.properties.items():
            definition.set_property(name, value)
        for tag_name, attributes in self._normalize_tags(service_id, spec.tags):
            definition.add_tag(tag_name, attributes)

        if spec.public is not None:
            definition.set_public(spec.public)
        if spec.shared is not None:
            definition.set_shared(spec.shared)
        if spec.autowire is not None:
            definition.set_autowired(spec.autowire)
        return definition

    def add_compiler_pass(self, compiler_pass: Callable[..., Any], priority: int = 0) -> "ContainerBuilder":
        """Queue a compiler pass.

        Passes run during ``build`` with ``(container, builder)``; higher
        priorities run first and equal priorities keep insertion order.
        """
        self._compiler_passes.append(CompilerPassEntry(compiler_pass=compiler_pass, priority=priority))
        self._compiler_passes.sort(key=lambda entry: -entry.priority)
        return self

    def get_compiler_passes(self) -> List[Tuple[Callable[..., Any], int]]:
        return [(entry.compiler_pass, entry.priority) for entry in self._compiler_passes]

    def set_build_config(self, **options: Any) -> "ContainerBuilder":
        self._build_config = BuildConfig.model_validate({**self._build_config.model_dump(), **options})
        return self

    def get_build_config(self) -> BuildConfig:
        return self._build_config

    def set_compile(self, compile: bool = True) -> "ContainerBuilder":
        return self.set_build_config(compile=compile)

    def set_debug(self, debug: bool = True) -> "ContainerBuilder":
        return self.set_build_config(debug=debug)

    def tag_service(
        self,
        tag_name: str,
        service_id: ServiceId,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> "ContainerBuilder":
        """Tag a service.

        The tag is stored on the service's definition when one exists. Ids without
        a definition (services bound directly on the container) are kept in a
        separate index until a definition is registered for them.
        """
        key = service_key(service_id)
        attributes = dict(attributes or {})
        if key in self._definitions:
            self._definitions[key].add_tag(tag_name, attributes)
        else:
            self._external_tags.setdefault(tag_name, {})[key] = attributes
        return self

    def find_tagged_service_ids(self, tag_name: str) -> Dict[str, Dict[str, Any]]:
        """Return the ids currently carrying ``tag_name`` with their attributes."""
        self._rebuild_tags()
        return dict(self._tags.get(tag_name, {}))

    def build(self) -> Container:
        """Register every definition on the container and run compiler passes.

        Returns:
            The configured container.

        Raises:
            Any exception raised by a compiler pass; the build is aborted.
        """
        if self._build_config.debug:
            logging.getLogger("element_di").setLevel(logging.DEBUG)

        self._sync_parameters()
        self._sync_definitions()

        if self._build_config.compile:
            self._compile()

        logger.debug(
            "Built container with %d definitions and %d parameters",
            len(self._definitions),
            len(self._container.get_parameter_names()),
        )
        return self._container

    def get_container(self) -> Container:
        return self._container

    def get_parameter_bag(self) -> IParameterBag:
        return self._parameter_bag

    def _compile(self) -> None:
        for entry in self._compiler_passes:
            logger.debug("Running compiler pass %r (priority %d)", entry.compiler_pass, entry.priority)
            entry.compiler_pass(self._container, self)
            self._sync_parameters()
            self._sync_definitions()

    def _sync_parameters(self) -> None:
        parameters = self._parameter_bag.all()
        for name in [name for name in self._synced_parameters if name not in parameters]:
            self._container.remove_parameter(name)
            del self._synced_parameters[name]
        for name, value in parameters.items():
            if self._synced_parameters.get(name, _MISSING) is not value:
                self._container.set_parameter(name, value)
                self._synced_parameters[name] = value

    def _sync_definitions(self) -> None:
        for service_id, definition in self._definitions.items():
            if self._registered.get(service_id) is not definition:
                self._register_definition(service_id, definition)
        self._rebuild_tags()

    def _rebuild_tags(self) -> None:
        tags: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for tag_name, services in self._external_tags.items():
            for service_id, attributes in services.items():
                if service_id not in self._definitions:
                    tags.setdefault(tag_name, {})[service_id] = dict(attributes)
        for service_id, definition in self._definitions.items():
            for tag_name, attributes in definition.tags.items():
                tags.setdefault(tag_name, {})[service_id] = dict(attributes)
        self._tags = tags

    def _register_definition(self, service_id: str, definition: ServiceDefinition) -> None:
        def factory(container: Container) -> Any:
            return self._create_service(container, definition)

        if definition.shared:
            self._container.singleton(service_id, factory)
        else:
            self._container.bind(service_id, factory)
        self._registered[service_id] = definition

    def _create_service(self, container: Container, definition: ServiceDefinition) -> Any:
        service_class = self._value_resolver.resolve(container, definition.service_class)
        if isinstance(service_class, str):
            service_class = locate_class(service_class)
        if not callable(service_class):
            raise ServiceDefinitionError(definition.id, f"Class of service [{definition.id}] is not instantiable")

        arguments = self._value_resolver.resolve(container, definition.arguments)
        if definition.autowired and not arguments and isinstance(service_class, type):
            instance = container.build(service_class)
        else:
            instance = service_class(*arguments)

        for name, value in definition.properties.items():
            setattr(instance, name, self._value_resolver.resolve(container, value))

        for method, method_arguments in definition.method_calls:
            if not callable(getattr(instance, method, None)):
                raise ServiceDefinitionError(
                    definition.id,
                    f"Method [{method}] does not exist on service [{definition.id}]",
                )
            getattr(instance, method)(*self._value_resolver.resolve(container, method_arguments))

        return instance

    @staticmethod
    def _normalize_calls(service_id: str, calls: List[Any]) -> List[Tuple[str, List[Any]]]:
        normalized = []
        for call in calls:
            if isinstance(call, dict):
                method = call.get("method")
                arguments = call.get("arguments", [])
            else:
                method = call[0] if call else None
                arguments = call[1] if len(call) > 1 else []
            if not isinstance(method, str):
                raise ServiceDefinitionError(service_id, f"Method call on service [{service_id}] has no method name")
            normalized.append((method, list(arguments)))
        return normalized

    @staticmethod
    def _normalize_tags(service_id: str, tags: List[Any]) -> List[Tuple[str, Dict[str, Any]]]:
        normalized = []
        for tag in tags:
            if isinstance(tag, str):
                normalized.append((tag, {}))
                continue
            attributes = dict(tag)
            name = attributes.pop("name", None)
            if not isinstance(name, str):
                raise ServiceDefinitionError(service_id, f"Tag on service [{service_id}] has no name")
            normalized.append((name, attributes))
        return normalized
