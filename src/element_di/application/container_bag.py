import logging
import re
import weakref
from typing import Any, Dict, Iterable, Optional

from element_di.application.parameter_bag import ParameterBag
from element_di.domain import IContainer, IParameterBag

logger = logging.getLogger(__name__)

_PARAMETER_TOKEN = re.compile(r"%([^%]+)%")


class ContainerBag(ParameterBag):
    """Parameter bag that can dereference ``@service`` and ``%parameter%`` values.

    Holds a weak reference to a container. Values fetched through ``get`` and
    ``get_with_default`` that consist of exactly one token are substituted;
    tokens that cannot be resolved are returned verbatim. The bag also stages
    per-service parameters and named environment snapshots.

    Attributes:
        _container_ref: Weak reference to the owning container.
        _service_parameters: Service id to parameter mapping.
        _environment_parameters: Environment name to parameter snapshot.
    """

    def __init__(self, parameters: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(parameters)
        self._container_ref: Optional["weakref.ReferenceType[IContainer]"] = None
        self._service_parameters: Dict[str, Dict[str, Any]] = {}
        self._environment_parameters: Dict[str, Dict[str, Any]] = {}

    def set_container(self, container: IContainer) -> "ContainerBag":
        self._container_ref = weakref.ref(container)
        return self

    def get_container(self) -> Optional[IContainer]:
        return self._container_ref() if self._container_ref is not None else None

    def get(self, name: str) -> Any:
        return self._process_value(super().get(name))

    def get_with_default(self, name: str, default: Any) -> Any:
        if not self.has(name):
            return default
        return self._process_value(self._parameters[name])

    def resolve_with_container(self, name: str) -> Any:
        """Return a parameter with its reference resolved, or None when missing."""
        return self.get_with_default(name, None)

    def bind_service_parameter(self, service_id: str, name: str, value: Any) -> "ContainerBag":
        self._service_parameters.setdefault(service_id, {})[name] = value
        return self

    def get_service_parameters(self, service_id: str) -> Dict[str, Any]:
        return dict(self._service_parameters.get(service_id, {}))

    def set_environment_parameters(self, environment: str, parameters: Dict[str, Any]) -> "ContainerBag":
        self._environment_parameters[environment] = dict(parameters)
        return self

    def get_environment_parameters(self, environment: str) -> Dict[str, Any]:
        return dict(self._environment_parameters.get(environment, {}))

    def load_environment(self, environment: str) -> "ContainerBag":
        """Merge a named environment snapshot into the flat parameters, overwriting existing keys."""
        parameters = self.get_environment_parameters(environment)
        self.set_multiple(parameters)
        logger.debug("Loaded %d parameters for environment [%s]", len(parameters), environment)
        return self

    def import_from(self, bag: IParameterBag, mapping: Optional[Dict[str, str]] = None) -> "ContainerBag":
        """Copy parameters from another bag.

        Args:
            bag: Source bag.
            mapping: Optional source name to target name mapping. When omitted
                every parameter is copied under its own name.
        """
        if not mapping:
            self.set_multiple(bag.all())
            return self

        for source, target in mapping.items():
            if bag.has(source):
                self.set(target, bag.get_with_default(source, None))
        return self

    def export_to(self, bag: IParameterBag, keys: Optional[Iterable[str]] = None) -> "ContainerBag":
        """Copy resolved parameters into another bag, all of them unless ``keys`` is given."""
        for key in keys or self.keys():
            if self.has(key):
                bag.set(key, self.get_with_default(key, None))
        return self

    def get_all_extended(self) -> Dict[str, Any]:
        return {
            "parameters": self.all(),
            "service_parameters": {service_id: dict(params) for service_id, params in self._service_parameters.items()},
            "environment_parameters": {env: dict(params) for env, params in self._environment_parameters.items()},
        }

    def _process_value(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value

        if value.startswith("@") and len(value) > 1:
            service_id = value[1:]
            container = self.get_container()
            if container is not None and container.has(service_id):
                return container.get(service_id)
            return value

        match = _PARAMETER_TOKEN.fullmatch(value)
        if match:
            # Referenced values are returned raw; chains are not followed.
            return self._parameters.get(match.group(1), value)

        return value
