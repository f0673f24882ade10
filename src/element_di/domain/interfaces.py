from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union

if TYPE_CHECKING:
    from element_di.application.builder import ContainerBuilder
    from element_di.application.contextual_binding import ContextualBindingBuilder

ServiceId = Union[str, type]


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def bind(self, service_id: ServiceId, concrete: Any = None, shared: bool = False) -> "IContainer":
        """Register a binding for a service id.

        Args:
            service_id: The id (or class) to bind.
            concrete: Class, dotted class path, factory ``(container, parameters)`` or value.
                Defaults to the id itself.
            shared: Whether the built instance is cached.
        """

    @abstractmethod
    def singleton(self, service_id: ServiceId, concrete: Any = None) -> "IContainer":
        """Register a shared binding for a service id."""

    @abstractmethod
    def instance(self, service_id: ServiceId, instance: Any) -> "IContainer":
        """Store a ready-made object under a service id."""

    @abstractmethod
    def has(self, service_id: ServiceId) -> bool:
        """Return whether the id is bound or can be built as a class."""

    @abstractmethod
    def get(self, service_id: ServiceId) -> Any:
        """Resolve a service id without explicit parameters.

        Raises:
            NotFoundError: If the id cannot be resolved.
        """

    @abstractmethod
    def make(self, service_id: ServiceId, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Resolve a service id, passing named parameters to its constructor or factory.

        Raises:
            NotFoundError: If the id or one of its dependencies cannot be resolved.
            CircularReferenceError: If resolution loops back onto a service under construction.
        """

    @abstractmethod
    def call(self, callback: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a callable, injecting the arguments it does not receive explicitly."""

    @abstractmethod
    def set_parameter(self, name: str, value: Any) -> "IContainer":
        """Store a flat configuration parameter."""

    @abstractmethod
    def get_parameter(self, name: str, default: Any = None) -> Any:
        """Return a parameter value, or ``default`` when it is not set."""

    @abstractmethod
    def has_parameter(self, name: str) -> bool:
        """Return whether a parameter is set."""

    @abstractmethod
    def when(self, concrete: ServiceId) -> "ContextualBindingBuilder":
        """Start a contextual binding for a consumer class."""

    @abstractmethod
    def unbind(self, service_id: ServiceId) -> "IContainer":
        """Remove a binding together with any cached or raw instance."""

    @abstractmethod
    def get_bindings(self) -> List[str]:
        """Return the ids that currently have a binding."""

    @abstractmethod
    def get_parameter_names(self) -> List[str]:
        """Return the names of all parameters."""


class IParameterBag(ABC):
    """Abstract interface for flat parameter storage."""

    @abstractmethod
    def set(self, name: str, value: Any) -> "IParameterBag":
        """Store a parameter."""

    @abstractmethod
    def get(self, name: str) -> Any:
        """Return a parameter.

        Raises:
            ParameterNotFoundError: If the parameter does not exist.
        """

    @abstractmethod
    def get_with_default(self, name: str, default: Any) -> Any:
        """Return a parameter, or ``default`` when it does not exist."""

    @abstractmethod
    def has(self, name: str) -> bool:
        """Return whether a parameter exists."""

    @abstractmethod
    def remove(self, name: str) -> "IParameterBag":
        """Remove a parameter if present."""

    @abstractmethod
    def all(self) -> Dict[str, Any]:
        """Return a copy of every raw parameter."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return all parameter names."""

    @abstractmethod
    def clear(self) -> "IParameterBag":
        """Remove every parameter."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of parameters."""

    @abstractmethod
    def set_multiple(self, parameters: Dict[str, Any], replace: bool = True) -> "IParameterBag":
        """Merge several parameters at once."""


class CompilerPass(ABC):
    """Base class for compiler passes run by ``ContainerBuilder.build``.

    Plain callables taking ``(container, builder)`` are accepted as well;
    subclasses implement ``process`` instead.
    """

    @abstractmethod
    def process(self, container: IContainer, builder: "ContainerBuilder") -> None:
        """Inspect or mutate the container and builder before the build completes."""

    def __call__(self, container: IContainer, builder: "ContainerBuilder") -> None:
        self.process(container, builder)


FactoryCallable = Callable[..., Any]
