import logging
import threading
from typing import Any, Dict, List, Optional

from element_di.application.circular_detector import BuildStack
from element_di.application.contextual_binding import ContextualBindingBuilder
from element_di.application.lifetime_manager import LifetimeManager
from element_di.application.resolver import DependencyResolver, locate_class, service_key
from element_di.domain import Binding, IContainer, NotFoundError, ServiceId

logger = logging.getLogger(__name__)


class Container(IContainer):
    """Main dependency injection container.

    Stores bindings, raw instances, aliases and flat parameters, and resolves
    service ids into fully wired objects. Unbound class ids are auto-wired
    from their constructor type hints.

    Attributes:
        _bindings: Service id to binding.
        _instances: Service id to ready-made object registered via ``instance``.
        _aliases: Alias id to target id.
        _parameters: Flat parameter store.
        _resolved: Service ids that have been built at least once since their last rebinding.
        _resolver: Component responsible for auto-wiring.
        _lifetime_manager: Component caching shared instances.
        _build_stack: Component detecting circular references.
        _lock: Serializes access from concurrent threads.
    """

    def __init__(self) -> None:
        """Initialize the container with empty registries."""
        self._bindings: Dict[str, Binding] = {}
        self._instances: Dict[str, Any] = {}
        self._aliases: Dict[str, str] = {}
        self._parameters: Dict[str, Any] = {}
        self._resolved: Dict[str, bool] = {}
        self._resolver = DependencyResolver()
        self._lifetime_manager = LifetimeManager()
        self._build_stack = BuildStack()
        self._lock = threading.RLock()

    def bind(self, service_id: ServiceId, concrete: Any = None, shared: bool = False) -> "Container":
        """Register a binding, replacing any previous binding or instance for the id.

        Args:
            service_id: The id (or class) to bind.
            concrete: Class, dotted class path, factory or value. Defaults to the id itself.
            shared: Whether the built instance is cached.

        Example:
            >>> container.bind("mailer", SmtpMailer)
            >>> container.bind("clock", lambda c: SystemClock())
            >>> container.bind(Repository, lambda c, params: Repository(**params), shared=True)
        """
        key = service_key(service_id)
        with self._lock:
            self._instances.pop(key, None)
            self._aliases.pop(key, None)
            self._lifetime_manager.forget(key)
            self._bindings[key] = Binding(concrete=service_id if concrete is None else concrete, shared=shared)
            if key in self._resolved:
                self._resolved[key] = False
        logger.debug("Bound [%s] (shared=%s)", key, shared)
        return self

    def singleton(self, service_id: ServiceId, concrete: Any = None) -> "Container":
        return self.bind(service_id, concrete, shared=True)

    def instance(self, service_id: ServiceId, instance: Any) -> "Container":
        """Store a ready-made object, replacing any binding for the id.

        Subsequent ``get``/``make`` calls return this exact object.
        """
        key = service_key(service_id)
        with self._lock:
            self._aliases.pop(key, None)
            self._bindings.pop(key, None)
            self._lifetime_manager.forget(key)
            self._instances[key] = instance
        logger.debug("Registered instance for [%s]", key)
        return self

    def alias(self, alias: ServiceId, target: ServiceId) -> "Container":
        """Make ``alias`` resolve to whatever ``target`` resolves to."""
        with self._lock:
            self._aliases[service_key(alias)] = service_key(target)
        return self

    def has(self, service_id: ServiceId) -> bool:
        return self.bound(service_id) or self.can_make(service_id)

    def bound(self, service_id: ServiceId) -> bool:
        """Return whether the id has a binding, an instance or an alias."""
        key = service_key(service_id)
        return key in self._bindings or key in self._instances or key in self._aliases

    def can_make(self, service_id: ServiceId) -> bool:
        """Return whether the id is bound or names an importable class."""
        if self.bound(service_id) or isinstance(service_id, type):
            return True
        try:
            locate_class(service_id)
        except NotFoundError:
            return False
        return True

    def get(self, service_id: ServiceId) -> Any:
        return self.make(service_id)

    def make(self, service_id: ServiceId, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Resolve a service id into an object.

        Args:
            service_id: The id (or class) to resolve.
            parameters: Named values handed to the factory or used for matching
                constructor parameters.

        Returns:
            The raw instance, the cached shared instance or a freshly built object.

        Raises:
            NotFoundError: If the id or one of its dependencies cannot be resolved.
            CircularReferenceError: If the id is already being built.

        Example:
            >>> container.singleton("db", Database)
            >>> service = container.make(UserService, {"page_size": 50})
        """
        key = service_key(service_id)
        parameters = parameters or {}

        with self._lock:
            self._build_stack.check(key)

            if key in self._instances:
                return self._instances[key]

            self._build_stack.push(key)
            try:
                if key in self._aliases:
                    return self.make(self._aliases[key], parameters)

                binding = self._bindings.get(key)
                concrete = binding.concrete if binding else service_id
                instance = self._lifetime_manager.get_or_create(
                    key,
                    binding is not None and binding.shared,
                    lambda: self.build(concrete, parameters),
                )
                self._resolved[key] = True
                return instance
            finally:
                self._build_stack.pop()

    def build(self, concrete: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Build a concrete value without consulting bindings or caches.

        Classes and dotted class paths are instantiated with their dependencies
        injected, other callables are invoked as factories and anything else is
        returned unchanged.
        """
        parameters = parameters or {}
        if isinstance(concrete, type):
            logger.debug("Auto-wiring [%s]", service_key(concrete))
            return self._resolver.build_class(concrete, self, parameters)
        if isinstance(concrete, str):
            return self._resolver.build_class(locate_class(concrete), self, parameters)
        if callable(concrete):
            return self._resolver.invoke_factory(concrete, self, parameters)
        return concrete

    def call(self, callback: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a callable, injecting the arguments it is not given.

        Args:
            callback: A callable, a ``(object_or_id, method_name)`` pair or an
                ``"id@method"`` string.
            parameters: Named values that take precedence over type-based resolution.

        Returns:
            Whatever the callable returns.

        Example:
            >>> container.call(lambda mailer: mailer.send(), {"mailer": fake})
            >>> container.call("reports.Generator@run", {"month": 3})
        """
        if isinstance(callback, str) and "@" in callback:
            target, method = callback.split("@", 1)
            callback = (target, method)

        if isinstance(callback, (tuple, list)):
            target, method = callback
            if isinstance(target, (str, type)):
                target = self.make(target)
            if not hasattr(target, method):
                raise NotFoundError(f"Method [{method}] does not exist on [{type(target).__name__}]")
            callback = getattr(target, method)

        if not callable(callback):
            raise NotFoundError(f"[{callback!r}] is not callable")

        args, kwargs = self._resolver.resolve_arguments(callback, self, parameters)
        return callback(*args, **kwargs)

    def set_parameter(self, name: str, value: Any) -> "Container":
        self._parameters[name] = value
        return self

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self._parameters.get(name, default)

    def remove_parameter(self, name: str) -> "Container":
        self._parameters.pop(name, None)
        return self

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def get_parameter_names(self) -> List[str]:
        return list(self._parameters)

    def get_bindings(self) -> List[str]:
        return list(self._bindings)

    def get_registry_copy(self) -> Dict[str, Binding]:
        """Get a copy of the binding table for container inheritance."""
        return self._bindings.copy()

    def get_instances_copy(self) -> Dict[str, Any]:
        """Get a copy of the raw instances registered through ``instance``."""
        return self._instances.copy()

    def get_aliases_copy(self) -> Dict[str, str]:
        """Get a copy of the alias table."""
        return self._aliases.copy()

    def resolved(self, service_id: ServiceId) -> bool:
        """Return whether the id has been built since it was last bound."""
        return self._resolved.get(service_key(service_id), False)

    def unbind(self, service_id: ServiceId) -> "Container":
        key = service_key(service_id)
        with self._lock:
            self._bindings.pop(key, None)
            self._instances.pop(key, None)
            self._resolved.pop(key, None)
            self._aliases.pop(key, None)
            self._lifetime_manager.forget(key)
        logger.debug("Unbound [%s]", key)
        return self

    def when(self, concrete: ServiceId) -> ContextualBindingBuilder:
        """Start a contextual binding for ``concrete``.

        Example:
            >>> container.when(ReportController).needs(Storage).give(S3Storage)
        """
        return ContextualBindingBuilder(self, concrete)

    def get_contextual_binding(self, consumer: ServiceId, abstract: ServiceId) -> Optional[Binding]:
        """Look up the binding ``when(consumer).needs(abstract)`` registered, if any.

        Auto-wiring never consults contextual bindings on its own; callers that
        want the override resolve ``ContextualBindingBuilder.binding_key_for(...)``.
        """
        return self._bindings.get(ContextualBindingBuilder.binding_key_for(consumer, abstract))

    def clear(self) -> None:
        """Clear all bindings, instances, parameters and cached objects.

        Useful for testing or resetting the container state.
        """
        with self._lock:
            self._bindings.clear()
            self._instances.clear()
            self._aliases.clear()
            self._parameters.clear()
            self._resolved.clear()
            self._lifetime_manager.clear_cache()
            self._build_stack.clear()
