import inspect
import re
import types
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from pydantic import ImportString, TypeAdapter, ValidationError

from element_di.domain import FactoryCallable, NotFoundError, ServiceId

if TYPE_CHECKING:
    from element_di.domain import IContainer

_IMPORT_ADAPTER = TypeAdapter(ImportString)

_CLASS_PATH = re.compile(r"^[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*[.:][A-Za-z_]\w*$")

_UNION_TYPES = (Union, getattr(types, "UnionType", Union))


def service_key(service_id: ServiceId) -> str:
    """Normalize a service id to the string used as a binding key.

    Classes map to their dotted path ``"<module>.<qualname>"``; strings are
    used verbatim.
    """
    if isinstance(service_id, type):
        return f"{service_id.__module__}.{service_id.__qualname__}"
    if isinstance(service_id, str):
        return service_id
    raise TypeError(f"Service id must be a string or a class, got {type(service_id).__name__}")


def locate_class(path: str) -> type:
    """Import a class from a dotted path such as ``"package.module.ClassName"``.

    Only ``module.Class`` and ``module:Class`` paths are imported; anything
    else fails without touching the import system.

    Raises:
        NotFoundError: If the path cannot be imported or does not name a class.
    """
    if not _CLASS_PATH.match(path):
        raise NotFoundError(f"Class [{path}] does not exist")
    try:
        target = _IMPORT_ADAPTER.validate_python(path)
    except ValidationError as e:
        raise NotFoundError(f"Class [{path}] does not exist") from e
    if not isinstance(target, type):
        raise NotFoundError(f"Class [{path}] does not exist")
    return target


def _is_none(annotation: Any) -> bool:
    return annotation is None or annotation is type(None)


class DependencyResolver:
    """Resolves dependencies using signature introspection and type hints.

    Uses Python's inspect module to analyze constructor and callable
    signatures. Each parameter is resolved, in declaration order, from:
    an explicit named parameter, a non-builtin type hint resolved through
    the container, the declared default, ``None`` for nullable parameters.
    """

    def build_class(self, cls: type, container: "IContainer", parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Instantiate a class, injecting its constructor dependencies.

        Args:
            cls: The class to instantiate.
            container: The container to resolve dependencies from.
            parameters: Named values that take precedence over type-based resolution.

        Returns:
            Instance with all dependencies injected.

        Raises:
            NotFoundError: If the class is abstract or a parameter cannot be resolved.

        Example:
            >>> class UserService:
            ...     def __init__(self, db: DatabaseConnection, limit: int = 10):
            ...         self.db = db
            ...         self.limit = limit
            >>>
            >>> resolver = DependencyResolver()
            >>> instance = resolver.build_class(UserService, container, {"limit": 5})
        """
        if not self.is_instantiable(cls):
            raise NotFoundError(f"Class [{service_key(cls)}] is not instantiable")

        if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
            return cls()

        args, kwargs = self.resolve_arguments(cls, container, parameters, hints_source=cls.__init__)
        return cls(*args, **kwargs)

    def resolve_arguments(
        self,
        func: Callable,
        container: "IContainer",
        parameters: Optional[Dict[str, Any]] = None,
        hints_source: Optional[Callable] = None,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        """Resolve the arguments for a call to ``func``.

        Args:
            func: The callable (or class) whose signature is inspected.
            container: The container to resolve typed dependencies from.
            parameters: Named values used verbatim when a parameter name matches.
            hints_source: Object to read type hints from, defaults to ``func``.

        Returns:
            Positional arguments (for positional-only parameters) and keyword arguments.

        Raises:
            NotFoundError: If a parameter cannot be resolved.
        """
        parameters = parameters or {}
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as e:
            raise NotFoundError(f"Cannot inspect the signature of [{getattr(func, '__qualname__', func)}]") from e

        type_hints = self._get_type_hints(hints_source or func)

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for name, param in signature.parameters.items():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            value = self.resolve_parameter(param, type_hints.get(name, param.annotation), container, parameters)
            if param.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[name] = value
        return args, kwargs

    def resolve_parameter(
        self,
        param: inspect.Parameter,
        annotation: Any,
        container: "IContainer",
        parameters: Dict[str, Any],
    ) -> Any:
        """Resolve a single formal parameter.

        Raises:
            NotFoundError: If no explicit value, injectable type, default or nullability applies.
        """
        if param.name in parameters:
            return parameters[param.name]

        dependency_type = self.injectable_type(annotation)
        if dependency_type is not None:
            return container.make(dependency_type)

        if param.default is not inspect.Parameter.empty:
            return param.default

        if self.is_nullable(annotation):
            return None

        raise NotFoundError(f"Unable to resolve parameter [{param.name}]")

    def invoke_factory(self, factory: FactoryCallable, container: "IContainer", parameters: Dict[str, Any]) -> Any:
        """Invoke a factory with ``(container, parameters)``.

        Factories declaring a single positional parameter receive the container
        alone, and factories without parameters are called bare.
        """
        try:
            signature = inspect.signature(factory)
        except (TypeError, ValueError):
            return factory(container, parameters)

        positional = 0
        for param in signature.parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                return factory(container, parameters)
            if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
                positional += 1

        if positional >= 2:
            return factory(container, parameters)
        if positional == 1:
            return factory(container)
        return factory()

    @staticmethod
    def is_instantiable(cls: type) -> bool:
        return not inspect.isabstract(cls) and not getattr(cls, "_is_protocol", False)

    @staticmethod
    def injectable_type(annotation: Any) -> Optional[type]:
        """Return the class to resolve through the container for an annotation.

        Builtin types, ``typing`` generics and unresolved forward references
        are not injectable. ``Optional[X]`` yields ``X``.
        """
        if annotation is inspect.Parameter.empty or annotation is Any or isinstance(annotation, str):
            return None

        if get_origin(annotation) in _UNION_TYPES:
            candidates = [arg for arg in get_args(annotation) if not _is_none(arg)]
            if len(candidates) != 1:
                return None
            annotation = candidates[0]

        if isinstance(annotation, type) and annotation.__module__ not in ("builtins", "typing"):
            return annotation
        return None

    @staticmethod
    def is_nullable(annotation: Any) -> bool:
        """Return True for unannotated parameters and annotations that admit ``None``."""
        if annotation is inspect.Parameter.empty or _is_none(annotation) or annotation is Any:
            return True
        if get_origin(annotation) in _UNION_TYPES:
            return any(_is_none(arg) for arg in get_args(annotation))
        return False

    @staticmethod
    def _get_type_hints(source: Any) -> Dict[str, Any]:
        try:
            return get_type_hints(source)
        except Exception:
            # Unresolvable forward references fall back to the raw annotations.
            return {}
