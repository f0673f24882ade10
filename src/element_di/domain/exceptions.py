from typing import Any, List, Optional


class DIException(Exception):
    """Base exception for DI-related errors."""


class ContainerError(DIException):
    """Raised for generic container-level failures.

    This occurs when:
    - A contextual binding is committed before its target abstraction is named.
    - A container operation is used in an invalid order.
    """


class NotFoundError(ContainerError):
    """Raised when a service cannot be located or built.

    This occurs when:
    - The requested id is neither bound nor importable as a class.
    - The class is abstract or a protocol.
    - A constructor parameter has no value, no usable type hint, no default and is not nullable.
    """


class CircularReferenceError(ContainerError):
    """Raised when a circular dependency is detected.

    Attributes:
        path: Service ids in discovery order, ending with the repeated id.
    """

    def __init__(self, path: List[str], message: Optional[str] = None) -> None:
        self.path = list(path)
        if not message:
            message = f"Circular reference detected for service dependency: {' -> '.join(self.path)}"
        super().__init__(message)


class ServiceDefinitionError(ContainerError):
    """Raised when a service definition is missing or malformed.

    Attributes:
        service_id: The id of the offending definition.
    """

    def __init__(self, service_id: str, message: Optional[str] = None) -> None:
        self.service_id = service_id
        if not message:
            message = f"Service definition error for service [{service_id}]"
        super().__init__(message)


class ParameterError(DIException, ValueError):
    """Raised when a parameter fails coercion or validation.

    Attributes:
        parameter_name: Name of the offending parameter.
        parameter_value: The offending value, when known.
    """

    def __init__(self, parameter_name: str, message: Optional[str] = None, value: Any = None) -> None:
        self.parameter_name = parameter_name
        self.parameter_value = value
        if not message:
            message = f"Parameter validation failed for parameter [{parameter_name}]"
        super().__init__(message)


class ParameterNotFoundError(ParameterError, NotFoundError):
    """Raised when a parameter bag is asked for a key it does not hold."""

    def __init__(self, parameter_name: str) -> None:
        super().__init__(parameter_name, f"Parameter [{parameter_name}] not found")
