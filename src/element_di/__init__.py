"""
element-di: Dependency injection container with reflective auto-wiring and a
compiler-pass driven container builder.

Public API exports for the element-di package.
"""

# Application exports
from element_di.application.builder import ContainerBuilder
from element_di.application.container import Container
from element_di.application.container_bag import ContainerBag
from element_di.application.contextual_binding import ContextualBindingBuilder
from element_di.application.parameter_bag import ParameterBag

# Domain exports
from element_di.domain.enums import Lifetime, ParameterType
from element_di.domain.exceptions import (
    CircularReferenceError,
    ContainerError,
    DIException,
    NotFoundError,
    ParameterError,
    ParameterNotFoundError,
    ServiceDefinitionError,
)
from element_di.domain.interfaces import CompilerPass
from element_di.domain.models import Parameter, ServiceDefinition

__version__ = "0.1.0"

__all__ = [
    # Container
    "Container",
    "ContainerBuilder",
    "ContextualBindingBuilder",
    "CompilerPass",
    # Parameters
    "ParameterBag",
    "ContainerBag",
    "Parameter",
    # Models
    "ServiceDefinition",
    # Enums
    "Lifetime",
    "ParameterType",
    # Exceptions
    "DIException",
    "ContainerError",
    "NotFoundError",
    "CircularReferenceError",
    "ServiceDefinitionError",
    "ParameterError",
    "ParameterNotFoundError",
]
