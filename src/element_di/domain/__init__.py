"""
Domain layer - Core models, contracts and errors.

This layer contains the fundamental data model for service resolution.
It has no dependencies on other layers.
"""

from .enums import Lifetime, ParameterType
from .exceptions import (
    CircularReferenceError,
    ContainerError,
    DIException,
    NotFoundError,
    ParameterError,
    ParameterNotFoundError,
    ServiceDefinitionError,
)
from .interfaces import CompilerPass, FactoryCallable, IContainer, IParameterBag, ServiceId
from .models import (
    Binding,
    BuildConfig,
    CompilerPassEntry,
    ContainerConfig,
    Parameter,
    ServiceConfig,
    ServiceDefinition,
)

__all__ = [
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
    # Interfaces
    "IContainer",
    "IParameterBag",
    "CompilerPass",
    "FactoryCallable",
    "ServiceId",
    # Models
    "Binding",
    "BuildConfig",
    "CompilerPassEntry",
    "ContainerConfig",
    "Parameter",
    "ServiceConfig",
    "ServiceDefinition",
]
