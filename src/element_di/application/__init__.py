"""
Application layer - Resolution engine and compilation pipeline.

This layer orchestrates domain objects into a working container.
It depends only on the Domain layer.
"""

from .builder import ContainerBuilder
from .circular_detector import BuildStack
from .container import Container
from .container_bag import ContainerBag
from .contextual_binding import ContextualBindingBuilder
from .lifetime_manager import LifetimeManager
from .parameter_bag import ParameterBag
from .resolver import DependencyResolver, locate_class, service_key
from .value_resolver import ValueResolver

__all__ = [
    "Container",
    "ContainerBuilder",
    "ContextualBindingBuilder",
    "ParameterBag",
    "ContainerBag",
    "DependencyResolver",
    "LifetimeManager",
    "BuildStack",
    "ValueResolver",
    "locate_class",
    "service_key",
]
