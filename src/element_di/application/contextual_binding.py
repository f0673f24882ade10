from typing import TYPE_CHECKING, Any, Optional

from element_di.application.resolver import service_key
from element_di.domain import ContainerError, ServiceId

if TYPE_CHECKING:
    from element_di.application.container import Container


class ContextualBindingBuilder:
    """Fluent helper that registers an override for one consumer class.

    The override is stored in the container's ordinary binding table under the
    composite key ``"<consumer>::<abstract>"``.

    Example:
        >>> container.when(PhotoController).needs(Filesystem).give(LocalFilesystem)
        >>> container.when("reports.Exporter").needs("storage").give_singleton(S3Storage)
    """

    SEPARATOR = "::"

    def __init__(self, container: "Container", concrete: ServiceId) -> None:
        self._container = container
        self._concrete = service_key(concrete)
        self._needs: Optional[str] = None

    @classmethod
    def binding_key_for(cls, consumer: ServiceId, abstract: ServiceId) -> str:
        return f"{service_key(consumer)}{cls.SEPARATOR}{service_key(abstract)}"

    @property
    def concrete(self) -> str:
        return self._concrete

    @property
    def pending_abstract(self) -> Optional[str]:
        return self._needs

    def needs(self, abstract: ServiceId) -> "ContextualBindingBuilder":
        """Name the abstraction being overridden. A later call replaces an earlier one."""
        self._needs = service_key(abstract)
        return self

    def give(self, implementation: Any) -> "Container":
        return self.give_tagged(implementation)

    def give_tagged(self, implementation: Any) -> "Container":
        """Commit a non-shared contextual binding and return the container.

        Raises:
            ContainerError: If ``needs`` has not been called yet.
        """
        return self._container.bind(self._binding_key(), implementation)

    def give_singleton(self, implementation: Any) -> "Container":
        """Commit a shared contextual binding and return the container.

        Raises:
            ContainerError: If ``needs`` has not been called yet.
        """
        return self._container.singleton(self._binding_key(), implementation)

    def _binding_key(self) -> str:
        if self._needs is None:
            raise ContainerError("Contextual binding needs must be defined before giving implementation.")
        return f"{self._concrete}{self.SEPARATOR}{self._needs}"
