import logging
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)


class LifetimeManager:
    """Caches instances of shared bindings.

    Only bindings registered as shared are cached, and only after their
    construction succeeded. Non-shared bindings are built on every call.

    Attributes:
        _shared_cache: Service id to built instance.
    """

    def __init__(self) -> None:
        self._shared_cache: Dict[str, Any] = {}

    def get_or_create(self, service_id: str, shared: bool, factory: Callable[[], Any]) -> Any:
        """Return the cached instance or build a new one.

        Args:
            service_id: The id being resolved.
            shared: Whether the binding is shared.
            factory: Builds a new instance. Exceptions it raises propagate unchanged.

        Returns:
            Instance according to lifetime rules:
            - Shared: cached instance, built and cached on first use
            - Not shared: always a fresh instance
        """
        if not shared:
            return factory()

        if service_id not in self._shared_cache:
            instance = factory()
            self._shared_cache[service_id] = instance
            logger.debug("Cached shared instance for [%s]", service_id)
        return self._shared_cache[service_id]

    def has(self, service_id: str) -> bool:
        return service_id in self._shared_cache

    def get(self, service_id: str) -> Any:
        return self._shared_cache[service_id]

    def forget(self, service_id: str) -> None:
        """Drop the cached instance for a service id, if any."""
        self._shared_cache.pop(service_id, None)

    def clear_cache(self) -> None:
        """Clear all cached instances.

        Useful for testing or resetting container state.
        """
        self._shared_cache.clear()
