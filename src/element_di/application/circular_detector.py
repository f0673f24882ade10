"""Application layer - Circular dependency detection."""

from typing import List

from element_di.domain import CircularReferenceError


class BuildStack:
    """Tracks the service ids currently under construction.

    A service id must never appear twice in the stack. The owning container
    pushes before descending into a dependency and pops on every exit path,
    so the stack is empty again once the outermost ``make`` returns.

    Attributes:
        _stack: Service ids in the order they started building.
    """

    def __init__(self) -> None:
        self._stack: List[str] = []

    def check(self, service_id: str) -> None:
        """Fail if the service id is already being built.

        Args:
            service_id: The id about to be resolved.

        Raises:
            CircularReferenceError: Carrying the full stack followed by the repeated id.

        Example:
            >>> stack = BuildStack()
            >>> stack.push("a")
            >>> stack.push("b")
            >>> stack.check("a")  # Raises CircularReferenceError(["a", "b", "a"])
        """
        if service_id in self._stack:
            raise CircularReferenceError([*self._stack, service_id])

    def push(self, service_id: str) -> None:
        """Add a service id to the stack.

        Raises:
            CircularReferenceError: If the id is already in the stack.
        """
        self.check(service_id)
        self._stack.append(service_id)

    def pop(self) -> None:
        """Remove the most recently pushed service id."""
        if self._stack:
            self._stack.pop()

    def snapshot(self) -> List[str]:
        """Return a copy of the current stack."""
        return list(self._stack)

    def clear(self) -> None:
        self._stack.clear()

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._stack

    def __len__(self) -> int:
        return len(self._stack)
