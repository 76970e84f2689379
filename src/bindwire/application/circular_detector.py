"""Application layer - Circular dependency detection."""

import threading
from typing import List

from bindwire.domain import BindingKey, ErrorBuilder, InjectErrorKind


class CircularDependencyDetector:
    """Detects circular dependencies during resolution.

    Uses thread-local storage to track the binding keys currently being
    resolved. When a key appears twice in the stack, a cycle is reported.

    Attributes:
        _local: Thread-local storage for resolution stacks.
    """

    def __init__(self) -> None:
        """Initialize the circular dependency detector with thread-local storage."""
        self._local = threading.local()

    def _get_stack(self) -> List[BindingKey]:
        """Get the current thread's resolution stack.

        Returns:
            The resolution stack for the current thread.
        """
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, key: BindingKey) -> None:
        """Add a binding key to the resolution stack.

        Args:
            key: The key being resolved.

        Raises:
            InjectError: CYCLIC_BINDING if the key is already in the stack.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push(key_a)
            >>> detector.push(key_b)
            >>> detector.push(key_a)  # Raises InjectError(CYCLIC_BINDING)
        """
        stack = self._get_stack()

        if key in stack:
            cycle = stack[stack.index(key) :] + [key]
            raise ErrorBuilder(InjectErrorKind.CYCLIC_BINDING).add_tag("cycle", format_cycle(cycle)).build()

        stack.append(key)

    def pop(self) -> None:
        """Remove the last key from the resolution stack.

        Called once resolution of a key has finished, successfully or not.
        """
        stack = self._get_stack()
        if stack:
            stack.pop()

    def clear(self) -> None:
        """Clear the current thread's resolution stack."""
        if hasattr(self._local, "stack"):
            self._local.stack.clear()


def format_cycle(cycle: List[BindingKey]) -> str:
    return " -> ".join(str(key) for key in cycle)
