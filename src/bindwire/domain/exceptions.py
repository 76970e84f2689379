from typing import Any, Iterable, List, Optional, Tuple

from bindwire.domain.enums import InjectErrorKind

ERROR_PREFIX = "inject: "


class DIException(Exception):
    """Base exception for DI-related errors."""


class InjectError(DIException):
    """Raised for every declaration, construction and resolution failure.

    The kind identifies the failure programmatically; tags carry diagnostic
    context in the order they were added.

    Attributes:
        kind: The failure kind.
        tags: Ordered list of (key, value) diagnostic pairs.
    """

    def __init__(self, kind: InjectErrorKind, tags: Optional[Iterable[Tuple[str, Any]]] = None) -> None:
        self.kind = kind
        self.tags: List[Tuple[str, Any]] = list(tags or [])
        super().__init__(self._render())

    def get_tag(self, key: str, default: Any = None) -> Any:
        """Return the value of the first tag named key, or default."""
        for tag_key, value in self.tags:
            if tag_key == key:
                return value
        return default

    def _render(self) -> str:
        message = f"{ERROR_PREFIX}{self.kind}"
        if self.tags:
            rendered = " ".join(f"{key}:{_render_value(value)}" for key, value in self.tags)
            message += f" tags{{{rendered}}}"
        return message


class ErrorBuilder:
    """Fluent builder for InjectError.

    Example:
        >>> raise ErrorBuilder(InjectErrorKind.NO_BINDING).add_tag("binding_key", key).build()
    """

    def __init__(self, kind: InjectErrorKind) -> None:
        self._kind = kind
        self._tags: List[Tuple[str, Any]] = []

    def add_tag(self, key: str, value: Any) -> "ErrorBuilder":
        self._tags.append((key, value))
        return self

    def build(self) -> InjectError:
        return InjectError(self._kind, self._tags)


def _render_value(value: Any) -> str:
    if isinstance(value, type):
        return value.__qualname__
    return str(value)
