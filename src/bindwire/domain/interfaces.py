from abc import ABC, abstractmethod
from typing import Any, Callable, List, Type, TypeVar

from bindwire.domain.models import BindingKey, InjectionPoint

T = TypeVar("T")


class IResolvedBinding(ABC):
    """A binding installed into an injector, ready to produce values."""

    @abstractmethod
    def validate(self) -> None:
        """Check that every input key of this binding is bound.

        Raises:
            InjectError: NO_BINDING for the first missing input key.
        """

    @abstractmethod
    def get(self) -> Any:
        """Produce the value of this binding."""


class IBinding(ABC):
    """A declaration of how to fulfil a binding key, owned by one module."""

    @abstractmethod
    def resolved_binding(self, context: Any) -> IResolvedBinding:
        """Resolve this declaration against the injector being built.

        Args:
            context: The install context of the module owning this binding.
        """


class IBuilder(ABC):
    """Declaration surface returned by Module.bind and Module.bind_tagged.

    Every method records failures on the owning module instead of raising.
    """

    @abstractmethod
    def to(self, target_type: Type) -> None:
        """Alias the bound keys to whatever fulfils target_type."""

    @abstractmethod
    def to_singleton(self, singleton: Any) -> None:
        """Bind the keys to a fixed value."""

    @abstractmethod
    def to_constructor(self, constructor: Callable[..., Any]) -> None:
        """Bind the keys to a constructor invoked on every resolution."""

    @abstractmethod
    def to_singleton_constructor(self, constructor: Callable[..., Any]) -> None:
        """Bind the keys to a constructor invoked at most once."""

    @abstractmethod
    def to_eager_singleton_constructor(self, constructor: Callable[..., Any]) -> None:
        """Like to_singleton_constructor, resolved while the injector is built."""

    @abstractmethod
    def to_tagged_constructor(self, constructor: Callable[[Any], Any]) -> None:
        """Bind the keys to a record-parameter constructor."""

    @abstractmethod
    def to_tagged_singleton_constructor(self, constructor: Callable[[Any], Any]) -> None:
        """Bind the keys to a record-parameter constructor invoked at most once."""

    @abstractmethod
    def to_tagged_eager_singleton_constructor(self, constructor: Callable[[Any], Any]) -> None:
        """Like to_tagged_singleton_constructor, resolved while the injector is built."""


class IResolver(ABC):
    """Abstract interface for resolving injection points into values."""

    @abstractmethod
    def invoke(self, function: Callable[..., Any], points: List[InjectionPoint]) -> Any:
        """Resolve the points in order and call function with them."""

    @abstractmethod
    def invoke_tagged(self, function: Callable[[Any], Any], record_type: Type, points: List[InjectionPoint]) -> Any:
        """Resolve the points into a record and call function with it."""

    @abstractmethod
    def populate(self, target: Any, points: List[InjectionPoint]) -> None:
        """Resolve the points and assign them as attributes of target."""


class IInjector(ABC):
    """Abstract interface of a built, immutable object graph."""

    @abstractmethod
    def get(self, dependency_type: Type[T]) -> T:
        """Return the value bound to the untagged key of dependency_type."""

    @abstractmethod
    def get_tagged(self, tag: str, dependency_type: Type[T]) -> T:
        """Return the value bound to dependency_type under tag."""

    @abstractmethod
    def call(self, function: Callable[..., T]) -> T:
        """Inject the parameters of function, call it and return its result."""

    @abstractmethod
    def call_tagged(self, function: Callable[[Any], T]) -> T:
        """Inject the record parameter of function, call it and return its result."""

    @abstractmethod
    def populate(self, target: Any) -> None:
        """Assign an injected value to every annotated field of target."""

    @abstractmethod
    def resolve(self, key: BindingKey) -> Any:
        """Resolve a binding key; the primitive behind every lookup."""

    @abstractmethod
    def get_binding(self, key: BindingKey) -> IResolvedBinding:
        """Return the resolved binding for key.

        Raises:
            InjectError: NO_BINDING when the key is not bound.
        """

    @abstractmethod
    def create_child(self, *modules: Any) -> "IInjector":
        """Build an injector layering the bindings of modules over this one."""
