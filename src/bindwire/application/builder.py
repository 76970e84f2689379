import logging
from typing import TYPE_CHECKING, Any, Callable, List, Type

from bindwire.application.bindings import (
    AliasBinding,
    FixedValueBinding,
    new_constructor_binding,
    new_singleton_constructor_binding,
    new_tagged_constructor_binding,
    new_tagged_singleton_constructor_binding,
)
from bindwire.domain import BindingKey, ErrorBuilder, IBinding, IBuilder, InjectError, InjectErrorKind
from bindwire.domain import verifier

if TYPE_CHECKING:
    from bindwire.application.module import Module

logger = logging.getLogger(__name__)


class NoOpBuilder(IBuilder):
    """Builder returned when Module.bind already recorded an error."""

    def to(self, target_type: Type) -> None:
        pass

    def to_singleton(self, singleton: Any) -> None:
        pass

    def to_constructor(self, constructor: Callable[..., Any]) -> None:
        pass

    def to_singleton_constructor(self, constructor: Callable[..., Any]) -> None:
        pass

    def to_eager_singleton_constructor(self, constructor: Callable[..., Any]) -> None:
        pass

    def to_tagged_constructor(self, constructor: Callable[[Any], Any]) -> None:
        pass

    def to_tagged_singleton_constructor(self, constructor: Callable[[Any], Any]) -> None:
        pass

    def to_tagged_eager_singleton_constructor(self, constructor: Callable[[Any], Any]) -> None:
        pass


class Builder(IBuilder):
    """Declares how the bound keys of one module are fulfilled.

    Each method verifies the candidate against every bound key and installs a
    single binding for all of them. Failures are recorded on the module and
    reported when the module is installed into an injector.

    Attributes:
        _module: The module receiving the binding.
        _binding_keys: The keys being bound.

    Example:
        >>> module = Module()
        >>> module.bind(Greeter).to_singleton(EnglishGreeter("Hello"))
        >>> module.bind(Service).to_singleton_constructor(new_service)
    """

    def __init__(self, module: "Module", binding_keys: List[BindingKey]) -> None:
        self._module = module
        self._binding_keys = binding_keys

    def to(self, target_type: Type) -> None:
        self._bind(target_type, verifier.verify_alias_target, AliasBinding)

    def to_singleton(self, singleton: Any) -> None:
        self._bind(singleton, verifier.verify_singleton, FixedValueBinding)

    def to_constructor(self, constructor: Callable[..., Any]) -> None:
        self._bind(constructor, verifier.verify_constructor_shape, new_constructor_binding)

    def to_singleton_constructor(self, constructor: Callable[..., Any]) -> None:
        self._bind(constructor, verifier.verify_constructor_shape, new_singleton_constructor_binding)

    def to_eager_singleton_constructor(self, constructor: Callable[..., Any]) -> None:
        if self._bind(constructor, verifier.verify_constructor_shape, new_singleton_constructor_binding):
            self._module.add_eager_keys(self._binding_keys)

    def to_tagged_constructor(self, constructor: Callable[[Any], Any]) -> None:
        self._bind(constructor, verifier.verify_tagged_constructor_shape, new_tagged_constructor_binding)

    def to_tagged_singleton_constructor(self, constructor: Callable[[Any], Any]) -> None:
        self._bind(constructor, verifier.verify_tagged_constructor_shape, new_tagged_singleton_constructor_binding)

    def to_tagged_eager_singleton_constructor(self, constructor: Callable[[Any], Any]) -> None:
        if self._bind(constructor, verifier.verify_tagged_constructor_shape, new_tagged_singleton_constructor_binding):
            self._module.add_eager_keys(self._binding_keys)

    def _bind(
        self,
        candidate: Any,
        verify: Callable[[Type, Any], None],
        new_binding: Callable[[Any], IBinding],
    ) -> bool:
        """Verify candidate against every key and install one binding for all.

        Returns:
            Whether the binding was installed.
        """
        if candidate is None:
            error = ErrorBuilder(InjectErrorKind.NIL)
            for key in self._binding_keys:
                error.add_tag("binding_key", key)
            self._module.add_binding_error(error.build())
            return False
        try:
            for key in self._binding_keys:
                verify(key.dependency_type, candidate)
            binding = new_binding(candidate)
        except InjectError as error:
            self._module.add_binding_error(error)
            return False
        installed = True
        for key in self._binding_keys:
            installed = self._module.set_binding(key, binding) and installed
        logger.debug("Declared %s for %s", binding, ", ".join(str(key) for key in self._binding_keys))
        return installed
