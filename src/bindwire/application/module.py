from typing import Dict, Iterable, List, Optional, Tuple, Type

from bindwire.application.builder import Builder, NoOpBuilder
from bindwire.domain import BindingKey, ConstantKind, ErrorBuilder, IBinding, IBuilder, InjectError, InjectErrorKind, TypeShape
from bindwire.domain import verifier


class Module:
    """An ordered set of binding declarations, independent of any injector.

    Declaration errors are collected rather than raised, so that every mistake
    in a module is reported together when the module is installed into an
    injector.

    Attributes:
        _bindings: Declared bindings in declaration order.
        _binding_errors: Errors recorded while declaring.
        _eager_keys: Keys resolved while the injector is built.

    Example:
        >>> module = Module()
        >>> module.bind(Greeter).to(EnglishGreeter)
        >>> module.bind(EnglishGreeter).to_singleton(EnglishGreeter("Hello"))
        >>> module.bind_tagged_str("greeting").to_singleton("Salutations")
    """

    def __init__(self) -> None:
        self._bindings: Dict[BindingKey, IBinding] = {}
        self._binding_errors: List[InjectError] = []
        self._eager_keys: List[BindingKey] = []

    def bind(self, *dependency_types: Type) -> IBuilder:
        """Start declaring the untagged keys of dependency_types.

        Interfaces and concrete classes can be bound untagged; primitive
        constants only with a tag.
        """
        return self._bind(dependency_types, None, (TypeShape.INTERFACE, TypeShape.STRUCT))

    def bind_tagged(self, tag: str, *dependency_types: Type) -> IBuilder:
        """Start declaring dependency_types under tag."""
        return self._bind(dependency_types, tag, (TypeShape.INTERFACE, TypeShape.STRUCT, TypeShape.PRIMITIVE))

    def bind_tagged_constant(self, tag: str, kind: ConstantKind) -> IBuilder:
        return self.bind_tagged(tag, kind.python_type)

    def bind_tagged_bool(self, tag: str) -> IBuilder:
        return self.bind_tagged_constant(tag, ConstantKind.BOOL)

    def bind_tagged_int(self, tag: str) -> IBuilder:
        return self.bind_tagged_constant(tag, ConstantKind.INT)

    def bind_tagged_float(self, tag: str) -> IBuilder:
        return self.bind_tagged_constant(tag, ConstantKind.FLOAT)

    def bind_tagged_complex(self, tag: str) -> IBuilder:
        return self.bind_tagged_constant(tag, ConstantKind.COMPLEX)

    def bind_tagged_str(self, tag: str) -> IBuilder:
        return self.bind_tagged_constant(tag, ConstantKind.STR)

    def bind_tagged_bytes(self, tag: str) -> IBuilder:
        return self.bind_tagged_constant(tag, ConstantKind.BYTES)

    def _bind(
        self,
        dependency_types: Tuple[Type, ...],
        tag: Optional[str],
        supported: Tuple[TypeShape, ...],
    ) -> IBuilder:
        if tag is not None and not isinstance(tag, str):
            self.add_binding_error(ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("tag", repr(tag)).build())
            return NoOpBuilder()
        if tag == "":
            self.add_binding_error(ErrorBuilder(InjectErrorKind.TAG_EMPTY).build())
            return NoOpBuilder()
        if not dependency_types:
            self.add_binding_error(ErrorBuilder(InjectErrorKind.NIL).build())
            return NoOpBuilder()
        binding_keys = []
        for dependency_type in dependency_types:
            if dependency_type is None:
                self.add_binding_error(ErrorBuilder(InjectErrorKind.NIL).build())
                return NoOpBuilder()
            if verifier.type_shape(dependency_type) not in supported:
                self.add_binding_error(
                    ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("bind_type", dependency_type).build()
                )
                return NoOpBuilder()
            binding_keys.append(BindingKey(dependency_type=dependency_type, tag=tag))
        return Builder(self, binding_keys)

    def binding(self, key: BindingKey) -> Optional[IBinding]:
        return self._bindings.get(key)

    def set_binding(self, key: BindingKey, binding: IBinding) -> bool:
        """Install binding for key, recording ALREADY_BOUND on a duplicate.

        Returns:
            Whether the binding was installed.
        """
        found = self._bindings.get(key)
        if found is not None:
            self.add_binding_error(
                ErrorBuilder(InjectErrorKind.ALREADY_BOUND)
                .add_tag("binding_key", key)
                .add_tag("found_binding", found)
                .build()
            )
            return False
        self._bindings[key] = binding
        return True

    def add_binding_error(self, error: InjectError) -> None:
        self._binding_errors.append(error)

    def add_eager_keys(self, keys: Iterable[BindingKey]) -> None:
        self._eager_keys.extend(keys)

    @property
    def bindings(self) -> Dict[BindingKey, IBinding]:
        """Copy of the declared bindings, in declaration order."""
        return dict(self._bindings)

    @property
    def binding_errors(self) -> List[InjectError]:
        return list(self._binding_errors)

    @property
    def eager_keys(self) -> List[BindingKey]:
        return list(self._eager_keys)

    def __str__(self) -> str:
        entries = " ".join(f"{key}:{binding}" for key, binding in self._bindings.items())
        return f"module{{{entries}}}"
