"""Declaration-time type verification.

Every function here is a pure predicate or check over types. Checks raise
InjectError; the builder records them on the owning module.
"""

import inspect
from typing import Any, Callable, FrozenSet, Iterable, List, Type

from bindwire.domain import introspection
from bindwire.domain.enums import ConstantKind, InjectErrorKind, TypeShape
from bindwire.domain.exceptions import ErrorBuilder
from bindwire.domain.models import BindingKey, InjectionPoint

_PROTOCOL_INTERNALS: FrozenSet[str] = frozenset(
    {
        "__abstractmethods__",
        "__annotations__",
        "__annotate__",
        "__annotate_func__",
        "__annotations_cache__",
        "__callable_proto_members_only__",
        "__dict__",
        "__doc__",
        "__firstlineno__",
        "__init__",
        "__init_subclass__",
        "__module__",
        "__new__",
        "__non_callable_proto_members__",
        "__orig_bases__",
        "__parameters__",
        "__protocol_attrs__",
        "__qualname__",
        "__slots__",
        "__static_attributes__",
        "__subclasshook__",
        "__type_params__",
        "__weakref__",
        "_is_protocol",
        "_is_runtime_protocol",
    }
)


def is_protocol(cls: Any) -> bool:
    return inspect.isclass(cls) and bool(cls.__dict__.get("_is_protocol", False))


def is_interface(cls: Any) -> bool:
    return inspect.isclass(cls) and (is_protocol(cls) or inspect.isabstract(cls))


def type_shape(cls: Any) -> TypeShape:
    """Classify a type for binding purposes."""
    if not inspect.isclass(cls):
        return TypeShape.UNSUPPORTED
    if ConstantKind.for_type(cls) is not None:
        return TypeShape.PRIMITIVE
    if is_interface(cls):
        return TypeShape.INTERFACE
    if cls.__module__ == "builtins":
        return TypeShape.UNSUPPORTED
    return TypeShape.STRUCT


def protocol_members(protocol: Type) -> List[str]:
    """Return the member names a class must provide to satisfy protocol."""
    members = []
    for base in protocol.__mro__:
        if base is object or base.__name__ in ("Protocol", "Generic"):
            continue
        names = list(base.__dict__) + list(inspect.get_annotations(base))
        for name in names:
            if name in _PROTOCOL_INTERNALS or name.startswith("_abc_") or name in members:
                continue
            members.append(name)
    return members


def _declares(cls: Type, name: str) -> bool:
    if hasattr(cls, name):
        return True
    return any(name in inspect.get_annotations(base) for base in cls.__mro__)


def implements(candidate: Any, interface: Type) -> bool:
    """Whether candidate satisfies interface.

    Abstract classes are satisfied nominally (subclassing or ABC.register);
    Protocols are satisfied structurally.
    """
    if not inspect.isclass(candidate):
        return False
    if interface in candidate.__mro__:
        return True
    if is_protocol(interface):
        return all(_declares(candidate, name) for name in protocol_members(interface))
    return issubclass(candidate, interface)


def is_assignable(candidate: Any, target: Type) -> bool:
    if not inspect.isclass(candidate):
        return False
    if candidate is bool and target is not bool:
        return False
    return issubclass(candidate, target)


def verify_value_assignable(key_type: Type, candidate_type: Any) -> None:
    """Check that values of candidate_type may fulfil key_type.

    Raises:
        InjectError: DOES_NOT_IMPLEMENT, NOT_ASSIGNABLE or NOT_SUPPORTED_YET.
    """
    shape = type_shape(key_type)
    if shape is TypeShape.INTERFACE:
        if not implements(candidate_type, key_type):
            raise (
                ErrorBuilder(InjectErrorKind.DOES_NOT_IMPLEMENT)
                .add_tag("binding_key_type", key_type)
                .add_tag("binding_type", candidate_type)
                .build()
            )
    elif shape in (TypeShape.STRUCT, TypeShape.PRIMITIVE):
        if not is_assignable(candidate_type, key_type):
            raise (
                ErrorBuilder(InjectErrorKind.NOT_ASSIGNABLE)
                .add_tag("binding_key_type", key_type)
                .add_tag("binding_type", candidate_type)
                .build()
            )
    elif shape is TypeShape.UNSUPPORTED:
        raise ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("binding_key_type", key_type).build()
    else:
        raise AssertionError(f"unhandled type shape {shape}")


def verify_singleton(key_type: Type, singleton: Any) -> None:
    """Check a fixed value against key_type.

    The value's ``__class__`` is used, so mocks created with ``spec=`` pass.
    """
    verify_value_assignable(key_type, singleton.__class__)


def verify_alias_target(key_type: Type, target_type: Any) -> None:
    """Check that key_type may be aliased to target_type.

    Raises:
        InjectError: TYPE_UNAVAILABLE if target_type is not a class, otherwise
            as verify_value_assignable.
    """
    if not inspect.isclass(target_type):
        raise ErrorBuilder(InjectErrorKind.TYPE_UNAVAILABLE).add_tag("to_type", target_type).build()
    if type_shape(target_type) not in (TypeShape.INTERFACE, TypeShape.STRUCT):
        raise ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("to_type", target_type).build()
    if type_shape(key_type) is TypeShape.PRIMITIVE:
        raise ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("binding_key_type", key_type).build()
    verify_value_assignable(key_type, target_type)


def verify_injectable(key: BindingKey) -> None:
    """Check that a parameter or field key can be injected.

    Untagged keys must be interfaces or structs; tagged keys may also be
    primitive constants.
    """
    if key.tag == "":
        raise ErrorBuilder(InjectErrorKind.TAG_EMPTY).add_tag("parameter_type", key.dependency_type).build()
    allowed = [TypeShape.INTERFACE, TypeShape.STRUCT]
    if key.is_tagged:
        allowed.append(TypeShape.PRIMITIVE)
    if type_shape(key.dependency_type) not in allowed:
        raise ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("parameter_type", key.dependency_type).build()


def verify_injection_points(points: Iterable[InjectionPoint]) -> None:
    for point in points:
        verify_injectable(point.key)


def verify_function(function: Any) -> List[InjectionPoint]:
    """Check that function can be called with injected parameters.

    Returns:
        The injection points of function.

    Raises:
        InjectError: NOT_FUNCTION, TYPE_UNAVAILABLE or NOT_SUPPORTED_YET.
    """
    if not callable(function):
        raise ErrorBuilder(InjectErrorKind.NOT_FUNCTION).add_tag("function", function).build()
    points = introspection.parameter_injection_points(function)
    verify_injection_points(points)
    return points


def verify_tagged_function(function: Any) -> List[InjectionPoint]:
    """Check that function takes one dataclass record of injectable fields.

    Returns:
        The injection points of the record fields.
    """
    record = introspection.record_type(function)
    points = introspection.field_injection_points(record)
    verify_injection_points(points)
    return points


def verify_constructor_return(key_type: Type, constructor: Callable[..., Any]) -> None:
    produced = introspection.return_type(constructor)
    if not inspect.isclass(produced) or produced is type(None):
        raise (
            ErrorBuilder(InjectErrorKind.CONSTRUCTOR_RETURN_VALUES_INVALID)
            .add_tag("constructor", constructor)
            .add_tag("return_type", produced)
            .build()
        )
    verify_value_assignable(key_type, produced)


def verify_constructor_shape(key_type: Type, constructor: Any) -> None:
    """Check a positional-parameter constructor for key_type."""
    verify_function(constructor)
    verify_constructor_return(key_type, constructor)


def verify_tagged_constructor_shape(key_type: Type, constructor: Any) -> None:
    """Check a record-parameter constructor for key_type."""
    verify_tagged_function(constructor)
    verify_constructor_return(key_type, constructor)
