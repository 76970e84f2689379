from enum import Enum
from typing import Dict, Optional, Type


class InjectErrorKind(str, Enum):
    """Closed set of failure kinds reported by the injector.

    The value is the human-readable description rendered into error messages.
    """

    NIL = "Parameter is None"
    TYPE_UNAVAILABLE = "No type information available"
    NOT_SUPPORTED_YET = "Binding type not supported yet"
    NOT_ASSIGNABLE = "Binding not assignable"
    DOES_NOT_IMPLEMENT = "Binding does not implement the bound interface"
    CONSTRUCTOR_RETURN_VALUES_INVALID = "Constructor must return a single value of the bound type"
    NOT_FUNCTION = "Not a function"
    TAGGED_PARAMETERS_INVALID = "Tagged function must take exactly one dataclass record parameter"
    NO_BINDING = "No binding for binding key"
    NO_FINAL_BINDING = "No final binding for binding key"
    ALREADY_BOUND = "Already found a binding for this binding key"
    TAG_EMPTY = "Tag empty"
    AGGREGATE_DECLARATION_ERRORS = "Errors with bindings"
    CYCLIC_BINDING = "Cyclic binding"

    def __str__(self) -> str:
        return self.value


class TypeShape(str, Enum):
    """Shape of a type as far as binding is concerned.

    Attributes:
        INTERFACE: Abstract class or Protocol, fulfilled by implementations.
        STRUCT: Concrete class, fulfilled by itself or a subclass.
        PRIMITIVE: Constant kind, only bindable with a tag.
        UNSUPPORTED: Anything else.
    """

    INTERFACE = "interface"
    STRUCT = "struct"
    PRIMITIVE = "primitive"
    UNSUPPORTED = "unsupported"

    def __str__(self) -> str:
        return self.value


class ConstantKind(str, Enum):
    """Primitive constant kinds that can be bound under a tag."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    COMPLEX = "complex"
    STR = "str"
    BYTES = "bytes"

    def __str__(self) -> str:
        return self.value

    @property
    def python_type(self) -> Type:
        return _CONSTANT_KIND_TYPES[self]

    @classmethod
    def for_type(cls, python_type: object) -> Optional["ConstantKind"]:
        """Return the constant kind for an exact primitive type, if any."""
        for kind, kind_type in _CONSTANT_KIND_TYPES.items():
            if python_type is kind_type:
                return kind
        return None


_CONSTANT_KIND_TYPES: Dict[ConstantKind, Type] = {
    ConstantKind.BOOL: bool,
    ConstantKind.INT: int,
    ConstantKind.FLOAT: float,
    ConstantKind.COMPLEX: complex,
    ConstantKind.STR: str,
    ConstantKind.BYTES: bytes,
}
