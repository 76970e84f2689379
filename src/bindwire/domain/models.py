from typing import Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class Tag(BaseModel):
    """Annotation marker attaching a tag to a parameter or field.

    Example:
        >>> def new_greeter(greeting: Annotated[str, Tag("english")]) -> Greeter:
        ...     return Greeter(greeting)
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="The tag qualifying the annotated type.")

    def __init__(self, name: str) -> None:
        super().__init__(name=name)

    def __repr__(self) -> str:
        return f"Tag({self.name!r})"


class BindingKey(BaseModel):
    """Identity of a requested dependency.

    Two keys are equal when both the type and the tag are equal. An untagged
    key never matches a tagged one.

    Attributes:
        dependency_type: The requested type.
        tag: Optional tag qualifying the type.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dependency_type: Type = Field(..., description="The requested type.")
    tag: Optional[str] = Field(default=None, description="Optional tag qualifying the type.")

    @property
    def is_tagged(self) -> bool:
        return self.tag is not None

    def __str__(self) -> str:
        type_name = getattr(self.dependency_type, "__qualname__", repr(self.dependency_type))
        if self.tag is None:
            return f"{{type:{type_name}}}"
        return f"{{type:{type_name} tag:{self.tag}}}"


class InjectionPoint(BaseModel):
    """A single parameter or field that receives an injected value.

    Attributes:
        name: Parameter or field name.
        key: The binding key resolved for it.
        positional_only: Whether it must be passed positionally.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    key: BindingKey
    positional_only: bool = False


class InjectorOptions(BaseModel):
    """Configuration of an injector.

    Attributes:
        detect_cycles: Track keys under resolution and report cycles as
            CyclicBinding errors instead of recursing until RecursionError.
            Keys are tracked per thread, so a cycle through memoized
            constructors entered by two threads from opposite ends blocks
            instead of being reported.
    """

    model_config = ConfigDict(frozen=True)

    detect_cycles: bool = Field(
        default=True,
        description="Report dependency cycles met during resolution.",
    )
