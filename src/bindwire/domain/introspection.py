"""Reading injection points out of callables and record types."""

import dataclasses
import functools
import inspect
from typing import Annotated, Any, Callable, ClassVar, Dict, List, Optional, Tuple, Type, get_args, get_origin, get_type_hints

from bindwire.domain.enums import InjectErrorKind
from bindwire.domain.exceptions import ErrorBuilder
from bindwire.domain.models import BindingKey, InjectionPoint, Tag


def split_annotation(annotation: Any) -> Tuple[Any, Optional[str]]:
    """Split an annotation into its type and optional tag.

    ``Annotated[T, Tag("x")]`` yields ``(T, "x")``; the last Tag wins when
    several are given. Any other annotation yields ``(annotation, None)``.
    """
    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        tags = [item for item in metadata if isinstance(item, Tag)]
        return base, tags[-1].name if tags else None
    return annotation, None


def type_hints(obj: Any) -> Dict[str, Any]:
    """Evaluate the annotations of a callable or class, keeping Annotated extras.

    Raises:
        InjectError: TYPE_UNAVAILABLE if the annotations cannot be evaluated.
    """
    target = _annotated_target(obj)
    try:
        if inspect.isclass(target):
            return _class_type_hints(target)
        return get_type_hints(target, include_extras=True)
    except (NameError, TypeError, AttributeError) as error:
        raise (
            ErrorBuilder(InjectErrorKind.TYPE_UNAVAILABLE).add_tag("object", obj).add_tag("reason", error).build()
        ) from error


def _annotated_target(obj: Any) -> Any:
    """Return the object whose annotations describe calling obj.

    Partials are unwrapped to the function they bind; for callable instances
    the annotations live on ``type(obj).__call__``.
    """
    if isinstance(obj, functools.partial):
        return _annotated_target(obj.func)
    if inspect.isclass(obj) or inspect.isroutine(obj) or not callable(obj):
        return obj
    return type(obj).__call__


def _class_type_hints(cls: Type) -> Dict[str, Any]:
    # Dataclasses and pydantic models expose their constructor parameters as
    # class annotations; plain classes declare them on __init__.
    if dataclasses.is_dataclass(cls) or hasattr(cls, "model_fields"):
        return get_type_hints(cls, include_extras=True)
    if cls.__init__ is object.__init__:
        return {}
    return get_type_hints(cls.__init__, include_extras=True)


def signature(function: Callable[..., Any]) -> inspect.Signature:
    try:
        return inspect.signature(function)
    except (TypeError, ValueError) as error:
        raise (
            ErrorBuilder(InjectErrorKind.TYPE_UNAVAILABLE)
            .add_tag("function", function)
            .add_tag("reason", error)
            .build()
        ) from error


def return_type(function: Callable[..., Any]) -> Any:
    """Return the type a constructor produces.

    A class produces itself; a function, callable instance or partial
    produces its annotated return type.

    Raises:
        InjectError: TYPE_UNAVAILABLE if a function has no return annotation.
    """
    target = _annotated_target(function)
    if inspect.isclass(target):
        return target
    hints = type_hints(function)
    if "return" not in hints:
        raise ErrorBuilder(InjectErrorKind.TYPE_UNAVAILABLE).add_tag("function", function).build()
    produced, _ = split_annotation(hints["return"])
    return produced


def parameter_injection_points(function: Callable[..., Any]) -> List[InjectionPoint]:
    """Return one injection point per injectable parameter of function, in order.

    Parameters with default values and ``*args``/``**kwargs`` are left alone.

    Raises:
        InjectError: TYPE_UNAVAILABLE if an injectable parameter lacks a type hint.
    """
    hints = type_hints(function)
    points = []
    for name, param in signature(function).parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.default is not inspect.Parameter.empty:
            continue
        if name not in hints:
            raise (
                ErrorBuilder(InjectErrorKind.TYPE_UNAVAILABLE)
                .add_tag("function", function)
                .add_tag("parameter", name)
                .build()
            )
        dependency_type, tag = split_annotation(hints[name])
        points.append(
            InjectionPoint(
                name=name,
                key=_binding_key(dependency_type, tag, function),
                positional_only=param.kind is inspect.Parameter.POSITIONAL_ONLY,
            )
        )
    return points


def record_type(function: Callable[[Any], Any]) -> Type:
    """Return the dataclass record a tagged function takes as its only parameter.

    Raises:
        InjectError: NOT_FUNCTION or TAGGED_PARAMETERS_INVALID.
    """
    if not callable(function):
        raise ErrorBuilder(InjectErrorKind.NOT_FUNCTION).add_tag("function", function).build()
    parameters = list(signature(function).parameters.values())
    if len(parameters) != 1 or parameters[0].kind in (
        inspect.Parameter.VAR_POSITIONAL,
        inspect.Parameter.VAR_KEYWORD,
    ):
        raise ErrorBuilder(InjectErrorKind.TAGGED_PARAMETERS_INVALID).add_tag("function", function).build()
    annotation = type_hints(function).get(parameters[0].name)
    record, _ = split_annotation(annotation)
    if not (inspect.isclass(record) and dataclasses.is_dataclass(record)):
        raise ErrorBuilder(InjectErrorKind.TAGGED_PARAMETERS_INVALID).add_tag("function", function).build()
    return record


def field_injection_points(cls: Type) -> List[InjectionPoint]:
    """Return one injection point per annotated field of cls, in declaration order.

    For dataclasses only fields accepted by ``__init__`` count. ClassVar
    annotations are skipped.
    """
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError, AttributeError) as error:
        raise (
            ErrorBuilder(InjectErrorKind.TYPE_UNAVAILABLE).add_tag("object", cls).add_tag("reason", error).build()
        ) from error
    if dataclasses.is_dataclass(cls):
        names = [field.name for field in dataclasses.fields(cls) if field.init]
    else:
        names = list(hints)
    points = []
    for name in names:
        annotation = hints[name]
        if get_origin(annotation) is ClassVar or annotation is ClassVar:
            continue
        dependency_type, tag = split_annotation(annotation)
        points.append(InjectionPoint(name=name, key=_binding_key(dependency_type, tag, cls)))
    return points


def _binding_key(dependency_type: Any, tag: Optional[str], owner: Any) -> BindingKey:
    if not inspect.isclass(dependency_type):
        raise (
            ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET)
            .add_tag("parameter_type", dependency_type)
            .add_tag("owner", owner)
            .build()
        )
    return BindingKey(dependency_type=dependency_type, tag=tag)
