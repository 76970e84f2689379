"""
Domain layer - Core binding model.

This layer contains the binding keys, error model and the pure type verification
rules. It has no dependencies on other layers.
"""

from .enums import ConstantKind, InjectErrorKind, TypeShape
from .exceptions import DIException, ErrorBuilder, InjectError
from .interfaces import IBinding, IBuilder, IInjector, IResolvedBinding, IResolver
from .models import BindingKey, InjectionPoint, InjectorOptions, Tag

__all__ = [
    # Enums
    "ConstantKind",
    "InjectErrorKind",
    "TypeShape",
    # Exceptions
    "DIException",
    "ErrorBuilder",
    "InjectError",
    # Interfaces
    "IBinding",
    "IBuilder",
    "IInjector",
    "IResolvedBinding",
    "IResolver",
    # Models
    "BindingKey",
    "InjectionPoint",
    "InjectorOptions",
    "Tag",
]
