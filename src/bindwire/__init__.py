"""
bindwire: Module-based dependency injection with declaration-time type checks.

Public API exports for the bindwire package.
"""

# Application exports
from bindwire.application.injector import Injector, create_injector
from bindwire.application.module import Module
from bindwire.application.override import override

# Domain exports
from bindwire.domain.enums import ConstantKind, InjectErrorKind
from bindwire.domain.exceptions import DIException, InjectError
from bindwire.domain.interfaces import IBuilder, IInjector
from bindwire.domain.models import BindingKey, InjectorOptions, Tag

__version__ = "0.1.0"

__all__ = [
    # Construction
    "Module",
    "Injector",
    "create_injector",
    "override",
    # Interfaces
    "IBuilder",
    "IInjector",
    # Models
    "BindingKey",
    "InjectorOptions",
    "Tag",
    # Enums
    "ConstantKind",
    "InjectErrorKind",
    # Exceptions
    "DIException",
    "InjectError",
]
