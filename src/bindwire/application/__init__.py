"""
Application layer - Declaration and resolution.

This layer builds modules, installs them into injectors and resolves
dependencies. It depends only on the Domain layer.
"""

from .builder import Builder, NoOpBuilder
from .circular_detector import CircularDependencyDetector
from .injector import Injector, create_injector
from .memoizer import Memoizer
from .module import Module
from .override import OverrideBuilder, override
from .resolver import DependencyResolver

__all__ = [
    "Builder",
    "CircularDependencyDetector",
    "DependencyResolver",
    "Injector",
    "Memoizer",
    "Module",
    "NoOpBuilder",
    "OverrideBuilder",
    "create_injector",
    "override",
]
