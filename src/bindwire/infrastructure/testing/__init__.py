"""
Testing utilities module.

Provides helpers for substituting test doubles into bindwire object graphs.
"""

from .utilities import TestInjector, create_mock_injector, mock_module

__all__ = [
    "TestInjector",
    "create_mock_injector",
    "mock_module",
]
