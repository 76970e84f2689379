"""
FastAPI integration module.

Provides helpers for resolving bindwire dependencies in FastAPI endpoints.
"""

from .integration import (
    ChildInjectorMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
    request_module,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "request_module",
    "ChildInjectorMiddleware",
]
