from typing import Awaitable, Callable, Iterable, Optional, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from bindwire.application import Module
from bindwire.domain import IInjector

T = TypeVar("T")

ModulesFactory = Callable[[Request], Iterable[Module]]


def create_fastapi_dependency(
    injector: IInjector, dependency_type: Type[T], tag: Optional[str] = None
) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves from the injector.

    The resolved instance follows the binding in the injector: a singleton
    constructor yields the same instance on every request, a constructor a
    new one.

    Args:
        injector: The injector to resolve dependencies from.
        dependency_type: The type to resolve when the dependency is called.
        tag: Optional tag of the binding.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> module = Module()
        >>> module.bind(UserRepository).to_singleton_constructor(UserRepository)
        >>> injector = create_injector(module)
        >>>
        >>> get_user_repo = create_fastapi_dependency(injector, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        """Resolve the dependency from the injector."""
        if tag is None:
            return injector.get(dependency_type)
        return injector.get_tagged(tag, dependency_type)

    return dependency


def create_request_dependency(dependency_type: Type[T], tag: Optional[str] = None) -> Callable[[Request], T]:
    """Create a FastAPI dependency that resolves from the request's child injector.

    Requires the ChildInjectorMiddleware to be installed.

    Args:
        dependency_type: The type to resolve from the request injector.
        tag: Optional tag of the binding.

    Returns:
        A callable that resolves from the request injector.

    Example:
        >>> app.add_middleware(ChildInjectorMiddleware, injector=injector)
        >>>
        >>> get_request_context = create_request_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def request_dependency(request: Request) -> T:
        """Resolve from the request's child injector."""
        if not hasattr(request.state, "injector"):
            raise RuntimeError("Request does not have an injector. Did you forget to add ChildInjectorMiddleware?")
        request_injector: IInjector = request.state.injector
        if tag is None:
            return request_injector.get(dependency_type)
        return request_injector.get_tagged(tag, dependency_type)

    return request_dependency


def request_module(request: Request) -> Module:
    """Create a module binding Request to the current request."""
    module = Module()
    module.bind(Request).to_singleton(request)
    return module


class ChildInjectorMiddleware(BaseHTTPMiddleware):
    """Middleware that builds a child injector for each request.

    The child layers request-specific modules over the application injector,
    so request-scoped objects, constructed with singleton constructors in
    those modules, live exactly as long as the request. The current Request
    is always bound.

    The child injector is accessible via `request.state.injector`. It is built
    in the threadpool, so eager singletons of request modules do not block
    the event loop.

    Attributes:
        injector: The application injector children are created from.
        modules_factory: Builds the extra modules for a request.

    Example:
        >>> def request_modules(request: Request) -> List[Module]:
        ...     module = Module()
        ...     module.bind(RequestContext).to_singleton_constructor(RequestContext.from_request)
        ...     return [module]
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(ChildInjectorMiddleware, injector=injector, modules_factory=request_modules)
    """

    def __init__(self, app: FastAPI, injector: IInjector, modules_factory: Optional[ModulesFactory] = None):
        """Initialize the middleware with the application injector.

        Args:
            app: The FastAPI/Starlette application.
            injector: The application injector.
            modules_factory: Optional callable returning the request modules.
        """
        super().__init__(app)
        self.injector = injector
        self.modules_factory = modules_factory

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a child injector for the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        modules = [request_module(request)]
        if self.modules_factory is not None:
            modules.extend(self.modules_factory(request))
        request.state.injector = await run_in_threadpool(self.injector.create_child, *modules)
        return await call_next(request)
