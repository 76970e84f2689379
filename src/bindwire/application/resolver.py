from typing import Any, Callable, Dict, List, Tuple, Type

from bindwire.domain import IInjector, InjectionPoint, IResolver


class DependencyResolver(IResolver):
    """Resolves injection points through an injector and applies them.

    Points are resolved depth-first in declaration order; the first failure
    propagates before later points are attempted.
    """

    def __init__(self, injector: IInjector) -> None:
        self._injector = injector

    def resolve_arguments(self, points: List[InjectionPoint]) -> Tuple[List[Any], Dict[str, Any]]:
        """Resolve points into call arguments.

        Returns:
            Positional arguments for positional-only parameters, keyword
            arguments for every other parameter.
        """
        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for point in points:
            value = self._injector.resolve(point.key)
            if point.positional_only:
                args.append(value)
            else:
                kwargs[point.name] = value
        return args, kwargs

    def invoke(self, function: Callable[..., Any], points: List[InjectionPoint]) -> Any:
        """Call function with its injected parameters.

        Example:
            >>> def new_service(repo: Repository) -> Service:
            ...     return Service(repo)
            >>>
            >>> resolver.invoke(new_service, parameter_injection_points(new_service))
        """
        args, kwargs = self.resolve_arguments(points)
        return function(*args, **kwargs)

    def build_record(self, record_type: Type, points: List[InjectionPoint]) -> Any:
        """Instantiate a dataclass record with every field injected."""
        _, kwargs = self.resolve_arguments(points)
        return record_type(**kwargs)

    def invoke_tagged(self, function: Callable[[Any], Any], record_type: Type, points: List[InjectionPoint]) -> Any:
        return function(self.build_record(record_type, points))

    def populate(self, target: Any, points: List[InjectionPoint]) -> None:
        """Assign each injected value to target as soon as it is resolved.

        Fields assigned before a failure keep their new values.
        """
        for point in points:
            setattr(target, point.name, self._injector.resolve(point.key))
