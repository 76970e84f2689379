from typing import Any, Callable, Dict, List, Optional, Type

from bindwire.application.memoizer import Memoizer
from bindwire.application.resolver import DependencyResolver
from bindwire.application.circular_detector import format_cycle
from bindwire.domain import BindingKey, ErrorBuilder, IBinding, IInjector, InjectErrorKind, InjectionPoint, IResolvedBinding
from bindwire.domain import introspection


class InstallContext:
    """State of installing one module into one injector.

    Resolved bindings are cached per declaration, so keys sharing a
    declaration (one builder call over several keys, or aliases) share one
    resolved binding and therefore one memoized instance.

    Attributes:
        module: The module being installed.
        injector: The injector receiving the bindings.
        alias_chain: Alias targets currently being followed.
    """

    def __init__(self, module: Any, injector: IInjector) -> None:
        self.module = module
        self.injector = injector
        self.alias_chain: List[BindingKey] = []
        self._resolved: Dict[int, IResolvedBinding] = {}

    def resolve(self, binding: IBinding) -> IResolvedBinding:
        resolved = self._resolved.get(id(binding))
        if resolved is None:
            resolved = binding.resolved_binding(self)
            self._resolved[id(binding)] = resolved
        return resolved


class AliasBinding(IBinding):
    """Fulfils a key with whatever fulfils target_type in the same module."""

    def __init__(self, target_type: Type) -> None:
        self.target_key = BindingKey(dependency_type=target_type)

    def __str__(self) -> str:
        return str(self.target_key)

    def resolved_binding(self, context: InstallContext) -> IResolvedBinding:
        if self.target_key in context.alias_chain:
            cycle = context.alias_chain[context.alias_chain.index(self.target_key) :] + [self.target_key]
            raise (
                ErrorBuilder(InjectErrorKind.CYCLIC_BINDING)
                .add_tag("cycle", format_cycle(cycle))
                .build()
            )
        binding = context.module.binding(self.target_key)
        if binding is None:
            raise ErrorBuilder(InjectErrorKind.NO_FINAL_BINDING).add_tag("binding_key", self.target_key).build()
        context.alias_chain.append(self.target_key)
        try:
            return context.resolve(binding)
        finally:
            context.alias_chain.pop()


class FixedValueBinding(IBinding, IResolvedBinding):
    """Fulfils a key with one already constructed value."""

    def __init__(self, value: Any) -> None:
        self._value = value

    def __str__(self) -> str:
        return repr(self._value)

    def resolved_binding(self, context: InstallContext) -> IResolvedBinding:
        return self

    def validate(self) -> None:
        pass

    def get(self) -> Any:
        return self._value


class ConstructorBinding(IBinding):
    """Fulfils a key by calling a constructor with injected parameters.

    Attributes:
        constructor: The producer callable.
        memoized: Whether the constructor runs at most once per injector.
        points: Injection points of the constructor parameters.
    """

    def __init__(self, constructor: Callable[..., Any], memoized: bool = False) -> None:
        self.constructor = constructor
        self.memoized = memoized
        self.points: List[InjectionPoint] = self._injection_points()

    def _injection_points(self) -> List[InjectionPoint]:
        return introspection.parameter_injection_points(self.constructor)

    def __str__(self) -> str:
        return getattr(self.constructor, "__qualname__", repr(self.constructor))

    def produce(self, resolver: DependencyResolver) -> Any:
        return resolver.invoke(self.constructor, self.points)

    def resolved_binding(self, context: InstallContext) -> IResolvedBinding:
        return ResolvedConstructorBinding(self, context.injector)


class TaggedConstructorBinding(ConstructorBinding):
    """Constructor binding whose single parameter is a record of injected fields."""

    def _injection_points(self) -> List[InjectionPoint]:
        self.record_type = introspection.record_type(self.constructor)
        return introspection.field_injection_points(self.record_type)

    def produce(self, resolver: DependencyResolver) -> Any:
        return resolver.invoke_tagged(self.constructor, self.record_type, self.points)


class ResolvedConstructorBinding(IResolvedBinding):
    """A constructor binding wired to the injector that owns it."""

    def __init__(self, binding: ConstructorBinding, injector: IInjector) -> None:
        self._binding = binding
        self._injector = injector
        self._resolver = DependencyResolver(injector)
        self._memoizer: Optional[Memoizer] = Memoizer() if binding.memoized else None

    def __str__(self) -> str:
        return str(self._binding)

    def validate(self) -> None:
        for point in self._binding.points:
            self._injector.get_binding(point.key)

    def get(self) -> Any:
        if self._memoizer is None:
            return self._binding.produce(self._resolver)
        return self._memoizer.load(lambda: self._binding.produce(self._resolver))


def new_constructor_binding(constructor: Callable[..., Any]) -> IBinding:
    return ConstructorBinding(constructor)


def new_singleton_constructor_binding(constructor: Callable[..., Any]) -> IBinding:
    return ConstructorBinding(constructor, memoized=True)


def new_tagged_constructor_binding(constructor: Callable[[Any], Any]) -> IBinding:
    return TaggedConstructorBinding(constructor)


def new_tagged_singleton_constructor_binding(constructor: Callable[[Any], Any]) -> IBinding:
    return TaggedConstructorBinding(constructor, memoized=True)
