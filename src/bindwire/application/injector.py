import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar

from bindwire.application.bindings import FixedValueBinding, InstallContext
from bindwire.application.circular_detector import CircularDependencyDetector
from bindwire.application.module import Module
from bindwire.application.resolver import DependencyResolver
from bindwire.domain import (
    BindingKey,
    ConstantKind,
    ErrorBuilder,
    IInjector,
    InjectErrorKind,
    InjectorOptions,
    IResolvedBinding,
)
from bindwire.domain import introspection, verifier

T = TypeVar("T")

logger = logging.getLogger(__name__)

SELF_KEY = BindingKey(dependency_type=IInjector)


class Injector(IInjector):
    """A validated, immutable object graph built from modules.

    The binding map is written only while the injector is built; afterwards
    every lookup is a read, so one injector can be shared between threads.
    Every injector binds IInjector to itself.

    Attributes:
        _options: Injector configuration.
        _parent: Injector whose bindings this one layers over, if any.
        _bindings: Binding keys mapped to their resolved bindings.
        _resolver: Resolves injection points against this injector.
        _circular_detector: Tracks keys under resolution per thread.
    """

    def __init__(self, options: Optional[InjectorOptions] = None, parent: Optional["Injector"] = None) -> None:
        """Create an empty injector. Use create_injector() or create_child() instead."""
        if options is None:
            options = parent.options if parent is not None else InjectorOptions()
        self._options = options
        self._parent = parent
        self._bindings: Dict[BindingKey, IResolvedBinding] = {SELF_KEY: FixedValueBinding(self)}
        self._resolver = DependencyResolver(self)
        self._circular_detector = CircularDependencyDetector()

    @property
    def options(self) -> InjectorOptions:
        return self._options

    def _install(self, modules: Sequence[Module]) -> None:
        """Install modules in order, validate the graph and resolve eager keys.

        Raises:
            InjectError: On the first module or graph error.
        """
        eager_keys: List[BindingKey] = []
        for module in modules:
            self._install_module(module)
            eager_keys.extend(module.eager_keys)
        self._validate()
        for key in eager_keys:
            logger.debug("Resolving eager binding %s", key)
            self.resolve(key)

    def _install_module(self, module: Module) -> None:
        if not isinstance(module, Module):
            raise ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("module", repr(module)).build()
        binding_errors = module.binding_errors
        if binding_errors:
            error = ErrorBuilder(InjectErrorKind.AGGREGATE_DECLARATION_ERRORS)
            for index, binding_error in enumerate(binding_errors, start=1):
                error.add_tag(str(index), binding_error)
            raise error.build()

        context = InstallContext(module, self)
        bindings = module.bindings
        for key, binding in bindings.items():
            found = self._find_binding(key)
            if found is not None:
                raise (
                    ErrorBuilder(InjectErrorKind.ALREADY_BOUND)
                    .add_tag("binding_key", key)
                    .add_tag("found_binding", found)
                    .build()
                )
            self._bindings[key] = context.resolve(binding)
        logger.debug("Installed module with %d bindings", len(bindings))

    def _validate(self) -> None:
        for resolved_binding in self._bindings.values():
            resolved_binding.validate()

    def _find_binding(self, key: BindingKey) -> Optional[IResolvedBinding]:
        found = self._bindings.get(key)
        if found is None and self._parent is not None:
            return self._parent._find_binding(key)
        return found

    def get_binding(self, key: BindingKey) -> IResolvedBinding:
        found = self._find_binding(key)
        if found is None:
            raise ErrorBuilder(InjectErrorKind.NO_BINDING).add_tag("binding_key", key).build()
        return found

    def resolve(self, key: BindingKey) -> Any:
        binding = self.get_binding(key)
        if not self._options.detect_cycles:
            return binding.get()

        self._circular_detector.push(key)
        try:
            return binding.get()
        finally:
            self._circular_detector.pop()

    def get(self, dependency_type: Type[T]) -> T:
        """Return the value bound to dependency_type.

        Example:
            >>> greeter = injector.get(Greeter)
        """
        return self.resolve(_lookup_key(dependency_type, None))

    def get_tagged(self, tag: str, dependency_type: Type[T]) -> T:
        """Return the value bound to dependency_type under tag.

        Example:
            >>> greeter = injector.get_tagged("english", Greeter)
        """
        if tag is None:
            raise ErrorBuilder(InjectErrorKind.NIL).add_tag("dependency_type", dependency_type).build()
        return self.resolve(_lookup_key(dependency_type, tag))

    def get_tagged_constant(self, tag: str, kind: ConstantKind) -> Any:
        """Return the constant bound under tag, asserting its kind.

        Raises:
            TypeError: If the bound value is not of the requested kind.
        """
        value = self.get_tagged(tag, kind.python_type)
        if not isinstance(value, kind.python_type) or (kind is not ConstantKind.BOOL and isinstance(value, bool)):
            raise TypeError(f"value bound under tag {tag!r} is {type(value).__name__}, not {kind}")
        return value

    def get_tagged_bool(self, tag: str) -> bool:
        return self.get_tagged_constant(tag, ConstantKind.BOOL)

    def get_tagged_int(self, tag: str) -> int:
        return self.get_tagged_constant(tag, ConstantKind.INT)

    def get_tagged_float(self, tag: str) -> float:
        return self.get_tagged_constant(tag, ConstantKind.FLOAT)

    def get_tagged_complex(self, tag: str) -> complex:
        return self.get_tagged_constant(tag, ConstantKind.COMPLEX)

    def get_tagged_str(self, tag: str) -> str:
        return self.get_tagged_constant(tag, ConstantKind.STR)

    def get_tagged_bytes(self, tag: str) -> bytes:
        return self.get_tagged_constant(tag, ConstantKind.BYTES)

    def call(self, function: Callable[..., T]) -> T:
        """Inject the parameters of function, call it and return its result.

        Example:
            >>> def greet(greeter: Greeter) -> str:
            ...     return greeter.hello()
            >>>
            >>> injector.call(greet)
        """
        if function is None:
            raise ErrorBuilder(InjectErrorKind.NIL).build()
        points = verifier.verify_function(function)
        return self._resolver.invoke(function, points)

    def call_tagged(self, function: Callable[[Any], T]) -> T:
        """Build the record parameter of function, call it and return its result.

        Example:
            >>> @dataclass
            ... class Greeters:
            ...     english: Annotated[Greeter, Tag("english")]
            ...     german: Annotated[Greeter, Tag("german")]
            >>>
            >>> def greet_all(greeters: Greeters) -> List[str]:
            ...     return [greeters.english.hello(), greeters.german.hello()]
            >>>
            >>> injector.call_tagged(greet_all)
        """
        if function is None:
            raise ErrorBuilder(InjectErrorKind.NIL).build()
        points = verifier.verify_tagged_function(function)
        return self._resolver.invoke_tagged(function, introspection.record_type(function), points)

    def populate(self, target: Any) -> None:
        """Assign an injected value to every annotated field of target.

        Fields are assigned in declaration order; a failure leaves the fields
        assigned before it in place.
        """
        if target is None:
            raise ErrorBuilder(InjectErrorKind.NIL).build()
        if inspect.isclass(target):
            raise ErrorBuilder(InjectErrorKind.NOT_SUPPORTED_YET).add_tag("populate_type", target).build()
        points = introspection.field_injection_points(type(target))
        verifier.verify_injection_points(points)
        self._resolver.populate(target, points)

    def create_child(self, *modules: Module) -> "Injector":
        """Build an injector that adds the bindings of modules to this one.

        The child resolves its own keys and every key of this injector. Keys
        already bound here cannot be bound again in the child. This injector is
        left untouched.

        Raises:
            InjectError: ALREADY_BOUND on a redeclared key, or any
                construction error.
        """
        child = Injector(parent=self)
        child._install(modules)
        logger.debug("Created child injector with %d modules", len(modules))
        return child

    def __str__(self) -> str:
        entries = " ".join(f"{key}:{binding}" for key, binding in self._bindings.items())
        return f"injector{{{entries}}}"


def _lookup_key(dependency_type: Any, tag: Optional[str]) -> BindingKey:
    if dependency_type is None:
        raise ErrorBuilder(InjectErrorKind.NIL).build()
    if tag == "":
        raise ErrorBuilder(InjectErrorKind.TAG_EMPTY).add_tag("dependency_type", dependency_type).build()
    if not inspect.isclass(dependency_type):
        raise ErrorBuilder(InjectErrorKind.TYPE_UNAVAILABLE).add_tag("dependency_type", dependency_type).build()
    return BindingKey(dependency_type=dependency_type, tag=tag)


def create_injector(*modules: Module, options: Optional[InjectorOptions] = None) -> Injector:
    """Build an injector from modules, installed in order.

    Construction is all or nothing: if any module carries declaration errors,
    collides with a key of an earlier module, has a dangling alias, or leaves a
    constructor input unbound, an InjectError is raised and no injector is
    returned. Eager singletons are resolved before returning.

    Example:
        >>> injector = create_injector(infrastructure_module, service_module)
        >>> service = injector.get(Service)
    """
    injector = Injector(options=options)
    injector._install(modules)
    logger.debug("Created injector with %d modules", len(modules))
    return injector
