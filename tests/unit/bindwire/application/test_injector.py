"""Unit tests for Injector and create_injector."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from typing import Annotated

import pytest

from bindwire.application.injector import Injector, create_injector
from bindwire.application.module import Module
from bindwire.domain import BindingKey, IInjector, InjectError, InjectErrorKind, InjectorOptions, Tag


class IGreeter(ABC):
    @abstractmethod
    def greet(self) -> str:
        pass


class Greeter(IGreeter):
    def __init__(self, greeting: Annotated[str, Tag("greeting")]):
        self.greeting = greeting

    def greet(self) -> str:
        return self.greeting


class Chicken:
    pass


class Egg:
    pass


class Counter:
    instances = 0

    def __init__(self):
        Counter.instances += 1


@pytest.fixture(autouse=True)
def reset_counter():
    Counter.instances = 0


@pytest.fixture
def greeter_module():
    module = Module()
    module.bind_tagged_str("greeting").to_singleton("hello")
    module.bind(IGreeter).to_constructor(Greeter)
    return module


def kind_of(exc_info):
    return exc_info.value.kind


class TestCreateInjector:
    """Test cases for create_injector."""

    def test_empty_injector(self):
        """Test that an injector without modules only binds itself."""
        injector = create_injector()

        assert isinstance(injector, Injector)
        assert injector.get(IInjector) is injector

    def test_default_options(self):
        """Test that cycle detection is on by default."""
        assert create_injector().options == InjectorOptions()

    def test_declaration_errors_aggregated(self):
        """Test that module errors are reported together, in order."""
        module = Module()
        module.bind(str)
        module.bind_tagged("", IGreeter)

        with pytest.raises(InjectError) as exc_info:
            create_injector(module)

        assert kind_of(exc_info) is InjectErrorKind.AGGREGATE_DECLARATION_ERRORS
        assert [error.kind for _, error in exc_info.value.tags] == [
            InjectErrorKind.NOT_SUPPORTED_YET,
            InjectErrorKind.TAG_EMPTY,
        ]
        assert [key for key, _ in exc_info.value.tags] == ["1", "2"]

    def test_key_bound_in_two_modules(self):
        """Test that a key declared by two modules is ALREADY_BOUND."""
        first = Module()
        first.bind(Counter).to_constructor(Counter)
        second = Module()
        second.bind(Counter).to_constructor(Counter)

        with pytest.raises(InjectError) as exc_info:
            create_injector(first, second)

        assert kind_of(exc_info) is InjectErrorKind.ALREADY_BOUND

    def test_binding_injector_type_is_already_bound(self):
        """Test that IInjector cannot be rebound."""
        module = Module()
        module.bind(IInjector).to_singleton(create_injector())

        with pytest.raises(InjectError) as exc_info:
            create_injector(module)

        assert kind_of(exc_info) is InjectErrorKind.ALREADY_BOUND

    def test_missing_constructor_input(self):
        """Test that an unbound constructor input fails validation."""
        module = Module()
        module.bind(IGreeter).to_constructor(Greeter)

        with pytest.raises(InjectError) as exc_info:
            create_injector(module)

        assert kind_of(exc_info) is InjectErrorKind.NO_BINDING
        assert exc_info.value.get_tag("binding_key") == BindingKey(dependency_type=str, tag="greeting")

    def test_inputs_from_other_modules(self):
        """Test that constructor inputs may come from any installed module."""
        constants = Module()
        constants.bind_tagged_str("greeting").to_singleton("hello")
        services = Module()
        services.bind(IGreeter).to_constructor(Greeter)

        injector = create_injector(services, constants)

        assert injector.get(IGreeter).greet() == "hello"

    def test_non_module_argument(self):
        """Test that only modules can be installed."""
        with pytest.raises(InjectError) as exc_info:
            create_injector("module")

        assert kind_of(exc_info) is InjectErrorKind.NOT_SUPPORTED_YET

    def test_eager_singleton_resolved_at_construction(self):
        """Test that eager singletons are built before create_injector returns."""
        module = Module()
        module.bind(Counter).to_eager_singleton_constructor(Counter)

        injector = create_injector(module)
        assert Counter.instances == 1

        injector.get(Counter)
        assert Counter.instances == 1

    def test_eager_failure_aborts_construction(self):
        """Test that a failing eager constructor fails create_injector."""

        def new_counter() -> Counter:
            raise RuntimeError("boom")

        module = Module()
        module.bind(Counter).to_eager_singleton_constructor(new_counter)

        with pytest.raises(RuntimeError, match="boom"):
            create_injector(module)


class TestInjectorGet:
    """Test cases for get and get_tagged."""

    def test_get(self, greeter_module):
        """Test that get resolves the untagged key."""
        injector = create_injector(greeter_module)
        assert injector.get(IGreeter).greet() == "hello"

    def test_constructor_runs_per_get(self):
        """Test that plain constructors produce fresh values."""
        module = Module()
        module.bind(Counter).to_constructor(Counter)
        injector = create_injector(module)

        assert injector.get(Counter) is not injector.get(Counter)
        assert Counter.instances == 2

    def test_singleton_constructor_runs_once(self):
        """Test that memoized constructors produce one value."""
        module = Module()
        module.bind(Counter).to_singleton_constructor(Counter)
        injector = create_injector(module)

        assert injector.get(Counter) is injector.get(Counter)
        assert Counter.instances == 1

    def test_singleton_constructor_is_lazy(self):
        """Test that non-eager singletons are built on first use."""
        module = Module()
        module.bind(Counter).to_singleton_constructor(Counter)

        create_injector(module)

        assert Counter.instances == 0

    def test_get_missing(self):
        """Test that an unbound type is NO_BINDING."""
        with pytest.raises(InjectError) as exc_info:
            create_injector().get(Counter)

        assert kind_of(exc_info) is InjectErrorKind.NO_BINDING

    def test_get_none(self):
        """Test that get(None) is NIL."""
        with pytest.raises(InjectError) as exc_info:
            create_injector().get(None)

        assert kind_of(exc_info) is InjectErrorKind.NIL

    def test_get_non_class(self):
        """Test that a non-class lookup is TYPE_UNAVAILABLE."""
        with pytest.raises(InjectError) as exc_info:
            create_injector().get("IGreeter")

        assert kind_of(exc_info) is InjectErrorKind.TYPE_UNAVAILABLE

    def test_get_tagged(self, greeter_module):
        """Test that get_tagged resolves the tagged key only."""
        injector = create_injector(greeter_module)

        assert injector.get_tagged("greeting", str) == "hello"
        with pytest.raises(InjectError) as exc_info:
            injector.get_tagged("other", str)
        assert kind_of(exc_info) is InjectErrorKind.NO_BINDING

    def test_get_tagged_empty_and_none_tag(self):
        """Test that empty and None tags are rejected."""
        injector = create_injector()

        with pytest.raises(InjectError) as empty:
            injector.get_tagged("", str)
        with pytest.raises(InjectError) as none:
            injector.get_tagged(None, str)

        assert kind_of(empty) is InjectErrorKind.TAG_EMPTY
        assert kind_of(none) is InjectErrorKind.NIL

    def test_typed_constant_getters(self):
        """Test the typed getters for tagged constants."""
        module = Module()
        module.bind_tagged_bool("debug").to_singleton(True)
        module.bind_tagged_int("port").to_singleton(8080)
        module.bind_tagged_float("ratio").to_singleton(0.5)
        module.bind_tagged_complex("phase").to_singleton(1 + 2j)
        module.bind_tagged_str("name").to_singleton("svc")
        module.bind_tagged_bytes("secret").to_singleton(b"\x00")
        injector = create_injector(module)

        assert injector.get_tagged_bool("debug") is True
        assert injector.get_tagged_int("port") == 8080
        assert injector.get_tagged_float("ratio") == 0.5
        assert injector.get_tagged_complex("phase") == 1 + 2j
        assert injector.get_tagged_str("name") == "svc"
        assert injector.get_tagged_bytes("secret") == b"\x00"

    def test_typed_getter_wrong_kind(self):
        """Test that a typed getter for an unbound kind fails."""
        module = Module()
        module.bind_tagged_str("port").to_singleton("8080")
        injector = create_injector(module)

        with pytest.raises(InjectError) as exc_info:
            injector.get_tagged_int("port")

        assert kind_of(exc_info) is InjectErrorKind.NO_BINDING

    def test_constructor_error_propagates(self):
        """Test that a constructor exception reaches get unchanged."""

        class ConnectionFailed(Exception):
            pass

        def new_counter() -> Counter:
            raise ConnectionFailed()

        module = Module()
        module.bind(Counter).to_constructor(new_counter)
        injector = create_injector(module)

        with pytest.raises(ConnectionFailed):
            injector.get(Counter)


class TestInjectorCall:
    """Test cases for call, call_tagged and populate."""

    def test_call(self, greeter_module):
        """Test that call injects parameters and returns the result."""
        injector = create_injector(greeter_module)

        def greet(greeter: IGreeter) -> str:
            return greeter.greet()

        assert injector.call(greet) == "hello"

    def test_call_callable_instance(self, greeter_module):
        """Test that call injects the __call__ parameters of an instance."""

        class Greet:
            def __call__(self, greeter: IGreeter) -> str:
                return greeter.greet()

        assert create_injector(greeter_module).call(Greet()) == "hello"

    def test_partial_constructor(self):
        """Test that a partial can be bound as a constructor."""
        module = Module()
        module.bind(IGreeter).to_constructor(partial(Greeter, greeting="hi"))

        assert create_injector(module).get(IGreeter).greet() == "hi"

    def test_call_none(self):
        """Test that call(None) is NIL."""
        with pytest.raises(InjectError) as exc_info:
            create_injector().call(None)

        assert kind_of(exc_info) is InjectErrorKind.NIL

    def test_call_not_function(self):
        """Test that calling a non-callable is NOT_FUNCTION."""
        with pytest.raises(InjectError) as exc_info:
            create_injector().call(42)

        assert kind_of(exc_info) is InjectErrorKind.NOT_FUNCTION

    def test_call_missing_parameter(self):
        """Test that an unbound parameter is NO_BINDING and the function is not called."""
        called = []

        def handler(counter: Counter) -> None:
            called.append(counter)

        with pytest.raises(InjectError) as exc_info:
            create_injector().call(handler)

        assert kind_of(exc_info) is InjectErrorKind.NO_BINDING
        assert called == []

    def test_call_tagged(self, greeter_module):
        """Test that call_tagged passes a populated record."""

        @dataclass
        class Inputs:
            greeter: IGreeter
            greeting: Annotated[str, Tag("greeting")]

        def handler(inputs: Inputs) -> str:
            return f"{inputs.greeter.greet()} / {inputs.greeting}"

        assert create_injector(greeter_module).call_tagged(handler) == "hello / hello"

    def test_call_tagged_invalid_parameters(self):
        """Test that call_tagged needs exactly one record parameter."""

        def handler(greeter: IGreeter) -> None:
            pass

        with pytest.raises(InjectError) as exc_info:
            create_injector().call_tagged(handler)

        assert kind_of(exc_info) is InjectErrorKind.TAGGED_PARAMETERS_INVALID

    def test_populate(self, greeter_module):
        """Test that populate assigns every annotated field."""

        @dataclass
        class Handler:
            greeter: IGreeter = None
            greeting: Annotated[str, Tag("greeting")] = None

        handler = Handler()
        create_injector(greeter_module).populate(handler)

        assert handler.greeter.greet() == "hello"
        assert handler.greeting == "hello"

    def test_populate_class(self):
        """Test that populate refuses a class."""

        @dataclass
        class Handler:
            counter: Counter = None

        with pytest.raises(InjectError) as exc_info:
            create_injector().populate(Handler)

        assert kind_of(exc_info) is InjectErrorKind.NOT_SUPPORTED_YET

    def test_populate_none(self):
        """Test that populate(None) is NIL."""
        with pytest.raises(InjectError) as exc_info:
            create_injector().populate(None)

        assert kind_of(exc_info) is InjectErrorKind.NIL


class TestInjectorCycles:
    """Test cases for cycle detection."""

    def test_constructor_cycle_detected(self):
        """Test that mutually dependent constructors are CYCLIC_BINDING."""

        def new_chicken(egg: Egg) -> Chicken:
            return Chicken()

        def new_egg(chicken: Chicken) -> Egg:
            return Egg()

        module = Module()
        module.bind(Chicken).to_constructor(new_chicken)
        module.bind(Egg).to_constructor(new_egg)
        injector = create_injector(module)

        with pytest.raises(InjectError) as exc_info:
            injector.get(Chicken)

        assert kind_of(exc_info) is InjectErrorKind.CYCLIC_BINDING
        assert exc_info.value.get_tag("cycle") == "{type:Chicken} -> {type:Egg} -> {type:Chicken}"

    def test_detector_clean_after_failure(self):
        """Test that a failed resolution leaves no keys on the stack."""

        def new_counter() -> Counter:
            raise RuntimeError("boom")

        module = Module()
        module.bind(Counter).to_constructor(new_counter)
        injector = create_injector(module)

        with pytest.raises(RuntimeError):
            injector.get(Counter)

        assert injector._circular_detector._get_stack() == []


class TestChildInjector:
    """Test cases for create_child."""

    def test_child_sees_parent_bindings(self, greeter_module):
        """Test that a child resolves its own and its parent's keys."""
        parent = create_injector(greeter_module)
        child_module = Module()
        child_module.bind(Counter).to_constructor(Counter)

        child = parent.create_child(child_module)

        assert child.get(IGreeter).greet() == "hello"
        assert isinstance(child.get(Counter), Counter)
        assert child._parent is parent

    def test_parent_unchanged(self, greeter_module):
        """Test that child bindings do not leak into the parent."""
        parent = create_injector(greeter_module)
        child_module = Module()
        child_module.bind(Counter).to_constructor(Counter)
        parent.create_child(child_module)

        with pytest.raises(InjectError) as exc_info:
            parent.get(Counter)

        assert kind_of(exc_info) is InjectErrorKind.NO_BINDING

    def test_child_cannot_rebind_parent_key(self, greeter_module):
        """Test that a child may only add keys."""
        parent = create_injector(greeter_module)
        child_module = Module()
        child_module.bind_tagged_str("greeting").to_singleton("hallo")

        with pytest.raises(InjectError) as exc_info:
            parent.create_child(child_module)

        assert kind_of(exc_info) is InjectErrorKind.ALREADY_BOUND

    def test_child_binds_itself(self):
        """Test that a child's IInjector is the child."""
        parent = create_injector()
        child = parent.create_child()

        assert child.get(IInjector) is child
        assert parent.get(IInjector) is parent

    def test_child_inherits_options(self):
        """Test that a child keeps its parent's options."""
        options = InjectorOptions(detect_cycles=False)
        child = create_injector(options=options).create_child()

        assert child.options is options

    def test_parent_singletons_shared(self):
        """Test that parent singletons are shared with the child."""
        module = Module()
        module.bind(Counter).to_singleton_constructor(Counter)
        parent = create_injector(module)

        assert parent.create_child().get(Counter) is parent.get(Counter)


class TestInjectorStr:
    """Test cases for injector rendering."""

    def test_str_lists_bindings(self, greeter_module):
        """Test that the rendering names every key."""
        rendered = str(create_injector(greeter_module))

        assert rendered.startswith("injector{")
        assert "{type:IInjector}" in rendered
        assert "{type:IGreeter}:Greeter" in rendered
        assert "{type:str tag:greeting}:'hello'" in rendered
