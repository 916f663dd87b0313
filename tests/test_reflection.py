import functools
import inspect
from typing import Annotated, Any, Optional, Union

import pytest

from autowiring.errors import ReflectionError
from autowiring.reflection import (
    ConstructorResolvable,
    FunctionResolvable,
    MethodResolvable,
    has_own_constructor,
    is_instantiable,
    locate,
    resolvable_for_callable,
)
from sample_services import (
    Counter,
    FixtureOne,
    FixtureVariadic,
    FixtureWithInterface,
    Greeter,
    IFixture,
    NewOnly,
    Plain,
    WithNew,
)


def parameters_by_name(target):
    return {parameter.name: parameter for parameter in resolvable_for_callable(target).parameters()}


def test_constructor_parameters_are_described_in_order():
    parameters = ConstructorResolvable(FixtureWithInterface).parameters()

    assert [parameter.name for parameter in parameters] == ["fixture", "number"]

    fixture, number = parameters
    assert fixture.dependency is IFixture
    assert not fixture.has_default
    assert not fixture.nullable
    assert number.dependency is None
    assert number.has_default
    assert number.default == 1


def test_variadic_and_optional_parameters():
    address, numbers = ConstructorResolvable(FixtureVariadic).parameters()

    assert address.nullable
    assert address.dependency is None
    assert numbers.is_variadic
    assert numbers.kind is inspect.Parameter.VAR_POSITIONAL


def test_builtin_and_generic_types_are_primitives():
    def target(a: int, b: str, c: list[int], d: dict, e: Any, f: Union[int, str], g=None):
        pass

    parameters = parameters_by_name(target)

    assert all(parameter.dependency is None for parameter in parameters.values())
    assert parameters["e"].nullable
    assert parameters["g"].nullable
    assert not parameters["a"].nullable
    assert not parameters["f"].nullable


def test_optional_class_is_a_nullable_class_dependency():
    def target(fixture: Optional[IFixture], other: FixtureOne | None = None):
        pass

    parameters = parameters_by_name(target)

    assert parameters["fixture"].dependency is IFixture
    assert parameters["fixture"].nullable
    assert parameters["other"].dependency is FixtureOne
    assert parameters["other"].nullable


def test_annotated_qualifier_is_the_dependency_key():
    def target(
        cache: Annotated[IFixture, "redis"],
        plain: Annotated[IFixture, 42],
        maybe: Optional[Annotated[IFixture, "maybe"]],
    ):
        pass

    parameters = parameters_by_name(target)

    assert parameters["cache"].dependency == "redis"
    assert parameters["plain"].dependency is IFixture
    assert parameters["maybe"].dependency == "maybe"
    assert parameters["maybe"].nullable


def test_unresolved_forward_reference_is_kept_as_string():
    def target(service: "NotDefinedAnywhere", number: "int" = 3):  # noqa: F821
        pass

    parameters = parameters_by_name(target)

    assert parameters["service"].dependency == "NotDefinedAnywhere"
    assert parameters["number"].declared_type is int
    assert parameters["number"].dependency is None


def test_self_maps_to_declaring_class():
    (other,) = MethodResolvable(Counter(1), "merge").parameters()

    assert other.dependency is Counter


def test_keyword_only_parameters_are_flagged():
    def target(a, *, b: IFixture, **rest):
        pass

    parameters = parameters_by_name(target)

    assert not parameters["a"].is_keyword_only
    assert parameters["b"].is_keyword_only
    assert parameters["rest"].is_keyword_variadic


def test_callable_shapes():
    assert isinstance(resolvable_for_callable(lambda: None), FunctionResolvable)
    assert isinstance(resolvable_for_callable(len), FunctionResolvable)
    assert isinstance(resolvable_for_callable(Counter(1).merge), FunctionResolvable)
    assert isinstance(resolvable_for_callable(functools.partial(max, 1)), FunctionResolvable)
    assert isinstance(resolvable_for_callable((Counter(1), "merge")), MethodResolvable)
    assert isinstance(resolvable_for_callable(Greeter()), MethodResolvable)
    assert isinstance(resolvable_for_callable(FixtureOne), ConstructorResolvable)
    assert isinstance(
        resolvable_for_callable(f"{FixtureWithInterface.__module__}.FixtureWithInterface::static_method"),
        MethodResolvable,
    )
    assert isinstance(resolvable_for_callable("os.path.join"), FunctionResolvable)


def test_bound_method_parameters_exclude_self():
    parameters = resolvable_for_callable((FixtureWithInterface(FixtureOne()), "method")).parameters()

    assert [parameter.name for parameter in parameters] == ["proof", "fixture", "times"]


def test_missing_method_raises():
    with pytest.raises(ReflectionError, match="does not exist"):
        resolvable_for_callable((Counter(1), "nope"))


def test_invoke_passes_positional_and_keyword_arguments():
    def target(a, *rest, b):
        return a, rest, b

    assert FunctionResolvable(target).invoke([1, 2, 3], {"b": 4}) == (1, (2, 3), 4)


def test_locate_imports_dotted_paths():
    assert locate(f"{FixtureOne.__module__}.FixtureOne") is FixtureOne
    assert locate("collections.abc.Mapping").__name__ == "Mapping"


def test_locate_raises_for_unknown_paths():
    with pytest.raises(ReflectionError, match=r"Class \[nothing\] does not exist"):
        locate("nothing")

    with pytest.raises(ReflectionError, match=r"Class \[collections.Nothing\] does not exist"):
        locate("collections.Nothing")

    with pytest.raises(ReflectionError):
        locate("not_a_module.anywhere.Thing")


def test_instantiability():
    assert is_instantiable(FixtureOne)
    assert not is_instantiable(IFixture)
    assert has_own_constructor(FixtureOne)
    assert not has_own_constructor(Plain)


def test_constructor_signature_skips_self_and_cls():
    assert [p.name for p in ConstructorResolvable(WithNew).parameters()] == ["fixture", "number"]
    assert [p.name for p in ConstructorResolvable(NewOnly).parameters()] == ["number"]
    assert ConstructorResolvable(Plain).parameters() == []
