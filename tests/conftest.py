"""Shared pytest fixtures for Arbiter tests."""

import pytest
from dotenv import load_dotenv
from hypothesis import settings

from arbiter.core.config import ArbiterConfig
from arbiter.core.models import TypeKind, Visibility
from arbiter.registry.base import TypeRegistry

# Load environment variables from .env file
load_dotenv()

# Configure hypothesis for property-based testing
settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("dev", max_examples=20, deadline=None)
settings.load_profile("dev")


def _returns(label):
    """Implementation that ignores its arguments and reports which overload ran."""

    def run(*_args):
        return label

    return run


def _echo(label):
    def run(*args):
        return label, args[-1]

    return run


def _add_bean(registry: TypeRegistry) -> None:
    bean = "example.TestBean"
    registry.add_type(bean)

    for params, label in [
        ([], "foo()"),
        (["int"], "foo(int)"),
        (["Integer"], "foo(Integer)"),
        (["double"], "foo(double)"),
        (["String"], "foo(String)"),
        (["Object"], "foo(Object)"),
        (["String..."], "foo(String...)"),
        (["Integer", "String..."], "foo(int, String...)"),
        (["Object..."], "foo(Object...)"),
    ]:
        registry.add_method(bean, "foo", params, implementation=_returns(label))

    for params, label in [
        ([], "bar()"),
        (["int"], "bar(int)"),
        (["Integer"], "bar(Integer)"),
        (["double"], "bar(double)"),
        (["String"], "bar(String)"),
        (["Object"], "bar(Object)"),
        (["String..."], "bar(String...)"),
        (["Integer", "String..."], "bar(int, String...)"),
    ]:
        registry.add_method(bean, "bar", params, is_static=True, implementation=_returns(label))

    for element in (
        "Byte", "Character", "Short", "Boolean", "Float", "Double",
        "Integer", "Long", "Number", "Object", "String",
    ):
        registry.add_method(
            bean, "varOverload", [f"{element}..."], is_static=True,
            implementation=_returns(f"{element}..."),
        )
    for element in ("Byte", "Short", "Float", "Double", "Integer", "Long", "Number"):
        registry.add_method(
            bean, "numOverload", [f"{element}..."], is_static=True,
            implementation=_returns(f"{element}..."),
        )

    for element in ("String", "Number"):
        registry.add_method(
            bean, "varOverloadEcho", [f"{element}..."], implementation=_echo(f"{element}...")
        )
        registry.add_method(
            bean, "varOverloadEchoStatic", [f"{element}..."], is_static=True,
            implementation=_echo(f"{element}..."),
        )

    registry.add_method(bean, "oneParameter", ["String"], implementation=_returns("oneParameter"))
    registry.add_method(
        bean, "oneParameterStatic", ["String"], is_static=True,
        implementation=_returns("oneParameterStatic"),
    )
    registry.add_method(bean, "unboxing", ["int..."], implementation=lambda _self, values: values)
    registry.add_method(bean, "privateStuff", visibility=Visibility.PRIVATE)


def _add_inheritance(registry: TypeRegistry) -> None:
    registry.add_type("example.ChildInterface", TypeKind.INTERFACE, visibility=Visibility.PACKAGE)
    registry.add_type("example.GrandParentObject")
    registry.add_type("example.ParentObject", superclass="example.GrandParentObject")
    registry.add_type(
        "example.ChildObject",
        superclass="example.ParentObject",
        interfaces=["example.ChildInterface"],
    )

    bean = "example.InheritanceBean"
    registry.add_type(bean)
    for name, params in [
        ("testOne", "Object"),
        ("testOne", "example.GrandParentObject"),
        ("testOne", "example.ParentObject"),
        ("testTwo", "Object"),
        ("testTwo", "example.GrandParentObject"),
        ("testTwo", "example.ChildInterface"),
    ]:
        registry.add_method(bean, name, [params])


def _add_mutables(registry: TypeRegistry) -> None:
    registry.add_type("example.Mutable", TypeKind.INTERFACE, type_parameters=["T"])
    registry.add_method("example.Mutable", "getValue")
    registry.add_method("example.Mutable", "setValue", ["T"])

    registry.add_type(
        "example.MutableObject", interfaces=["example.Mutable<T>"], type_parameters=["T"]
    )
    registry.add_method("example.MutableObject", "getValue", implementation=_returns("object"))
    registry.add_method("example.MutableObject", "setValue", ["T"])

    registry.add_type(
        "example.TestMutable",
        visibility=Visibility.PRIVATE,
        interfaces=["example.Mutable<Object>"],
    )
    registry.add_method("example.TestMutable", "getValue", implementation=_returns("mutable"))
    registry.add_method("example.TestMutable", "setValue", ["Object"])

    registry.add_type(
        "example.PrivateInterface", TypeKind.INTERFACE, visibility=Visibility.PRIVATE
    )
    registry.add_type(
        "example.TestBeanWithInterfaces",
        visibility=Visibility.PACKAGE,
        interfaces=["example.PrivateInterface"],
    )
    registry.add_method("example.TestBeanWithInterfaces", "foo")


def _add_generics(registry: TypeRegistry) -> None:
    registry.add_type("example.GenericConsumer", TypeKind.INTERFACE, type_parameters=["T"])
    registry.add_method("example.GenericConsumer", "consume", ["T"])

    registry.add_type(
        "example.GenericParent",
        interfaces=["example.GenericConsumer<T>"],
        type_parameters=["T"],
    )
    registry.add_method("example.GenericParent", "consume", ["T"])

    registry.add_type(
        "example.StringParameterizedChild", superclass="example.GenericParent<String>"
    )
    registry.add_method("example.StringParameterizedChild", "consume", ["String"])


def _add_annotated(registry: TypeRegistry) -> None:
    suite = "example.AnnotatedSuite"
    registry.add_type(suite)
    registry.add_method(suite, "testGetMethodsWithAnnotation", annotations=["Annotated"])
    registry.add_method(suite, "testGetMethodsListWithAnnotation", annotations=["Annotated"])
    registry.add_method(suite, "testPlain")


def build_universe() -> TypeRegistry:
    registry = TypeRegistry()
    _add_bean(registry)
    _add_inheritance(registry)
    _add_mutables(registry)
    _add_generics(registry)
    _add_annotated(registry)
    return registry


@pytest.fixture
def registry() -> TypeRegistry:
    """Provide a fresh registry holding the example universe."""
    return build_universe()


@pytest.fixture(scope="session")
def shared_registry() -> TypeRegistry:
    """Provide a session-wide example universe; tests must not mutate it."""
    return build_universe()


@pytest.fixture
def default_config() -> ArbiterConfig:
    """Provide a configuration that ignores the environment and .env files."""
    return ArbiterConfig(_env_file=None)
