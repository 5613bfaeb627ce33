"""Unit tests for MethodService argument handling and error paths."""

import threading
from typing import Any

import pytest

from arbiter.core.config import ArbiterConfig
from arbiter.core.errors import (
    AmbiguousMethodError,
    InvalidArgumentError,
    NoMatchError,
    UnknownTypeError,
)
from arbiter.core.models import MethodSignature
from arbiter.core.typesystem import INT, reference
from arbiter.core.values import typed
from arbiter.registry.base import TypeRegistry
from arbiter.services.method_service import MethodService

BEAN = "example.TestBean"


@pytest.fixture
def service(shared_registry: TypeRegistry, default_config: ArbiterConfig) -> MethodService:
    return MethodService(shared_registry, config=default_config)


class RecordingInvoker:
    """Invoker double that records what it was asked to call."""

    def __init__(self) -> None:
        self.calls: list[tuple[MethodSignature, Any, tuple]] = []

    def invoke(self, method, receiver, arguments):
        self.calls.append((method, receiver, tuple(arguments)))
        return method.short_form


class TestReceivers:
    """Receiver normalization."""

    def test_receiver_forms(self, service: MethodService) -> None:
        by_name = service.resolve_instance_method(BEAN, "foo", [1])
        by_tag = service.resolve_instance_method(reference(BEAN), "foo", [1])
        by_value = service.resolve_instance_method(typed(object(), BEAN), "foo", [1])
        assert by_name == by_tag == by_value

    def test_none_receiver(self, service: MethodService) -> None:
        with pytest.raises(InvalidArgumentError, match="Receiver"):
            service.resolve_instance_method(None, "foo")

    def test_primitive_receiver(self, service: MethodService) -> None:
        with pytest.raises(InvalidArgumentError, match="declared type"):
            service.resolve_instance_method(INT, "foo")

    def test_unknown_receiver_type(self, service: MethodService) -> None:
        with pytest.raises(UnknownTypeError):
            service.resolve_static_method("com.example.Missing", "foo")


class TestResolutionErrors:
    """Failures surfaced by the resolve operations."""

    def test_no_match(self, service: MethodService) -> None:
        with pytest.raises(NoMatchError) as info:
            service.resolve_instance_method(BEAN, "oneParameter", [1])
        assert info.value.method_name == "oneParameter"

    def test_static_resolution_ignores_instance_methods(self, service: MethodService) -> None:
        with pytest.raises(NoMatchError):
            service.resolve_static_method(BEAN, "oneParameter", ["a"])

    def test_instance_resolution_sees_static_members(self, service: MethodService) -> None:
        assert service.resolve_instance_method(BEAN, "bar", ["a"]).short_form == "bar(String)"

    def test_ambiguous(self) -> None:
        registry = TypeRegistry()
        registry.add_type("com.example.Pair")
        registry.add_method("com.example.Pair", "put", ["int", "Integer"])
        registry.add_method("com.example.Pair", "put", ["Integer", "int"])
        service = MethodService(registry, config=ArbiterConfig(_env_file=None))
        with pytest.raises(AmbiguousMethodError) as info:
            service.resolve_instance_method("com.example.Pair", "put", [1, 2])
        assert len(info.value.matches) == 2

    def test_inaccessible_winner(self, service: MethodService) -> None:
        with pytest.raises(NoMatchError, match="No accessible method"):
            service.resolve_instance_method("example.TestBeanWithInterfaces", "foo")


class TestUnknownArgumentTypes:
    """Unregistered argument types fail before any candidate is scored."""

    @pytest.fixture
    def sink_service(self) -> MethodService:
        registry = TypeRegistry()
        registry.add_type("com.example.Sink")
        registry.add_method("com.example.Sink", "any", ["Object"])
        registry.add_method("com.example.Sink", "text", ["String"])
        registry.add_method("com.example.Sink", "all", ["Object..."], is_static=True)
        return MethodService(registry, config=ArbiterConfig(_env_file=None))

    @pytest.mark.parametrize("method_name", ["any", "text"])
    @pytest.mark.parametrize(
        "argument",
        [
            typed(object(), "com.example.Missing"),
            typed([], "com.example.Missing[]"),
            typed(object(), "java.util.List<com.example.Missing>"),
        ],
    )
    def test_rejected_whatever_the_parameter(
        self, sink_service: MethodService, method_name: str, argument
    ) -> None:
        with pytest.raises(UnknownTypeError) as info:
            sink_service.resolve_instance_method("com.example.Sink", method_name, [argument])
        assert info.value.type_name in ("com.example.Missing", "java.util.List")

    def test_static_varargs(self, sink_service: MethodService) -> None:
        with pytest.raises(UnknownTypeError, match="Unknown type"):
            sink_service.resolve_static_method(
                "com.example.Sink", "all", ["a", typed(object(), "com.example.Missing")]
            )

    def test_exact_parameter_types(self, sink_service: MethodService) -> None:
        with pytest.raises(UnknownTypeError):
            sink_service.resolve_exact_instance_method(
                "com.example.Sink", "any", param_types=["com.example.Missing"]
            )

    def test_matching_accessible_method(self, sink_service: MethodService) -> None:
        with pytest.raises(UnknownTypeError):
            sink_service.matching_accessible_method(
                "com.example.Sink", "any", ["com.example.Missing"]
            )

    def test_invocation_never_reached(self) -> None:
        invoker = RecordingInvoker()
        registry = TypeRegistry()
        registry.add_type("com.example.Sink")
        registry.add_method("com.example.Sink", "any", ["Object"], is_static=True)
        service = MethodService(registry, invoker=invoker, config=ArbiterConfig(_env_file=None))
        with pytest.raises(UnknownTypeError):
            service.invoke_static_method(
                "com.example.Sink", "any", [typed(object(), "com.example.Missing")]
            )
        assert invoker.calls == []


class TestExactArguments:
    """Explicit parameter types for exact resolution."""

    def test_param_types_override_runtime_types(self, service: MethodService) -> None:
        method = service.resolve_exact_instance_method(BEAN, "foo", [1], param_types=["int"])
        assert method.short_form == "foo(int)"

    def test_param_types_without_values(self, service: MethodService) -> None:
        method = service.resolve_exact_static_method(BEAN, "bar", param_types=["double"])
        assert method.short_form == "bar(double)"

    def test_count_mismatch(self, service: MethodService) -> None:
        with pytest.raises(InvalidArgumentError, match="count"):
            service.resolve_exact_instance_method(BEAN, "foo", [1, 2], param_types=["int"])


class TestLookups:
    """Accessible and matching method lookups."""

    def test_find_method(self, service: MethodService) -> None:
        assert service.find_method(BEAN, "foo", ["int"]).short_form == "foo(int)"
        assert service.find_method(BEAN, "foo", ["long"]) is None

    def test_accessible_method(self, service: MethodService) -> None:
        method = service.accessible_method("example.TestMutable", "getValue")
        assert method is not None
        assert method.declaring_type == "example.Mutable"
        assert service.accessible_method(BEAN, "privateStuff") is None
        assert service.accessible_method(BEAN, "missing") is None

    def test_accessible_mirror_rejects_none(self, service: MethodService) -> None:
        with pytest.raises(InvalidArgumentError):
            service.accessible_mirror(None)

    def test_matching_returns_none_when_ambiguous(self) -> None:
        registry = TypeRegistry()
        registry.add_type("com.example.Sink")
        registry.add_method("com.example.Sink", "take", ["String"])
        registry.add_method("com.example.Sink", "take", ["Integer"])
        service = MethodService(registry, config=ArbiterConfig(_env_file=None))
        assert service.matching_accessible_method("com.example.Sink", "take", [None]) is None

    def test_override_hierarchy_rejects_none(self, service: MethodService) -> None:
        with pytest.raises(InvalidArgumentError):
            service.override_hierarchy(None)


class TestInvocation:
    """Invocation goes through the configured invoker."""

    def test_custom_invoker(self, shared_registry, default_config) -> None:
        recorder = RecordingInvoker()
        service = MethodService(shared_registry, invoker=recorder, config=default_config)
        assert service.invoke_static_method(BEAN, "bar", [1]) == "bar(Integer)"
        method, receiver, arguments = recorder.calls[0]
        assert method.is_static
        assert receiver is None
        assert [argument.value for argument in arguments] == [1]

    def test_instance_receiver_forwarded(self, shared_registry, default_config) -> None:
        recorder = RecordingInvoker()
        service = MethodService(shared_registry, invoker=recorder, config=default_config)
        bean = typed(object(), BEAN)
        service.invoke_method(bean, "foo", ["a"])
        assert recorder.calls[0][1] is bean

    def test_uninferrable_receiver(self, service: MethodService) -> None:
        with pytest.raises(InvalidArgumentError, match="infer"):
            service.invoke_method(object(), "foo")


class TestConcurrentResolution:
    """Resolutions from several threads over one cold registry agree with serial ones."""

    CALLS = [
        ("instance", "foo", [1]),
        ("instance", "foo", ["a", "b"]),
        ("instance", "foo", [typed(1, "Long")]),
        ("instance", "varOverloadEcho", [17, 23]),
        ("static", "varOverload", [1, 1.1]),
        ("static", "bar", [1, "a", "b"]),
        ("static", "numOverload", []),
    ]

    @staticmethod
    def _resolve_all(service: MethodService) -> list[MethodSignature]:
        resolved = []
        for kind, name, args in TestConcurrentResolution.CALLS:
            if kind == "static":
                resolved.append(service.resolve_static_method(BEAN, name, args))
            else:
                resolved.append(service.resolve_instance_method(BEAN, name, args))
        return resolved

    def test_threads_agree_with_serial_resolution(
        self, service: MethodService, registry: TypeRegistry, default_config: ArbiterConfig
    ) -> None:
        expected = self._resolve_all(service)
        shared = MethodService(registry, config=default_config)
        barrier = threading.Barrier(8)
        results: list[list[MethodSignature]] = []
        errors: list[Exception] = []

        def work() -> None:
            barrier.wait()
            try:
                for _ in range(5):
                    results.append(self._resolve_all(shared))
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(results) == 40
        assert all(result == expected for result in results)
