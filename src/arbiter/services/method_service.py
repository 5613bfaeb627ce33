"""Method resolution service.

This module is the public lookup layer over a TypeRegistry: it resolves the
method a call with given runtime arguments would run, finds accessible
mirrors, walks override chains, scans for annotated methods, and invokes
resolved methods through an Invoker.

Receivers are given as an ArgumentValue (a value and its runtime type), a
TypeTag or a qualified type name.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from arbiter.core.config import ArbiterConfig, get_config
from arbiter.core.errors import AmbiguousMethodError, InvalidArgumentError, NoMatchError
from arbiter.core.models import ArgumentValue, MethodSignature, Resolution, ResolutionStatus, TypeTag
from arbiter.core.typesystem import NULL_TYPE, parse_type
from arbiter.core.values import argument_values
from arbiter.registry.base import TypeRegistry
from arbiter.resolution.accessibility import AccessibilityResolver
from arbiter.resolution.annotations import AnnotationScanner
from arbiter.resolution.candidates import CandidateEnumerator
from arbiter.resolution.hierarchy import OverrideHierarchyWalker
from arbiter.resolution.resolver import OverloadResolver
from arbiter.services.invocation import CallableInvoker, Invoker

logger = logging.getLogger(__name__)

Receiver = ArgumentValue | TypeTag | str
TypeSpec = TypeTag | str


def _as_tag(spec: TypeSpec) -> TypeTag:
    return parse_type(spec) if isinstance(spec, str) else spec


def _type_arguments(param_types: Sequence[TypeSpec | None]) -> tuple[ArgumentValue, ...]:
    """Stand-in arguments for a list of explicit parameter types.

    A None entry becomes a null argument, which fits any reference type.
    """
    return tuple(
        ArgumentValue(type=NULL_TYPE if spec is None else _as_tag(spec)) for spec in param_types
    )


class MethodService:
    """Resolve, inspect and invoke methods of registered types."""

    def __init__(
        self,
        registry: TypeRegistry,
        *,
        invoker: Invoker | None = None,
        config: ArbiterConfig | None = None,
    ) -> None:
        """Initialize the method service.

        Args:
            registry: Type registry providing members and annotations.
            invoker: Optional invoker (defaults to CallableInvoker over registry).
            config: Optional configuration (defaults to get_config()).
                Member caching follows the registry's own config.
        """
        self._registry = registry
        self._config = config
        self._invoker = invoker or CallableInvoker(registry)
        self._candidates = CandidateEnumerator(registry)
        self._resolver = OverloadResolver(registry, config)
        self._scanner = AnnotationScanner(registry, registry)

    @property
    def config(self) -> ArbiterConfig:
        return self._config or get_config()

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def _accessibility(self) -> AccessibilityResolver:
        return AccessibilityResolver(self._registry, max_depth=self.config.max_hierarchy_depth)

    def _receiver_type(self, receiver: Receiver | None) -> str:
        if receiver is None:
            raise InvalidArgumentError("Receiver must not be None")
        if isinstance(receiver, str):
            type_name = receiver
        else:
            tag = receiver.type if isinstance(receiver, ArgumentValue) else receiver
            if not tag.is_declared:
                raise InvalidArgumentError("Receiver must be a declared type", str(tag))
            type_name = tag.name
        self._registry.declaration_of(type_name)
        return type_name

    def _require_argument_types(self, arguments: Sequence[ArgumentValue]) -> None:
        """Fail on any argument type the registry does not declare.

        Raises:
            UnknownTypeError: For the first unregistered type, including array
                components and type arguments.
        """
        for argument in arguments:
            self._require_type(argument.type)

    def _require_type(self, tag: TypeTag) -> None:
        if tag.is_array and tag.component is not None:
            self._require_type(tag.component)
        elif tag.is_declared:
            self._registry.declaration_of(tag.name)
            for type_argument in tag.arguments:
                self._require_type(type_argument)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_instance_method(
        self, receiver: Receiver, name: str, args: Sequence[Any] | None = None
    ) -> MethodSignature:
        """Resolve the method ``receiver.name(*args)`` would run.

        Static members of the receiver's type take part as well.

        Args:
            receiver: Receiver value, tag or type name.
            name: Method name.
            args: Runtime argument values (plain Python values or typed()
                ArgumentValues); None means no arguments.

        Returns:
            The winning declaration, or its public mirror when the winner is
            not itself callable.

        Raises:
            NoMatchError: If nothing applies or the winner has no public mirror.
            AmbiguousMethodError: If several candidates are equally specific.
        """
        type_name = self._receiver_type(receiver)
        return self._resolve(type_name, name, argument_values(args), include_instance=True)

    def resolve_static_method(
        self, type_name: str, name: str, args: Sequence[Any] | None = None
    ) -> MethodSignature:
        """Resolve the static method ``type_name.name(*args)`` would run."""
        type_name = self._receiver_type(type_name)
        return self._resolve(type_name, name, argument_values(args), include_instance=False)

    def resolve_exact_instance_method(
        self,
        receiver: Receiver,
        name: str,
        args: Sequence[Any] | None = None,
        *,
        param_types: Sequence[TypeSpec] | None = None,
    ) -> MethodSignature:
        """Resolve allowing only EXACT matches at every position.

        Parameter types come from ``param_types`` when given, otherwise from
        the runtime types of ``args``.

        Raises:
            NoMatchError: If no candidate matches exactly or none is accessible.
        """
        type_name = self._receiver_type(receiver)
        arguments = self._exact_arguments(args, param_types)
        return self._resolve(type_name, name, arguments, include_instance=True, exact=True)

    def resolve_exact_static_method(
        self,
        type_name: str,
        name: str,
        args: Sequence[Any] | None = None,
        *,
        param_types: Sequence[TypeSpec] | None = None,
    ) -> MethodSignature:
        type_name = self._receiver_type(type_name)
        arguments = self._exact_arguments(args, param_types)
        return self._resolve(type_name, name, arguments, include_instance=False, exact=True)

    @staticmethod
    def _exact_arguments(
        args: Sequence[Any] | None, param_types: Sequence[TypeSpec] | None
    ) -> tuple[ArgumentValue, ...]:
        if param_types is None:
            return argument_values(args)
        arguments = _type_arguments(param_types)
        if args is not None:
            if len(args) != len(arguments):
                raise InvalidArgumentError(
                    "Argument count does not match parameter types",
                    f"{len(args)} values for {len(arguments)} types",
                )
            arguments = tuple(
                ArgumentValue(value=value, type=argument.type)
                for value, argument in zip(args, arguments)
            )
        return arguments

    def _resolve(
        self,
        type_name: str,
        name: str,
        arguments: tuple[ArgumentValue, ...],
        *,
        include_instance: bool,
        exact: bool = False,
    ) -> MethodSignature:
        self._require_argument_types(arguments)
        candidates = self._candidates.candidates_for(
            type_name, name, include_static=True, include_instance=include_instance
        )
        if exact:
            resolution = self._resolver.resolve_exact(candidates, arguments)
        else:
            resolution = self._resolver.resolve(candidates, arguments)
        method = self._winner(type_name, name, arguments, resolution)

        mirror = self._accessibility().public_mirror(method)
        if mirror is None:
            raise NoMatchError(type_name, name, arguments, reason="No accessible method")
        if mirror != method:
            logger.debug(f"Using public mirror {mirror} for {method}")
        return mirror

    @staticmethod
    def _winner(
        type_name: str, name: str, arguments: tuple[ArgumentValue, ...], resolution: Resolution
    ) -> MethodSignature:
        if resolution.status is ResolutionStatus.NO_MATCH:
            raise NoMatchError(type_name, name, arguments)
        if resolution.status is ResolutionStatus.AMBIGUOUS or resolution.method is None:
            matches = list(dict.fromkeys(candidate.method for candidate in resolution.contenders))
            raise AmbiguousMethodError(type_name, name, arguments, matches)
        return resolution.method

    # ------------------------------------------------------------------
    # Accessibility
    # ------------------------------------------------------------------

    def accessible_mirror(self, method: MethodSignature | None) -> MethodSignature | None:
        """Return ``method`` if callable, else its public mirror or None.

        Raises:
            InvalidArgumentError: If ``method`` is None.
        """
        if method is None:
            raise InvalidArgumentError("Method must not be None")
        return self._accessibility().public_mirror(method)

    def find_method(
        self, type_name: str, name: str, param_types: Sequence[TypeSpec] = ()
    ) -> MethodSignature | None:
        """Member of ``type_name`` with exactly these erased parameter types."""
        type_name = self._receiver_type(type_name)
        return self._candidates.lookup(type_name, name, [_as_tag(spec) for spec in param_types])

    def accessible_method(
        self, type_name: str, name: str, param_types: Sequence[TypeSpec] = ()
    ) -> MethodSignature | None:
        """Find the accessible declaration with exactly these parameter types.

        Returns:
            The member's public mirror, or None if the type has no such member
            or it is not reachable from outside.
        """
        method = self.find_method(type_name, name, param_types)
        if method is None:
            return None
        return self._accessibility().public_mirror(method)

    def matching_accessible_method(
        self, type_name: str, name: str, requested_types: Sequence[TypeSpec | None] = ()
    ) -> MethodSignature | None:
        """Best accessible method for a list of requested parameter types.

        A None entry matches any reference type; among candidates it prefers
        the least specific parameter. Returns None when nothing applies or the
        best match is ambiguous.
        """
        type_name = self._receiver_type(type_name)
        arguments = _type_arguments(requested_types)
        self._require_argument_types(arguments)
        candidates = self._candidates.candidates_for(type_name, name)
        resolution = self._resolver.resolve(candidates, arguments)
        if not resolution.resolved or resolution.method is None:
            logger.debug(f"No unique match for {type_name}.{name}: {resolution.status.value}")
            return None
        return self._accessibility().public_mirror(resolution.method)

    # ------------------------------------------------------------------
    # Hierarchy and annotations
    # ------------------------------------------------------------------

    def override_hierarchy(
        self, method: MethodSignature | None, include_interfaces: bool = True
    ) -> Iterator[MethodSignature]:
        """Lazily yield ``method`` and every declaration it overrides.

        Raises:
            InvalidArgumentError: If ``method`` is None.
        """
        if method is None:
            raise InvalidArgumentError("Method must not be None")
        walker = OverrideHierarchyWalker(self._registry, max_depth=self.config.max_hierarchy_depth)
        return walker.override_chain(method, include_interfaces)

    def methods_with_annotation(
        self, type_name: str | None, marker: str | None
    ) -> frozenset[MethodSignature]:
        return self._scanner.methods_with_annotation(type_name, marker)

    def methods_list_with_annotation(
        self, type_name: str | None, marker: str | None
    ) -> list[MethodSignature]:
        return self._scanner.methods_list_with_annotation(type_name, marker)

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def invoke_method(
        self, receiver: ArgumentValue | Any, name: str, args: Sequence[Any] | None = None
    ) -> Any:
        """Resolve ``receiver.name(*args)`` and run it.

        Raises:
            NoMatchError: If no accessible method applies.
            AmbiguousMethodError: If the call is ambiguous.
            InvocationError: If the method cannot be invoked.
            InvocationTargetError: If the method raised.
        """
        target = self._receiver_value(receiver)
        arguments = argument_values(args)
        method = self._resolve(target.type.name, name, arguments, include_instance=True)
        return self._invoker.invoke(method, target, arguments)

    def invoke_exact_method(
        self,
        receiver: ArgumentValue | Any,
        name: str,
        args: Sequence[Any] | None = None,
        *,
        param_types: Sequence[TypeSpec] | None = None,
    ) -> Any:
        target = self._receiver_value(receiver)
        arguments = self._exact_arguments(args, param_types)
        method = self._resolve(target.type.name, name, arguments, include_instance=True, exact=True)
        return self._invoker.invoke(method, target, arguments)

    def invoke_static_method(
        self, type_name: str, name: str, args: Sequence[Any] | None = None
    ) -> Any:
        type_name = self._receiver_type(type_name)
        arguments = argument_values(args)
        method = self._resolve(type_name, name, arguments, include_instance=False)
        return self._invoker.invoke(method, None, arguments)

    def invoke_exact_static_method(
        self,
        type_name: str,
        name: str,
        args: Sequence[Any] | None = None,
        *,
        param_types: Sequence[TypeSpec] | None = None,
    ) -> Any:
        type_name = self._receiver_type(type_name)
        arguments = self._exact_arguments(args, param_types)
        method = self._resolve(type_name, name, arguments, include_instance=False, exact=True)
        return self._invoker.invoke(method, None, arguments)

    def _receiver_value(self, receiver: ArgumentValue | Any) -> ArgumentValue:
        if not isinstance(receiver, ArgumentValue):
            receiver = argument_values([receiver])[0]
        self._receiver_type(receiver)
        return receiver
