"""Invocation of resolved methods.

The resolver only decides which declaration applies; an Invoker performs the
call. CallableInvoker runs the Python callables bound to declarations in a
TypeRegistry.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from arbiter.core.errors import InvocationError, InvocationTargetError
from arbiter.core.models import ArgumentValue, MethodSignature, Visibility
from arbiter.registry.base import TypeRegistry
from arbiter.resolution.lattice import TypeLattice
from arbiter.resolution.oracle import CompatibilityOracle

logger = logging.getLogger(__name__)


@runtime_checkable
class Invoker(Protocol):
    """Performs the call for a resolved declaration."""

    def invoke(
        self,
        method: MethodSignature,
        receiver: ArgumentValue | None,
        arguments: Sequence[ArgumentValue],
    ) -> Any: ...


class CallableInvoker:
    """Invoke the Python implementations bound in a TypeRegistry.

    Instance implementations receive the receiver value first. Calls dispatch
    virtually: the most-derived implementation of the method's overload key
    on the receiver's type runs, so invoking an interface declaration runs
    the implementing class's callable.
    """

    def __init__(self, registry: TypeRegistry) -> None:
        self._registry = registry

    def invoke(
        self,
        method: MethodSignature,
        receiver: ArgumentValue | None,
        arguments: Sequence[ArgumentValue],
    ) -> Any:
        """Call ``method`` with ``arguments``.

        Args:
            method: The resolved declaration.
            receiver: Target object; ignored for static methods.
            arguments: Arguments in call order, before varargs packing.

        Returns:
            Whatever the bound implementation returns.

        Raises:
            InvocationError: If the method cannot be called at all.
            InvocationTargetError: If the implementation raised; the original
                exception is chained as ``__cause__``.
        """
        if not method.is_static and receiver is None:
            raise InvocationError(method, "Instance method needs a receiver")
        implementation = self._dispatch(method, receiver)
        if implementation is None:
            raise InvocationError(method, "No implementation bound")

        values = self.prepare_arguments(method, arguments)
        logger.debug(f"Invoking {method} with {len(values)} argument(s)")
        try:
            if method.is_static:
                return implementation(*values)
            return implementation(receiver.value, *values)  # type: ignore[union-attr]
        except Exception as exc:
            raise InvocationTargetError(method, exc) from exc

    def prepare_arguments(
        self, method: MethodSignature, arguments: Sequence[ArgumentValue]
    ) -> list[Any]:
        """Lay out argument values the way ``method`` takes them.

        A variable-arity method receives its trailing arguments packed into a
        fresh list, unless exactly one argument was supplied for the slot and
        it already fits the array type, in which case it is passed through.
        """
        values = [argument.value for argument in arguments]
        if not method.is_varargs:
            return values
        prefix = len(method.parameters.fixed_prefix)
        if len(arguments) == method.arity:
            oracle = CompatibilityOracle(TypeLattice(self._registry))
            if oracle.assignable(arguments[-1].type, method.parameters.types[-1]):
                return values
        return values[:prefix] + [values[prefix:]]

    def _dispatch(self, method: MethodSignature, receiver: ArgumentValue | None) -> Any:
        if method.is_static or receiver is None or not receiver.type.is_declared:
            return self._registry.implementation_of(method)
        receiver_type = receiver.type.name
        if not self._registry.has_type(receiver_type):
            return self._registry.implementation_of(method)
        key = method.override_key
        for owner in self._registry.hierarchy(receiver_type):
            for candidate in self._registry.declared_members_of(owner):
                if (
                    candidate.override_key == key
                    and not candidate.is_static
                    and candidate.visibility is not Visibility.PRIVATE
                ):
                    implementation = self._registry.implementation_of(candidate)
                    if implementation is not None:
                        return implementation
        return self._registry.implementation_of(method)
