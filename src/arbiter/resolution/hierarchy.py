"""Override hierarchy walker.

Walks from a method's declaring type up through its supertypes and yields
every declaration the method overrides or implements, most-derived first.
Parameter types are compared in their generic form: type arguments bound
along the inheritance path are substituted into each ancestor's declaration
before comparing, so ``consume(String)`` in a subclass of
``GenericParent<String>`` overrides ``GenericParent.consume(T)``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from arbiter.core.errors import InvalidArgumentError
from arbiter.core.models import MethodSignature, TypeTag, Visibility, signature_sort_key
from arbiter.core.typesystem import array_of, reference
from arbiter.registry.base import MemberLister

logger = logging.getLogger(__name__)

Bindings = dict[str, TypeTag]


def substitute(tag: TypeTag, owner: str, bindings: Bindings) -> TypeTag:
    """Replace ``owner``'s type variables in ``tag`` with their bound arguments."""
    if tag.is_variable:
        if tag.owner == owner and tag.name in bindings:
            return bindings[tag.name]
        return tag
    if tag.is_array and tag.component is not None:
        component = substitute(tag.component, owner, bindings)
        return tag if component == tag.component else array_of(component)
    if tag.arguments:
        return reference(tag.name, *(substitute(arg, owner, bindings) for arg in tag.arguments))
    return tag


class OverrideHierarchyWalker:
    """Lazily enumerate the declarations a method overrides."""

    def __init__(self, lister: MemberLister, *, max_depth: int = 64) -> None:
        self._lister = lister
        self._max_depth = max_depth

    def override_chain(
        self, method: MethodSignature, include_interfaces: bool = True
    ) -> Iterator[MethodSignature]:
        """Yield ``method`` followed by each declaration it overrides.

        The generator is single-use; call again to re-walk.
        """
        yield method
        if method.is_static or method.visibility is Visibility.PRIVATE:
            return
        for type_name, bindings in self._ancestors(method.declaring_type, include_interfaces):
            for candidate in sorted(
                self._lister.declared_members_of(type_name), key=signature_sort_key
            ):
                if self._overrides(method, candidate, type_name, bindings):
                    yield candidate
                    break

    def _ancestors(
        self, start: str, include_interfaces: bool
    ) -> Iterator[tuple[str, Bindings]]:
        # Superclass chain, each class followed by its unseen interfaces.
        seen = {start}
        bindings: Bindings = {}
        current = start
        depth = 0
        while True:
            superclass, interfaces = self._lister.supertypes_of(current)
            if include_interfaces:
                yield from self._interfaces(current, bindings, interfaces, seen, depth + 1)
            if superclass is None or superclass.name in seen:
                return
            depth += 1
            self._check_depth(start, depth)
            bindings = self._bind(superclass, current, bindings)
            current = superclass.name
            seen.add(current)
            yield current, bindings

    def _interfaces(
        self,
        owner: str,
        owner_bindings: Bindings,
        interfaces: tuple[TypeTag, ...],
        seen: set[str],
        depth: int,
    ) -> Iterator[tuple[str, Bindings]]:
        self._check_depth(owner, depth)
        for iface in interfaces:
            if iface.name in seen:
                continue
            seen.add(iface.name)
            bindings = self._bind(iface, owner, owner_bindings)
            yield iface.name, bindings
            _, parents = self._lister.supertypes_of(iface.name)
            yield from self._interfaces(iface.name, bindings, parents, seen, depth + 1)

    def _bind(self, edge: TypeTag, owner: str, owner_bindings: Bindings) -> Bindings:
        """Bindings of the supertype named by ``edge`` as seen from ``owner``."""
        if not edge.arguments:
            return {}
        parameters = self._lister.declaration_of(edge.name).type_parameters
        if len(parameters) != len(edge.arguments):
            logger.debug(f"Type argument count mismatch on {edge} from {owner}")
            return {}
        return {
            param: substitute(arg, owner, owner_bindings)
            for param, arg in zip(parameters, edge.arguments)
        }

    def _check_depth(self, start: str, depth: int) -> None:
        if depth > self._max_depth:
            raise InvalidArgumentError(
                "Supertype lattice too deep", f"{start} exceeds {self._max_depth} levels"
            )

    @staticmethod
    def _overrides(
        method: MethodSignature, candidate: MethodSignature, owner: str, bindings: Bindings
    ) -> bool:
        if (
            candidate.name != method.name
            or candidate.is_static
            or candidate.visibility is Visibility.PRIVATE
            or candidate.arity != method.arity
        ):
            return False
        for declared, expected in zip(candidate.parameters.types, method.parameters.types):
            actual = substitute(declared, owner, bindings)
            if actual == expected:
                continue
            # Raw supertypes leave variables unbound; fall back to erasure.
            if actual.contains_variables() and actual.erasure() == expected.erasure():
                continue
            return False
        return True
