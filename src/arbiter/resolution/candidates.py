"""Candidate enumeration over a MemberLister."""

from __future__ import annotations

from collections.abc import Sequence

from arbiter.core.models import MethodSignature, TypeTag
from arbiter.registry.base import MemberLister


class CandidateEnumerator:
    """Collect same-named members of a receiver type.

    Fixed-arity and variable-arity declarations land in the same set; each
    declaration contributes exactly one signature.
    """

    def __init__(self, lister: MemberLister) -> None:
        self._lister = lister

    def candidates_for(
        self,
        receiver_type: str,
        method_name: str,
        *,
        include_static: bool = True,
        include_instance: bool = True,
    ) -> frozenset[MethodSignature]:
        return frozenset(
            method
            for method in self._lister.members_of(receiver_type)
            if method.name == method_name
            and ((method.is_static and include_static) or (not method.is_static and include_instance))
        )

    def lookup(
        self, receiver_type: str, method_name: str, parameter_types: Sequence[TypeTag]
    ) -> MethodSignature | None:
        """Find the member with exactly these (erased) parameter types."""
        wanted = tuple(param.erasure() for param in parameter_types)
        for method in self.candidates_for(receiver_type, method_name):
            if method.parameters.erasure() == wanted:
                return method
        return None
