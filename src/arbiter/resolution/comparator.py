"""Specificity comparator for applicable candidates.

Candidates are compared argument position by argument position. At each
position the keys are, in order:

1. the CompatibilityTier (lower wins);
2. the natural tier of an expanded varargs argument (lower wins);
3. parameter specificity: the narrower parameter type wins, except for a null
   argument, where the wider reference type wins;
4. for two unrelated reference parameter types, the shorter supertype distance
   from the argument's type wins, and at equal distance a class beats an
   interface.

A candidate dominates another when it is at least as good at every position
and better at one.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from arbiter.core.models import ArgumentValue, Candidate, CompatibilityTier, TypeTag
from arbiter.core.typesystem import box
from arbiter.resolution.oracle import CompatibilityOracle

logger = logging.getLogger(__name__)


class Ordering(str, Enum):
    """Result of comparing two candidates; LESS means the first ranks first."""

    LESS = "less"
    GREATER = "greater"
    EQUAL = "equal"
    INCOMPARABLE = "incomparable"


def _by_value(first: int, second: int) -> Ordering:
    if first < second:
        return Ordering.LESS
    if first > second:
        return Ordering.GREATER
    return Ordering.EQUAL


class SpecificityComparator:
    """Strict partial order over candidates for one argument list."""

    def __init__(self, oracle: CompatibilityOracle, *, zero_arg_fallback: bool = True) -> None:
        self._oracle = oracle
        self._zero_arg_fallback = zero_arg_fallback

    def compare(
        self, first: Candidate, second: Candidate, arguments: Sequence[ArgumentValue]
    ) -> Ordering:
        first_better = second_better = False
        for index, argument in enumerate(arguments):
            order = self.compare_position(
                argument.type,
                (first.tiers[index], first.natural_tiers[index], first.matched_types[index]),
                (second.tiers[index], second.natural_tiers[index], second.matched_types[index]),
            )
            if order is Ordering.LESS:
                first_better = True
            elif order is Ordering.GREATER:
                second_better = True
            elif order is Ordering.INCOMPARABLE:
                return Ordering.INCOMPARABLE
        if first_better and second_better:
            return Ordering.INCOMPARABLE
        if first_better:
            return Ordering.LESS
        if second_better:
            return Ordering.GREATER
        return self._break_tie(first, second)

    def dominates(
        self, first: Candidate, second: Candidate, arguments: Sequence[ArgumentValue]
    ) -> bool:
        return self.compare(first, second, arguments) is Ordering.LESS

    def compare_position(
        self,
        argument: TypeTag,
        first: tuple[CompatibilityTier, CompatibilityTier, TypeTag],
        second: tuple[CompatibilityTier, CompatibilityTier, TypeTag],
    ) -> Ordering:
        tier_a, natural_a, param_a = first
        tier_b, natural_b, param_b = second
        order = _by_value(tier_a, tier_b)
        if order is not Ordering.EQUAL:
            return order
        order = _by_value(natural_a, natural_b)
        if order is not Ordering.EQUAL:
            return order

        param_a, param_b = param_a.erasure(), param_b.erasure()
        if param_a == param_b:
            return Ordering.EQUAL

        if argument.is_null:
            if self._oracle.more_specific(param_b, param_a):
                return Ordering.LESS
            if self._oracle.more_specific(param_a, param_b):
                return Ordering.GREATER
            return Ordering.INCOMPARABLE

        if self._oracle.more_specific(param_a, param_b):
            return Ordering.LESS
        if self._oracle.more_specific(param_b, param_a):
            return Ordering.GREATER
        return self._by_distance(argument, param_a, param_b)

    def _by_distance(self, argument: TypeTag, param_a: TypeTag, param_b: TypeTag) -> Ordering:
        if not (param_a.is_declared and param_b.is_declared):
            return Ordering.INCOMPARABLE
        origin = box(argument) if argument.is_primitive else argument.erasure()
        if origin is None or not origin.is_declared:
            return Ordering.INCOMPARABLE
        lattice = self._oracle.lattice
        distance_a = lattice.distance(origin.name, param_a.name)
        distance_b = lattice.distance(origin.name, param_b.name)
        if distance_a is not None and distance_b is not None and distance_a != distance_b:
            return Ordering.LESS if distance_a < distance_b else Ordering.GREATER
        interface_a = lattice.is_interface(param_a.name)
        interface_b = lattice.is_interface(param_b.name)
        if interface_a != interface_b:
            logger.debug(f"Class-over-interface tie-break between {param_a} and {param_b}")
            return Ordering.GREATER if interface_a else Ordering.LESS
        return Ordering.INCOMPARABLE

    def _break_tie(self, first: Candidate, second: Candidate) -> Ordering:
        # Every position ties. With nothing supplied for either varargs slot,
        # the more general element type ranks first.
        if (
            self._zero_arg_fallback
            and first.expanded
            and second.expanded
            and first.trailing == 0
            and second.trailing == 0
        ):
            element_a = first.method.parameters.varargs_element
            element_b = second.method.parameters.varargs_element
            if element_a is not None and element_b is not None:
                if self._oracle.more_specific(element_b, element_a):
                    return Ordering.LESS
                if self._oracle.more_specific(element_a, element_b):
                    return Ordering.GREATER
        return Ordering.EQUAL
