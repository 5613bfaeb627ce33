"""Type compatibility oracle.

Decides whether a supplied argument type may be passed for a required
parameter type and at which CompatibilityTier.
"""

from __future__ import annotations

from arbiter.core.models import OBJECT_NAME, CompatibilityTier, TypeTag
from arbiter.core.typesystem import box, unbox, widens
from arbiter.resolution.lattice import TypeLattice


class CompatibilityOracle:
    """Pure compatibility checks between two type tags."""

    def __init__(self, lattice: TypeLattice) -> None:
        self._lattice = lattice

    @property
    def lattice(self) -> TypeLattice:
        return self._lattice

    def compatible(self, supplied: TypeTag, required: TypeTag) -> CompatibilityTier | None:
        """Return the tier at which ``supplied`` fits ``required``, or None.

        Unboxing followed by widening is a single BOXING_OR_UNBOXING step and
        never EXACT, even when the unboxed primitive equals the parameter.
        """
        supplied = supplied.erasure()
        required = required.erasure()

        if supplied.is_null:
            return CompatibilityTier.WIDENING_REFERENCE if required.is_reference else None

        if supplied.is_primitive:
            if required.is_primitive:
                if supplied == required:
                    return CompatibilityTier.EXACT
                if widens(supplied, required):
                    return CompatibilityTier.WIDENING_PRIMITIVE
                return None
            boxed = box(supplied)
            if boxed is not None and self.reference_tier(boxed, required) is not None:
                return CompatibilityTier.BOXING_OR_UNBOXING
            return None

        if required.is_primitive:
            unboxed = unbox(supplied)
            if unboxed is not None and (unboxed == required or widens(unboxed, required)):
                return CompatibilityTier.BOXING_OR_UNBOXING
            return None

        return self.reference_tier(supplied, required)

    def reference_tier(self, supplied: TypeTag, required: TypeTag) -> CompatibilityTier | None:
        """Assignability between two erased reference (or array) tags."""
        if supplied == required:
            return CompatibilityTier.EXACT
        if supplied.is_array:
            if required.is_array:
                source, target = supplied.component, required.component
                if source is None or target is None or source.is_primitive or target.is_primitive:
                    return None
                if self.reference_tier(source, target) is None:
                    return None
                return CompatibilityTier.WIDENING_REFERENCE
            if required.name == OBJECT_NAME:
                return CompatibilityTier.WIDENING_REFERENCE
            return None
        if required.is_array or not (supplied.is_declared and required.is_declared):
            return None
        if self._lattice.is_subtype(supplied.name, required.name):
            return CompatibilityTier.WIDENING_REFERENCE
        return None

    def assignable(self, supplied: TypeTag, required: TypeTag) -> bool:
        return self.compatible(supplied, required) is not None

    def more_specific(self, first: TypeTag, second: TypeTag) -> bool:
        """True if ``first`` is a strictly narrower parameter type than ``second``.

        Primitives order by widening, references by subtyping; a primitive and
        a reference are never comparable.
        """
        first, second = first.erasure(), second.erasure()
        if first == second:
            return False
        if first.is_primitive or second.is_primitive:
            return widens(first, second)
        return self.reference_tier(first, second) is not None
