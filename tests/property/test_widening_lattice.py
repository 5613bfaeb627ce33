"""Property tests for the compatibility oracle.

For any pair of type tags drawn from the primitives, their wrappers, arrays
and a small reference lattice:
- every tag fits itself exactly
- primitive widening is transitive and never runs both ways
- boxing and unboxing are never reported as EXACT
- parameter specificity is a strict partial order
"""

from hypothesis import given, strategies as st

from arbiter.core.models import CompatibilityTier
from arbiter.core.typesystem import (
    NULL_TYPE,
    NUMBER,
    OBJECT,
    PRIMITIVE_NAMES,
    STRING,
    array_of,
    box,
    primitive,
    reference,
)
from arbiter.registry.base import TypeRegistry
from arbiter.resolution.lattice import TypeLattice
from arbiter.resolution.oracle import CompatibilityOracle

PRIMITIVES = [primitive(name) for name in PRIMITIVE_NAMES]
WRAPPERS = [box(tag) for tag in PRIMITIVES]
REFERENCES = [
    OBJECT,
    NUMBER,
    STRING,
    reference("example.GrandParentObject"),
    reference("example.ParentObject"),
    reference("example.ChildObject"),
    reference("example.ChildInterface"),
]
ARRAYS = [array_of(tag) for tag in (STRING, OBJECT, NUMBER, PRIMITIVES[4])]

primitives = st.sampled_from(PRIMITIVES)
all_tags = st.sampled_from(PRIMITIVES + WRAPPERS + REFERENCES + ARRAYS)


def _oracle(registry: TypeRegistry) -> CompatibilityOracle:
    return CompatibilityOracle(TypeLattice(registry))


@given(tag=all_tags)
def test_identity_is_exact(shared_registry: TypeRegistry, tag) -> None:
    """Every tag fits itself at EXACT tier."""
    assert _oracle(shared_registry).compatible(tag, tag) is CompatibilityTier.EXACT


@given(a=primitives, b=primitives, c=primitives)
def test_widening_is_transitive(shared_registry: TypeRegistry, a, b, c) -> None:
    """a widens to b and b widens to c implies a widens to c."""
    oracle = _oracle(shared_registry)
    if oracle.compatible(a, b) is not None and oracle.compatible(b, c) is not None:
        assert oracle.compatible(a, c) is not None


@given(a=primitives, b=primitives)
def test_widening_is_antisymmetric(shared_registry: TypeRegistry, a, b) -> None:
    """Two distinct primitives never widen into each other."""
    oracle = _oracle(shared_registry)
    if a != b:
        assert oracle.compatible(a, b) is None or oracle.compatible(b, a) is None


@given(tag=primitives)
def test_boxing_is_never_exact(shared_registry: TypeRegistry, tag) -> None:
    """Crossing between a primitive and its wrapper costs a boxing step."""
    oracle = _oracle(shared_registry)
    assert oracle.compatible(tag, box(tag)) is CompatibilityTier.BOXING_OR_UNBOXING
    assert oracle.compatible(box(tag), tag) is CompatibilityTier.BOXING_OR_UNBOXING


@given(tag=all_tags)
def test_null_fits_references_only(shared_registry: TypeRegistry, tag) -> None:
    """Null fits every reference type and no primitive."""
    tier = _oracle(shared_registry).compatible(NULL_TYPE, tag)
    if tag.is_primitive:
        assert tier is None
    else:
        assert tier is CompatibilityTier.WIDENING_REFERENCE


@given(a=all_tags, b=all_tags)
def test_more_specific_is_asymmetric(shared_registry: TypeRegistry, a, b) -> None:
    """No tag is more specific than itself, and never both ways."""
    oracle = _oracle(shared_registry)
    assert not oracle.more_specific(a, a)
    assert not (oracle.more_specific(a, b) and oracle.more_specific(b, a))


@given(a=all_tags, b=all_tags, c=all_tags)
def test_more_specific_is_transitive(shared_registry: TypeRegistry, a, b, c) -> None:
    oracle = _oracle(shared_registry)
    if oracle.more_specific(a, b) and oracle.more_specific(b, c):
        assert oracle.more_specific(a, c)


@given(a=all_tags, b=all_tags)
def test_more_specific_implies_assignable(shared_registry: TypeRegistry, a, b) -> None:
    """A narrower parameter type is always assignable to the wider one."""
    oracle = _oracle(shared_registry)
    if oracle.more_specific(a, b):
        assert oracle.assignable(a, b)
