"""Overload resolution, accessibility, override and annotation lookups.

Every component here is a read-only view over a MemberLister; none of them
holds state between calls.
"""

from arbiter.resolution.accessibility import AccessibilityResolver
from arbiter.resolution.annotations import AnnotationScanner
from arbiter.resolution.candidates import CandidateEnumerator
from arbiter.resolution.comparator import Ordering, SpecificityComparator
from arbiter.resolution.hierarchy import OverrideHierarchyWalker
from arbiter.resolution.lattice import TypeLattice
from arbiter.resolution.oracle import CompatibilityOracle
from arbiter.resolution.resolver import OverloadResolver

__all__ = [
    "AccessibilityResolver",
    "AnnotationScanner",
    "CandidateEnumerator",
    "CompatibilityOracle",
    "Ordering",
    "OverloadResolver",
    "OverrideHierarchyWalker",
    "SpecificityComparator",
    "TypeLattice",
]
