"""Subtype queries over the supertype graph of a MemberLister."""

from __future__ import annotations

from collections import deque

from arbiter.core.models import OBJECT_NAME
from arbiter.registry.base import MemberLister


class TypeLattice:
    """Breadth-first subtype and distance queries.

    Distances count edges: one per superclass or interface step. Interfaces
    have an implicit edge to Object. Results are memoized for the lifetime of
    the instance, which callers keep to a single resolution.
    """

    def __init__(self, lister: MemberLister) -> None:
        self._lister = lister
        self._distances: dict[tuple[str, str], int | None] = {}

    def distance(self, sub: str, sup: str) -> int | None:
        """Shortest edge count from ``sub`` up to ``sup``, or None if unrelated."""
        if sub == sup:
            return 0
        key = (sub, sup)
        if key not in self._distances:
            self._distances[key] = self._search(sub, sup)
        return self._distances[key]

    def _search(self, sub: str, sup: str) -> int | None:
        visited = {sub}
        queue: deque[tuple[str, int]] = deque([(sub, 0)])
        while queue:
            current, depth = queue.popleft()
            for parent in self._parents(current):
                if parent == sup:
                    return depth + 1
                if parent not in visited:
                    visited.add(parent)
                    queue.append((parent, depth + 1))
        return None

    def _parents(self, type_name: str) -> list[str]:
        superclass, interfaces = self._lister.supertypes_of(type_name)
        parents = [iface.name for iface in interfaces]
        if superclass is not None:
            parents.insert(0, superclass.name)
        elif type_name != OBJECT_NAME:
            parents.append(OBJECT_NAME)
        return parents

    def is_subtype(self, sub: str, sup: str) -> bool:
        """True if ``sub`` equals ``sup`` or reaches it through supertype edges."""
        if sup == OBJECT_NAME:
            return True
        return self.distance(sub, sup) is not None

    def is_interface(self, type_name: str) -> bool:
        return self._lister.declaration_of(type_name).is_interface
