"""Annotation scanner.

Collects the methods of a type, declared or inherited, that carry a marker.
Only the most-derived declaration of each overload key is examined, so an
override that drops the marker hides an annotated ancestor declaration.
"""

from __future__ import annotations

from arbiter.core.errors import InvalidArgumentError
from arbiter.core.models import MethodSignature
from arbiter.registry.base import AnnotationStore, MemberLister


def _require(type_name: str | None, marker: str | None) -> tuple[str, str]:
    if type_name is None:
        raise InvalidArgumentError("Type must not be None")
    if marker is None:
        raise InvalidArgumentError("Annotation marker must not be None")
    return type_name, marker


class AnnotationScanner:
    """Find marker-annotated members of a type."""

    def __init__(self, lister: MemberLister, store: AnnotationStore) -> None:
        self._lister = lister
        self._store = store

    def methods_with_annotation(
        self, type_name: str | None, marker: str | None
    ) -> frozenset[MethodSignature]:
        """Return the annotated members of ``type_name``; empty if none.

        Raises:
            InvalidArgumentError: If ``type_name`` or ``marker`` is None.
        """
        return frozenset(self._scan(*_require(type_name, marker)))

    def methods_list_with_annotation(
        self, type_name: str | None, marker: str | None
    ) -> list[MethodSignature]:
        """Like methods_with_annotation, ordered by hierarchy position then name."""
        type_name, marker = _require(type_name, marker)
        found = self._scan(type_name, marker)
        if not found:
            return []
        position = {owner: index for index, owner in enumerate(self._lister.hierarchy(type_name))}
        return sorted(
            found,
            key=lambda method: (
                position.get(method.declaring_type, len(position)),
                method.name,
                str(method.parameters),
            ),
        )

    def _scan(self, type_name: str, marker: str) -> list[MethodSignature]:
        return [
            method
            for method in self._lister.members_of(type_name)
            if marker in self._store.annotations_of(method)
        ]
