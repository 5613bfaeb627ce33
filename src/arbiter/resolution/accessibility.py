"""Accessibility resolver.

A method is callable from outside when it is public and so is its declaring
type. For a public method on a non-public type, the resolver looks for the
same method declared on a public supertype.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator

from arbiter.core.errors import InvalidArgumentError
from arbiter.core.models import MethodSignature, Visibility
from arbiter.registry.base import MemberLister

logger = logging.getLogger(__name__)


class AccessibilityResolver:
    """Find the public mirror of a possibly inaccessible declaration."""

    def __init__(self, lister: MemberLister, *, max_depth: int = 64) -> None:
        self._lister = lister
        self._max_depth = max_depth

    def is_callable(self, method: MethodSignature) -> bool:
        if method.visibility is not Visibility.PUBLIC:
            return False
        return self._lister.declaration_of(method.declaring_type).is_public

    def chain(self, type_name: str) -> Iterator[tuple[str, int]]:
        """Breadth-first supertypes of ``type_name`` with their depth.

        Each node contributes its interfaces before its superclass. The start
        type itself is not yielded.

        Raises:
            InvalidArgumentError: If the walk goes deeper than ``max_depth``.
        """
        visited = {type_name}
        queue: deque[tuple[str, int]] = deque([(type_name, 0)])
        while queue:
            current, depth = queue.popleft()
            superclass, interfaces = self._lister.supertypes_of(current)
            parents = [iface.name for iface in interfaces]
            if superclass is not None:
                parents.append(superclass.name)
            for parent in parents:
                if parent in visited:
                    continue
                if depth + 1 > self._max_depth:
                    raise InvalidArgumentError(
                        "Supertype lattice too deep", f"{type_name} exceeds {self._max_depth} levels"
                    )
                visited.add(parent)
                yield parent, depth + 1
                queue.append((parent, depth + 1))

    def public_mirror(self, method: MethodSignature) -> MethodSignature | None:
        """Return ``method`` if callable, else its shallowest public mirror.

        Non-public methods have no mirror. Returns None when no public
        supertype declares the method.
        """
        if self.is_callable(method):
            return method
        if method.visibility is not Visibility.PUBLIC:
            return None

        key = method.override_key
        for type_name, depth in self.chain(method.declaring_type):
            if not self._lister.declaration_of(type_name).is_public:
                continue
            for candidate in self._lister.declared_members_of(type_name):
                if (
                    candidate.visibility is Visibility.PUBLIC
                    and candidate.is_static == method.is_static
                    and candidate.override_key == key
                ):
                    logger.debug(f"Public mirror of {method} is {candidate} (depth {depth})")
                    return candidate
        logger.debug(f"No public mirror for {method}")
        return None
