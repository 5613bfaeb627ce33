"""Type registry and the member listing protocols the resolver consumes."""

from arbiter.registry.base import (
    BUILTIN_TYPES,
    AnnotationStore,
    MemberLister,
    TypeRegistry,
)

__all__ = [
    "BUILTIN_TYPES",
    "AnnotationStore",
    "MemberLister",
    "TypeRegistry",
]
