"""Core module containing type models, errors, and argument values."""

from arbiter.core.errors import (
    AmbiguousMethodError,
    ArbiterError,
    InvalidArgumentError,
    InvocationError,
    InvocationTargetError,
    NoMatchError,
    UnknownTypeError,
)
from arbiter.core.models import (
    ArgumentValue,
    Candidate,
    CompatibilityTier,
    MethodSignature,
    ParameterList,
    Resolution,
    ResolutionStatus,
    TagKind,
    TypeDeclaration,
    TypeKind,
    TypeTag,
    Visibility,
)
from arbiter.core.values import argument_values, infer_type, typed

__all__ = [
    "AmbiguousMethodError",
    "ArbiterError",
    "ArgumentValue",
    "Candidate",
    "CompatibilityTier",
    "InvalidArgumentError",
    "InvocationError",
    "InvocationTargetError",
    "MethodSignature",
    "NoMatchError",
    "ParameterList",
    "Resolution",
    "ResolutionStatus",
    "TagKind",
    "TypeDeclaration",
    "TypeKind",
    "TypeTag",
    "UnknownTypeError",
    "Visibility",
    "argument_values",
    "infer_type",
    "typed",
]
