"""Data models for Arbiter runtime overload resolution.

This module defines the type tags, parameter lists and method signatures that
describe a declared type lattice, plus the per-resolution records (argument
values, candidates, resolution outcomes) built on top of them.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

OBJECT_NAME = "java.lang.Object"


class TagKind(str, Enum):
    """Kind of type tag."""

    PRIMITIVE = "primitive"
    BOXED = "boxed"
    REFERENCE = "reference"
    ARRAY = "array"
    NULL = "null"
    VARIABLE = "variable"


class TypeKind(str, Enum):
    """Kind of type declaration."""

    CLASS = "CLASS"
    INTERFACE = "INTERFACE"
    ENUM = "ENUM"


class Visibility(str, Enum):
    """Visibility/access modifier."""

    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"
    PACKAGE = "package"  # Java default


class CompatibilityTier(IntEnum):
    """How an argument fits a parameter, most preferred first."""

    EXACT = 0
    WIDENING_PRIMITIVE = 1
    BOXING_OR_UNBOXING = 2
    WIDENING_REFERENCE = 3
    VARARGS_EXPANSION = 4


class TypeTag(BaseModel):
    """Identity of a type as seen by the resolver.

    Reference tags may carry type arguments (``List<String>``), array tags a
    component, and type variables the name of the type that declares them plus
    an optional bound.
    """

    model_config = ConfigDict(frozen=True)

    kind: TagKind
    name: str
    component: TypeTag | None = None
    arguments: tuple[TypeTag, ...] = ()
    owner: str | None = None
    bound: TypeTag | None = None

    @property
    def is_primitive(self) -> bool:
        return self.kind is TagKind.PRIMITIVE

    @property
    def is_null(self) -> bool:
        return self.kind is TagKind.NULL

    @property
    def is_array(self) -> bool:
        return self.kind is TagKind.ARRAY

    @property
    def is_variable(self) -> bool:
        return self.kind is TagKind.VARIABLE

    @property
    def is_reference(self) -> bool:
        """True for anything a reference (or null) may be assigned to."""
        return self.kind in (TagKind.BOXED, TagKind.REFERENCE, TagKind.ARRAY, TagKind.VARIABLE)

    @property
    def is_declared(self) -> bool:
        """True for tags naming a declared class or interface."""
        return self.kind in (TagKind.BOXED, TagKind.REFERENCE)

    def erasure(self) -> TypeTag:
        """Return the raw form of this tag (no type arguments, no variables)."""
        if self.kind is TagKind.VARIABLE:
            return self.bound.erasure() if self.bound is not None else OBJECT_TAG
        if self.kind is TagKind.ARRAY and self.component is not None:
            component = self.component.erasure()
            if component == self.component:
                return self
            return TypeTag(kind=TagKind.ARRAY, name=f"{component}[]", component=component)
        if self.arguments:
            return TypeTag(kind=self.kind, name=self.name)
        return self

    def contains_variables(self) -> bool:
        if self.kind is TagKind.VARIABLE:
            return True
        if self.component is not None and self.component.contains_variables():
            return True
        return any(arg.contains_variables() for arg in self.arguments)

    @property
    def simple_name(self) -> str:
        if self.kind is TagKind.ARRAY and self.component is not None:
            return f"{self.component.simple_name}[]"
        base = self.name.rsplit(".", 1)[-1]
        if self.arguments:
            return f"{base}<{', '.join(arg.simple_name for arg in self.arguments)}>"
        return base

    def __str__(self) -> str:
        if self.arguments:
            return f"{self.name}<{', '.join(str(arg) for arg in self.arguments)}>"
        return self.name


OBJECT_TAG = TypeTag(kind=TagKind.REFERENCE, name=OBJECT_NAME)


class ParameterList(BaseModel):
    """Ordered parameter types; the last one may be variable-arity."""

    model_config = ConfigDict(frozen=True)

    types: tuple[TypeTag, ...] = ()
    varargs: bool = False

    @model_validator(mode="after")
    def _check_varargs(self) -> ParameterList:
        if self.varargs and (not self.types or not self.types[-1].is_array):
            raise ValueError("variable-arity parameter must be the last parameter and an array type")
        return self

    def __len__(self) -> int:
        return len(self.types)

    @property
    def fixed_prefix(self) -> tuple[TypeTag, ...]:
        """Parameters before the variable-arity slot (all of them otherwise)."""
        return self.types[:-1] if self.varargs else self.types

    @property
    def varargs_element(self) -> TypeTag | None:
        if not self.varargs:
            return None
        return self.types[-1].component

    def erasure(self) -> tuple[TypeTag, ...]:
        return tuple(param.erasure() for param in self.types)

    def format(self, simple: bool = False) -> str:
        parts = [param.simple_name if simple else str(param) for param in self.types]
        if self.varargs and parts:
            parts[-1] = parts[-1][:-2] + "..."
        return f"({', '.join(parts)})"

    def __str__(self) -> str:
        return self.format()


class MethodSignature(BaseModel):
    """A declared method.

    Two declarations on the same type with the same name and erased parameter
    list are the same overload; the static flag is not part of that key.
    """

    model_config = ConfigDict(frozen=True)

    declaring_type: str = Field(..., description="Qualified name of the declaring type")
    name: str = Field(..., description="Method name")
    parameters: ParameterList = Field(default_factory=ParameterList)
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def is_varargs(self) -> bool:
        return self.parameters.varargs

    @property
    def override_key(self) -> tuple[str, tuple[TypeTag, ...]]:
        return (self.name, self.parameters.erasure())

    @property
    def short_form(self) -> str:
        """Name plus simple parameter names, e.g. ``foo(Integer, String...)``."""
        return f"{self.name}{self.parameters.format(simple=True)}"

    def __str__(self) -> str:
        return f"{self.declaring_type}.{self.name}{self.parameters}"


def signature_sort_key(method: MethodSignature) -> tuple[str, str, str, bool]:
    """Deterministic ordering for sets of signatures."""
    return (method.declaring_type, method.name, str(method.parameters), method.is_static)


class TypeDeclaration(BaseModel):
    """Declaration of a class, interface or enum in the type lattice."""

    name: str = Field(..., description="Fully qualified name")
    kind: TypeKind = TypeKind.CLASS
    visibility: Visibility = Visibility.PUBLIC
    superclass: TypeTag | None = Field(None, description="Explicit superclass (may be parameterized)")
    interfaces: list[TypeTag] = Field(default_factory=list, description="Implemented/extended interfaces")
    type_parameters: list[str] = Field(default_factory=list, description="Declared type variable names")

    @property
    def is_interface(self) -> bool:
        return self.kind is TypeKind.INTERFACE

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC


class ArgumentValue(BaseModel):
    """A runtime argument together with its most specific type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None
    type: TypeTag

    @property
    def is_null(self) -> bool:
        return self.type.is_null


class Candidate(BaseModel):
    """An applicable method scored against one argument list.

    ``tiers``, ``natural_tiers`` and ``matched_types`` hold one entry per
    argument. Trailing arguments of an expanded varargs call have their tier
    tagged VARARGS_EXPANSION while ``natural_tiers`` keeps the tier the oracle
    reported against the element type.
    """

    model_config = ConfigDict(frozen=True)

    method: MethodSignature
    tiers: tuple[CompatibilityTier, ...] = ()
    natural_tiers: tuple[CompatibilityTier, ...] = ()
    matched_types: tuple[TypeTag, ...] = ()
    expanded: bool = False
    trailing: int = 0


class ResolutionStatus(str, Enum):
    """Outcome of an overload resolution."""

    RESOLVED = "resolved"
    NO_MATCH = "no_match"
    AMBIGUOUS = "ambiguous"


class Resolution(BaseModel):
    """Result of ranking candidates against one argument list."""

    model_config = ConfigDict(frozen=True)

    status: ResolutionStatus
    method: MethodSignature | None = None
    contenders: tuple[Candidate, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED
