"""Member listing interfaces and the in-memory type registry.

The resolver only depends on the MemberLister and AnnotationStore protocols.
TypeRegistry implements both over explicitly declared types and methods, with
a lazily built, memoized member index per type.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable as CallableFunc, Iterable, Iterator
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, PrivateAttr

from arbiter.core.config import ArbiterConfig, get_config
from arbiter.core.errors import UnknownTypeError
from arbiter.core.models import (
    OBJECT_NAME,
    MethodSignature,
    ParameterList,
    TypeDeclaration,
    TypeKind,
    TypeTag,
    Visibility,
)
from arbiter.core.typesystem import (
    NUMBER_NAME,
    OBJECT,
    STRING_NAME,
    WRAPPER_NAMES,
    parse_parameters,
    parse_type,
    type_variable,
)

logger = logging.getLogger(__name__)

_NUMERIC_WRAPPERS = ("byte", "short", "int", "long", "float", "double")

BUILTIN_TYPES: frozenset[str] = frozenset(
    {OBJECT_NAME, NUMBER_NAME, STRING_NAME, *WRAPPER_NAMES.values()}
)


@runtime_checkable
class MemberLister(Protocol):
    """Read-only view of declared types and their members."""

    def declaration_of(self, type_name: str) -> TypeDeclaration: ...

    def supertypes_of(self, type_name: str) -> tuple[TypeTag | None, tuple[TypeTag, ...]]: ...

    def declared_members_of(self, type_name: str) -> frozenset[MethodSignature]: ...

    def members_of(self, type_name: str) -> frozenset[MethodSignature]: ...

    def hierarchy(self, type_name: str, include_interfaces: bool = True) -> Iterator[str]: ...


@runtime_checkable
class AnnotationStore(Protocol):
    """Read-only association from methods to marker names."""

    def annotations_of(self, method: MethodSignature) -> frozenset[str]: ...


class TypeRegistry(BaseModel):
    """Registry of type declarations and their methods.

    Java's ``java.lang`` basics (Object, Number, String and the eight
    wrappers) are registered on construction.

    Member indexes are memoized when the registry's ``config`` (or the
    global configuration) enables ``cache_members``.
    """

    types: dict[str, TypeDeclaration] = Field(
        default_factory=dict, description="qualified_name -> declaration"
    )
    methods: dict[str, list[MethodSignature]] = Field(
        default_factory=dict, description="qualified_name -> declared methods"
    )
    config: ArbiterConfig | None = Field(
        default=None, exclude=True, description="Configuration (defaults to get_config())"
    )

    _annotations: dict[MethodSignature, frozenset[str]] = PrivateAttr(default_factory=dict)
    _implementations: dict[MethodSignature, CallableFunc[..., Any]] = PrivateAttr(
        default_factory=dict
    )
    _member_cache: dict[str, frozenset[MethodSignature]] = PrivateAttr(default_factory=dict)
    _lock: Any = PrivateAttr(default_factory=threading.RLock)

    def model_post_init(self, __context: Any) -> None:
        self._register_builtins()

    def _register_builtins(self) -> None:
        if OBJECT_NAME not in self.types:
            self.add_type(OBJECT_NAME)
            self.add_method(OBJECT_NAME, "toString")
            self.add_method(OBJECT_NAME, "hashCode")
            self.add_method(OBJECT_NAME, "equals", [OBJECT_NAME])
        if NUMBER_NAME not in self.types:
            self.add_type(NUMBER_NAME)
        for prim, wrapper in WRAPPER_NAMES.items():
            if wrapper not in self.types:
                superclass = NUMBER_NAME if prim in _NUMERIC_WRAPPERS else None
                self.add_type(wrapper, superclass=superclass)
        if STRING_NAME not in self.types:
            self.add_type(STRING_NAME)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_type(
        self,
        name: str,
        kind: TypeKind = TypeKind.CLASS,
        *,
        visibility: Visibility = Visibility.PUBLIC,
        superclass: TypeTag | str | None = None,
        interfaces: Iterable[TypeTag | str] = (),
        type_parameters: Iterable[str] = (),
    ) -> TypeDeclaration:
        """Register (or replace) a type declaration.

        Supertypes may be tags or Java-spelled strings; strings can refer to
        the new type's own type parameters, e.g. ``GenericConsumer<T>``.
        Supertypes need not be registered yet; see validate_registry.
        """
        params = list(type_parameters)
        variables = {param: type_variable(param, name) for param in params}
        declaration = TypeDeclaration(
            name=name,
            kind=kind,
            visibility=visibility,
            superclass=self._as_tag(superclass, variables) if superclass is not None else None,
            interfaces=[self._as_tag(iface, variables) for iface in interfaces],
            type_parameters=params,
        )
        return self.add_declaration(declaration)

    def add_declaration(self, declaration: TypeDeclaration) -> TypeDeclaration:
        with self._lock:
            self.types[declaration.name] = declaration
            self.methods.setdefault(declaration.name, [])
            self._member_cache.clear()
        return declaration

    def add_method(
        self,
        declaring_type: str,
        name: str,
        parameters: Iterable[TypeTag | str] = (),
        *,
        varargs: bool | None = None,
        visibility: Visibility = Visibility.PUBLIC,
        is_static: bool = False,
        annotations: Iterable[str] = (),
        implementation: CallableFunc[..., Any] | None = None,
    ) -> MethodSignature:
        """Declare a method on a registered type.

        String parameters ending in ``...`` mark the method variable-arity
        unless ``varargs`` is given explicitly.

        Raises:
            UnknownTypeError: If ``declaring_type`` is not registered.
        """
        self.declaration_of(declaring_type)
        variables = self.variables_of(declaring_type)
        raw = list(parameters)
        texts = [param for param in raw if isinstance(param, str)]
        if len(texts) == len(raw):
            types, detected = parse_parameters(texts, variables)
        else:
            types = tuple(self._as_tag(param, variables) for param in raw)
            detected = False
        signature = MethodSignature(
            declaring_type=declaring_type,
            name=name,
            parameters=ParameterList(types=types, varargs=detected if varargs is None else varargs),
            visibility=visibility,
            is_static=is_static,
        )
        self.add_signature(signature, annotations=annotations)
        if implementation is not None:
            self.bind_implementation(signature, implementation)
        return signature

    def add_signature(self, signature: MethodSignature, annotations: Iterable[str] = ()) -> None:
        self.declaration_of(signature.declaring_type)
        with self._lock:
            declared = self.methods.setdefault(signature.declaring_type, [])
            if signature not in declared:
                declared.append(signature)
            markers = frozenset(annotations)
            if markers:
                self._annotations[signature] = self._annotations.get(signature, frozenset()) | markers
            self._member_cache.clear()

    def bind_implementation(
        self, method: MethodSignature, implementation: CallableFunc[..., Any]
    ) -> None:
        """Attach the Python callable that runs when ``method`` is invoked."""
        self._implementations[method] = implementation

    def implementation_of(self, method: MethodSignature) -> CallableFunc[..., Any] | None:
        return self._implementations.get(method)

    def variables_of(self, type_name: str) -> dict[str, TypeTag]:
        """Type-variable tags declared by ``type_name``, keyed by name."""
        declaration = self.declaration_of(type_name)
        return {param: type_variable(param, type_name) for param in declaration.type_parameters}

    @staticmethod
    def _as_tag(value: TypeTag | str, variables: dict[str, TypeTag]) -> TypeTag:
        return parse_type(value, variables) if isinstance(value, str) else value

    # ------------------------------------------------------------------
    # MemberLister
    # ------------------------------------------------------------------

    def has_type(self, type_name: str) -> bool:
        return type_name in self.types

    def declaration_of(self, type_name: str) -> TypeDeclaration:
        """Get a type declaration.

        Raises:
            UnknownTypeError: If the type is not registered.
        """
        declaration = self.types.get(type_name)
        if declaration is None:
            raise UnknownTypeError(type_name)
        return declaration

    def is_interface(self, type_name: str) -> bool:
        return self.declaration_of(type_name).is_interface

    def supertypes_of(self, type_name: str) -> tuple[TypeTag | None, tuple[TypeTag, ...]]:
        """Return (superclass, interfaces); classes default to extending Object."""
        declaration = self.declaration_of(type_name)
        superclass = declaration.superclass
        if superclass is None and not declaration.is_interface and type_name != OBJECT_NAME:
            superclass = OBJECT
        return superclass, tuple(declaration.interfaces)

    def hierarchy(self, type_name: str, include_interfaces: bool = True) -> Iterator[str]:
        """Iterate a type and its supertypes.

        Each class of the superclass chain is followed by its not yet seen
        interfaces, depth first.
        """
        seen: set[str] = set()
        current: str | None = type_name
        while current is not None and current not in seen:
            seen.add(current)
            yield current
            superclass, interfaces = self.supertypes_of(current)
            if include_interfaces:
                yield from self._walk_interfaces(interfaces, seen)
            current = superclass.name if superclass is not None else None

    def _walk_interfaces(self, interfaces: tuple[TypeTag, ...], seen: set[str]) -> Iterator[str]:
        for iface in interfaces:
            if iface.name in seen:
                continue
            seen.add(iface.name)
            yield iface.name
            yield from self._walk_interfaces(self.supertypes_of(iface.name)[1], seen)

    def declared_members_of(self, type_name: str) -> frozenset[MethodSignature]:
        self.declaration_of(type_name)
        return frozenset(self.methods.get(type_name, ()))

    def members_of(self, type_name: str) -> frozenset[MethodSignature]:
        """Declared plus inherited members, one per override key.

        The most-derived declaration of each key wins. Private ancestor
        methods and static interface methods are not inherited.
        """
        config = self.config if self.config is not None else get_config()
        use_cache = config.cache_members
        if use_cache:
            cached = self._member_cache.get(type_name)
            if cached is not None:
                return cached
        with self._lock:
            members = self._collect_members(type_name)
            if use_cache:
                self._member_cache[type_name] = members
        return members

    def _collect_members(self, type_name: str) -> frozenset[MethodSignature]:
        self.declaration_of(type_name)
        seen_keys: set[tuple[str, tuple[TypeTag, ...]]] = set()
        members: list[MethodSignature] = []
        for owner in self.hierarchy(type_name):
            inherited = owner != type_name
            owner_is_interface = self.types[owner].is_interface
            for method in self.methods.get(owner, ()):
                if inherited and (
                    method.visibility is Visibility.PRIVATE
                    or (method.is_static and owner_is_interface)
                ):
                    continue
                key = method.override_key
                if key in seen_keys:
                    continue
                seen_keys.add(key)
                members.append(method)
        logger.debug(f"Indexed {len(members)} members for {type_name}")
        return frozenset(members)

    # ------------------------------------------------------------------
    # AnnotationStore
    # ------------------------------------------------------------------

    def annotations_of(self, method: MethodSignature) -> frozenset[str]:
        return self._annotations.get(method, frozenset())

    def user_types(self) -> list[TypeDeclaration]:
        """Declarations other than the pre-registered java.lang basics."""
        return [decl for name, decl in self.types.items() if name not in BUILTIN_TYPES]
