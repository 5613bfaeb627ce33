"""Type universe serialization and deserialization.

A type universe is a JSON document listing type declarations and their
methods. Type strings use Java source spelling (``int``, ``String[]``,
``java.util.List<T>``, ``Object...``) and may refer to the declaring type's
own type parameters. The java.lang basics are pre-registered by every
TypeRegistry and are not written out.

Example:
    {
      "types": [
        {"name": "com.example.Base", "kind": "INTERFACE",
         "methods": [{"name": "run", "parameters": ["int", "String..."]}]}
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from arbiter.core.errors import ArbiterError
from arbiter.core.models import TypeKind, Visibility
from arbiter.core.typesystem import format_type
from arbiter.registry.base import TypeRegistry


class SerializationError(ArbiterError):
    """Error during serialization or deserialization."""


class MethodDocument(BaseModel):
    """A method as written in a type universe document."""

    name: str = Field(..., description="Method name")
    parameters: list[str] = Field(default_factory=list, description="Parameter type strings")
    varargs: bool | None = Field(None, description="Explicit variable-arity flag (default: trailing ...)")
    visibility: Visibility = Visibility.PUBLIC
    static: bool = False
    annotations: list[str] = Field(default_factory=list, description="Marker annotation names")


class TypeDocument(BaseModel):
    """A type declaration as written in a type universe document."""

    name: str = Field(..., description="Fully qualified name")
    kind: TypeKind = TypeKind.CLASS
    visibility: Visibility = Visibility.PUBLIC
    superclass: str | None = None
    interfaces: list[str] = Field(default_factory=list)
    type_parameters: list[str] = Field(default_factory=list)
    methods: list[MethodDocument] = Field(default_factory=list)


class UniverseDocument(BaseModel):
    """Root of a type universe document."""

    version: str = "1.0"
    types: list[TypeDocument] = Field(default_factory=list)


def _format_errors(error: ValidationError) -> str:
    error_details = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"])
        error_details.append(f"{loc}: {err['msg']}")
    return "; ".join(error_details)


def to_document(registry: TypeRegistry) -> UniverseDocument:
    """Describe the user-declared part of a registry as a document."""
    types = []
    for declaration in registry.user_types():
        methods = []
        for method in registry.methods.get(declaration.name, []):
            params = method.parameters
            methods.append(
                MethodDocument(
                    name=method.name,
                    parameters=[
                        format_type(tag, params.varargs and index == len(params) - 1)
                        for index, tag in enumerate(params.types)
                    ],
                    varargs=params.varargs or None,
                    visibility=method.visibility,
                    static=method.is_static,
                    annotations=sorted(registry.annotations_of(method)),
                )
            )
        types.append(
            TypeDocument(
                name=declaration.name,
                kind=declaration.kind,
                visibility=declaration.visibility,
                superclass=str(declaration.superclass) if declaration.superclass else None,
                interfaces=[str(iface) for iface in declaration.interfaces],
                type_parameters=list(declaration.type_parameters),
                methods=methods,
            )
        )
    return UniverseDocument(types=types)


def from_document(document: UniverseDocument) -> TypeRegistry:
    """Build a registry from a document.

    All types are declared before any method so that declarations may refer to
    each other in any order.

    Raises:
        SerializationError: If a type string or parameter list is malformed.
    """
    registry = TypeRegistry()
    try:
        for type_doc in document.types:
            registry.add_type(
                type_doc.name,
                type_doc.kind,
                visibility=type_doc.visibility,
                superclass=type_doc.superclass,
                interfaces=type_doc.interfaces,
                type_parameters=type_doc.type_parameters,
            )
        for type_doc in document.types:
            for method_doc in type_doc.methods:
                registry.add_method(
                    type_doc.name,
                    method_doc.name,
                    method_doc.parameters,
                    varargs=method_doc.varargs,
                    visibility=method_doc.visibility,
                    is_static=method_doc.static,
                    annotations=method_doc.annotations,
                )
    except ValidationError as e:
        raise SerializationError(
            message="Invalid method declaration",
            details=_format_errors(e),
        ) from e
    except ValueError as e:
        raise SerializationError(
            message="Invalid type universe",
            details=str(e),
        ) from e
    return registry


def serialize(registry: TypeRegistry) -> str:
    """Serialize a registry to a JSON type universe.

    Args:
        registry: The registry to serialize.

    Returns:
        JSON string representation of the user-declared types.

    Raises:
        SerializationError: If serialization fails.
    """
    try:
        data = serialize_to_dict(registry)
        return json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            message="Failed to serialize type universe",
            details=str(e),
        ) from e


def deserialize(json_str: str) -> TypeRegistry:
    """Deserialize a JSON type universe into a registry.

    Args:
        json_str: JSON string representation of a type universe.

    Returns:
        A registry holding the declared types and methods.

    Raises:
        SerializationError: If deserialization fails with detailed error info.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise SerializationError(
            message="Invalid JSON format",
            details=f"Line {e.lineno}, column {e.colno}: {e.msg}",
        ) from e
    return deserialize_from_dict(data)


def serialize_to_dict(registry: TypeRegistry) -> dict[str, Any]:
    """Serialize a registry to a dictionary.

    Args:
        registry: The registry to serialize.

    Returns:
        Dictionary representation of the type universe.
    """
    return to_document(registry).model_dump(mode="json", exclude_none=True)


def deserialize_from_dict(data: dict[str, Any]) -> TypeRegistry:
    """Deserialize a dictionary to a registry.

    Args:
        data: Dictionary representation of a type universe.

    Returns:
        The deserialized registry.

    Raises:
        SerializationError: If deserialization fails.
    """
    try:
        document = UniverseDocument.model_validate(data)
    except ValidationError as e:
        raise SerializationError(
            message="Type universe validation failed",
            details=_format_errors(e),
        ) from e
    return from_document(document)


def load_universe(path: str | Path) -> TypeRegistry:
    """Read a type universe file.

    Raises:
        SerializationError: If the file cannot be read or parsed.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SerializationError(message="Cannot read type universe", details=str(e)) from e
    return deserialize(text)


def dump_universe(registry: TypeRegistry, path: str | Path) -> None:
    """Write ``registry`` as a type universe file."""
    Path(path).write_text(serialize(registry), encoding="utf-8")
