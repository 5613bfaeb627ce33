"""Unit tests for type universe serialization."""

import json

import pytest

from arbiter.core.models import Visibility
from arbiter.core.serializer import (
    SerializationError,
    deserialize,
    deserialize_from_dict,
    dump_universe,
    load_universe,
    serialize,
    serialize_to_dict,
)
from arbiter.core.typesystem import STRING, reference
from arbiter.registry.base import TypeRegistry


def _type_doc(data: dict, name: str) -> dict:
    (doc,) = [entry for entry in data["types"] if entry["name"] == name]
    return doc


class TestSerialize:
    """Writing registries out."""

    def test_builtins_not_written(self, shared_registry: TypeRegistry) -> None:
        names = {entry["name"] for entry in serialize_to_dict(shared_registry)["types"]}
        assert "java.lang.Object" not in names
        assert "example.TestBean" in names

    def test_empty_registry(self) -> None:
        assert serialize_to_dict(TypeRegistry()) == {"version": "1.0", "types": []}

    def test_varargs_spelling(self, shared_registry: TypeRegistry) -> None:
        bean = _type_doc(serialize_to_dict(shared_registry), "example.TestBean")
        prefixed = [
            method for method in bean["methods"]
            if method["name"] == "foo" and len(method["parameters"]) == 2
        ]
        assert prefixed == [
            {
                "name": "foo",
                "parameters": ["java.lang.Integer", "java.lang.String..."],
                "varargs": True,
                "visibility": "public",
                "static": False,
                "annotations": [],
            }
        ]

    def test_generic_declarations(self, shared_registry: TypeRegistry) -> None:
        data = serialize_to_dict(shared_registry)
        parent = _type_doc(data, "example.GenericParent")
        assert parent["type_parameters"] == ["T"]
        assert parent["interfaces"] == ["example.GenericConsumer<T>"]
        assert parent["methods"][0]["parameters"] == ["T"]
        child = _type_doc(data, "example.StringParameterizedChild")
        assert child["superclass"] == "example.GenericParent<java.lang.String>"

    def test_modifiers_and_annotations(self, shared_registry: TypeRegistry) -> None:
        data = serialize_to_dict(shared_registry)
        assert _type_doc(data, "example.TestMutable")["visibility"] == "private"
        suite = _type_doc(data, "example.AnnotatedSuite")
        marked = [m["name"] for m in suite["methods"] if m["annotations"] == ["Annotated"]]
        assert len(marked) == 2

    def test_serialize_is_json(self, shared_registry: TypeRegistry) -> None:
        assert json.loads(serialize(shared_registry)) == serialize_to_dict(shared_registry)


class TestDeserialize:
    """Reading registries back."""

    def test_structure_survives(self, shared_registry: TypeRegistry) -> None:
        restored = deserialize(serialize(shared_registry))
        assert set(restored.types) == set(shared_registry.types)
        for name, methods in shared_registry.methods.items():
            assert set(restored.methods[name]) == set(methods)

    def test_generic_edges_restored(self, shared_registry: TypeRegistry) -> None:
        restored = deserialize(serialize(shared_registry))
        superclass, _ = restored.supertypes_of("example.StringParameterizedChild")
        assert superclass == reference("example.GenericParent", STRING)

    def test_annotations_restored(self, shared_registry: TypeRegistry) -> None:
        restored = deserialize(serialize(shared_registry))
        marked = [
            method for method in restored.members_of("example.AnnotatedSuite")
            if "Annotated" in restored.annotations_of(method)
        ]
        assert len(marked) == 2

    def test_implementations_not_serialized(self, shared_registry: TypeRegistry) -> None:
        restored = deserialize(serialize(shared_registry))
        (method,) = [m for m in restored.members_of("example.TestBean") if m.short_form == "foo(int)"]
        assert restored.implementation_of(method) is None

    def test_forward_references(self) -> None:
        registry = deserialize_from_dict(
            {
                "types": [
                    {"name": "com.example.Impl", "superclass": "com.example.Base",
                     "methods": [{"name": "run", "parameters": ["com.example.Base"]}]},
                    {"name": "com.example.Base", "visibility": "package"},
                ]
            }
        )
        assert registry.declaration_of("com.example.Base").visibility is Visibility.PACKAGE
        assert list(registry.hierarchy("com.example.Impl"))[1] == "com.example.Base"

    def test_invalid_json(self) -> None:
        with pytest.raises(SerializationError) as info:
            deserialize("{not json")
        assert info.value.message == "Invalid JSON format"
        assert "Line 1" in info.value.details

    def test_schema_violation(self) -> None:
        with pytest.raises(SerializationError) as info:
            deserialize_from_dict({"types": [{"kind": "CLASS"}]})
        assert info.value.message == "Type universe validation failed"
        assert "types.0.name" in info.value.details

    def test_malformed_type_string(self) -> None:
        with pytest.raises(SerializationError) as info:
            deserialize_from_dict({"types": [{"name": "com.example.Bad", "superclass": "List<"}]})
        assert info.value.message == "Invalid type universe"

    def test_varargs_flag_on_non_array(self) -> None:
        data = {
            "types": [
                {"name": "com.example.Bad",
                 "methods": [{"name": "m", "parameters": ["int"], "varargs": True}]}
            ]
        }
        with pytest.raises(SerializationError) as info:
            deserialize_from_dict(data)
        assert info.value.message == "Invalid method declaration"

    def test_varargs_before_last_parameter(self) -> None:
        data = {
            "types": [
                {"name": "com.example.Bad",
                 "methods": [{"name": "m", "parameters": ["String...", "int"]}]}
            ]
        }
        with pytest.raises(SerializationError) as info:
            deserialize_from_dict(data)
        assert info.value.message == "Invalid type universe"
        assert "last parameter" in info.value.details


class TestFiles:
    """Reading and writing universe files."""

    def test_dump_and_load(self, shared_registry: TypeRegistry, tmp_path) -> None:
        path = tmp_path / "universe.json"
        dump_universe(shared_registry, path)
        restored = load_universe(path)
        assert set(restored.types) == set(shared_registry.types)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(SerializationError, match="Cannot read type universe"):
            load_universe(tmp_path / "missing.json")
