"""Built-in types, the primitive widening lattice and type-string parsing.

The primitive kinds, their boxed wrappers and the widening relation between
primitives are fixed; everything else about the lattice comes from a registry.
Type strings are parsed with tree-sitter-java.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence
from functools import lru_cache

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser

from arbiter.core.models import OBJECT_NAME, OBJECT_TAG, TagKind, TypeTag

PRIMITIVE_NAMES = ("boolean", "byte", "short", "char", "int", "long", "float", "double")

WRAPPER_NAMES: dict[str, str] = {
    "boolean": "java.lang.Boolean",
    "byte": "java.lang.Byte",
    "short": "java.lang.Short",
    "char": "java.lang.Character",
    "int": "java.lang.Integer",
    "long": "java.lang.Long",
    "float": "java.lang.Float",
    "double": "java.lang.Double",
}
_UNWRAPPED: dict[str, str] = {wrapper: prim for prim, wrapper in WRAPPER_NAMES.items()}

NUMBER_NAME = "java.lang.Number"
STRING_NAME = "java.lang.String"

# Transitive closure of byte->short->int->long->float->double and char->int.
_WIDENING: dict[str, frozenset[str]] = {
    "byte": frozenset({"short", "int", "long", "float", "double"}),
    "short": frozenset({"int", "long", "float", "double"}),
    "char": frozenset({"int", "long", "float", "double"}),
    "int": frozenset({"long", "float", "double"}),
    "long": frozenset({"float", "double"}),
    "float": frozenset({"double"}),
    "double": frozenset(),
    "boolean": frozenset(),
}

# Simple names accepted by parse_type for java.lang types.
_LANG_ALIASES: dict[str, str] = {
    name.rsplit(".", 1)[-1]: name
    for name in (*WRAPPER_NAMES.values(), OBJECT_NAME, NUMBER_NAME, STRING_NAME)
}


def primitive(name: str) -> TypeTag:
    if name not in PRIMITIVE_NAMES:
        raise ValueError(f"Not a primitive type: {name}")
    return TypeTag(kind=TagKind.PRIMITIVE, name=name)


def reference(name: str, *arguments: TypeTag) -> TypeTag:
    """Tag for a declared class or interface; wrapper names become BOXED tags."""
    kind = TagKind.BOXED if name in _UNWRAPPED else TagKind.REFERENCE
    return TypeTag(kind=kind, name=name, arguments=tuple(arguments))


def array_of(component: TypeTag) -> TypeTag:
    return TypeTag(kind=TagKind.ARRAY, name=f"{component}[]", component=component)


def type_variable(name: str, owner: str, bound: TypeTag | None = None) -> TypeTag:
    return TypeTag(kind=TagKind.VARIABLE, name=name, owner=owner, bound=bound)


BOOLEAN = primitive("boolean")
BYTE = primitive("byte")
SHORT = primitive("short")
CHAR = primitive("char")
INT = primitive("int")
LONG = primitive("long")
FLOAT = primitive("float")
DOUBLE = primitive("double")

OBJECT = OBJECT_TAG
NUMBER = reference(NUMBER_NAME)
STRING = reference(STRING_NAME)
NULL_TYPE = TypeTag(kind=TagKind.NULL, name="null")

BOXED_BOOLEAN = reference("java.lang.Boolean")
BOXED_BYTE = reference("java.lang.Byte")
BOXED_SHORT = reference("java.lang.Short")
BOXED_CHAR = reference("java.lang.Character")
BOXED_INT = reference("java.lang.Integer")
BOXED_LONG = reference("java.lang.Long")
BOXED_FLOAT = reference("java.lang.Float")
BOXED_DOUBLE = reference("java.lang.Double")


def box(tag: TypeTag) -> TypeTag | None:
    """Return the wrapper tag of a primitive, or None for anything else."""
    if not tag.is_primitive:
        return None
    return reference(WRAPPER_NAMES[tag.name])


def unbox(tag: TypeTag) -> TypeTag | None:
    """Return the primitive tag of a wrapper, or None for anything else."""
    if tag.kind is not TagKind.BOXED:
        return None
    return primitive(_UNWRAPPED[tag.name])


def widens(source: TypeTag, target: TypeTag) -> bool:
    """True if ``source`` primitive-widens to a different ``target`` primitive."""
    if not (source.is_primitive and target.is_primitive):
        return False
    return target.name in _WIDENING[source.name]


# Parameter lists are parsed as the formal parameters of a one-method class.
_SIGNATURE_TEMPLATE = "class Signature {{ void m({params}) {{}} }}"

_PARAMETER_NODES = ("formal_parameter", "spread_parameter")
_TYPE_NODES = (
    "integral_type", "floating_point_type", "boolean_type",
    "type_identifier", "generic_type", "array_type",
    "scoped_type_identifier",
)


def _node_text(node: Node, content: bytes) -> str:
    return content[node.start_byte:node.end_byte].decode("utf-8")


class JavaTypeParser:
    """Read Java type spellings into TypeTags with tree-sitter-java.

    Each parameter text becomes a formal parameter of a synthetic method, so
    ``String...`` arrives as a spread parameter and generics, arrays and
    qualified names come from the grammar.
    """

    def __init__(self) -> None:
        self._language = Language(tsjava.language())
        self._parser = Parser(self._language)
        self._lock = threading.Lock()

    def parse_parameters(
        self, texts: Sequence[str], variables: Mapping[str, TypeTag]
    ) -> tuple[tuple[TypeTag, ...], bool]:
        """Parse parameter type texts, reporting whether the last is ``T...``.

        Raises:
            ValueError: If a text is not a single well-formed type, or a
                parameter other than the last is variable-arity.
        """
        if not texts:
            return (), False
        listing = ", ".join(texts)
        params = ", ".join(f"{text} p{index}" for index, text in enumerate(texts))
        content = _SIGNATURE_TEMPLATE.format(params=params).encode("utf-8")
        with self._lock:
            tree = self._parser.parse(content)
        nodes = self._parameter_nodes(tree.root_node)
        if tree.root_node.has_error or nodes is None or len(nodes) != len(texts):
            raise ValueError(f"Malformed parameter types: {listing!r}")

        types: list[TypeTag] = []
        varargs = False
        for index, node in enumerate(nodes):
            if self._parameter_name(node, content) != f"p{index}":
                raise ValueError(f"Malformed parameter type: {texts[index]!r}")
            type_node = self._parameter_type(node)
            if type_node is None:
                raise ValueError(f"Malformed parameter type: {texts[index]!r}")
            tag = self._to_tag(type_node, content, variables)
            if node.type == "spread_parameter":
                if index != len(nodes) - 1:
                    raise ValueError(
                        f"Only the last parameter may be variable-arity: {listing!r}"
                    )
                tag = array_of(tag)
                varargs = True
            types.append(tag)
        return tuple(types), varargs

    @staticmethod
    def _parameter_nodes(root: Node) -> list[Node] | None:
        classes = root.named_children
        if len(classes) != 1 or classes[0].type != "class_declaration":
            return None
        body = classes[0].child_by_field_name("body")
        if body is None or len(body.named_children) != 1:
            return None
        method = body.named_children[0]
        if method.type != "method_declaration":
            return None
        params = method.child_by_field_name("parameters")
        if params is None:
            return None
        nodes = list(params.named_children)
        if any(node.type not in _PARAMETER_NODES for node in nodes):
            return None
        return nodes

    @staticmethod
    def _parameter_type(node: Node) -> Node | None:
        type_node = node.child_by_field_name("type")
        if type_node is not None:
            return type_node
        # spread_parameter has no type field
        for child in node.children:
            if child.type in _TYPE_NODES:
                return child
        return None

    @staticmethod
    def _parameter_name(node: Node, content: bytes) -> str | None:
        if node.type == "spread_parameter":
            declarators = [c for c in node.named_children if c.type == "variable_declarator"]
            if len(declarators) != 1:
                return None
            node = declarators[0]
        name = node.child_by_field_name("name")
        return _node_text(name, content) if name is not None else None

    def _to_tag(self, node: Node, content: bytes, variables: Mapping[str, TypeTag]) -> TypeTag:
        text = _node_text(node, content)
        if node.type in ("integral_type", "floating_point_type", "boolean_type"):
            return primitive(text)
        if node.type == "type_identifier":
            if text in variables:
                return variables[text]
            return reference(_LANG_ALIASES.get(text, text))
        if node.type == "scoped_type_identifier":
            if any(child.type == "generic_type" for child in node.named_children):
                raise ValueError(f"Member types of generic types are not supported: {text!r}")
            return reference("".join(text.split()))
        if node.type == "generic_type":
            return self._generic(node, content, variables)
        if node.type == "array_type":
            element = node.child_by_field_name("element")
            dimensions = node.child_by_field_name("dimensions")
            if element is None or dimensions is None:
                raise ValueError(f"Malformed array type: {text!r}")
            tag = self._to_tag(element, content, variables)
            for _ in range(_node_text(dimensions, content).count("[")):
                tag = array_of(tag)
            return tag
        raise ValueError(f"Unsupported type syntax: {text!r}")

    def _generic(self, node: Node, content: bytes, variables: Mapping[str, TypeTag]) -> TypeTag:
        base = None
        arguments: list[TypeTag] = []
        for child in node.named_children:
            if child.type in ("type_identifier", "scoped_type_identifier"):
                base = child
            elif child.type == "type_arguments":
                arguments = [
                    self._to_tag(argument, content, variables)
                    for argument in child.named_children
                ]
        if base is None:
            raise ValueError(f"Malformed generic type: {_node_text(node, content)!r}")
        name = "".join(_node_text(base, content).split())
        if name in variables:
            raise ValueError(f"Type variable {name} cannot take type arguments")
        return reference(_LANG_ALIASES.get(name, name), *arguments)


@lru_cache(maxsize=1)
def java_type_parser() -> JavaTypeParser:
    """Shared parser instance."""
    return JavaTypeParser()


def parse_type(text: str, variables: Mapping[str, TypeTag] | None = None) -> TypeTag:
    """Parse a Java-spelled type such as ``int[]`` or ``java.util.Map<K, V>``.

    Names found in ``variables`` resolve to those type-variable tags. A trailing
    ``...`` is read as an array; callers that care about variable arity use
    parse_parameters.

    Raises:
        ValueError: If the text is not a well-formed type.
    """
    if text.strip() == "null":
        return NULL_TYPE
    types, _ = java_type_parser().parse_parameters([text], variables or {})
    return types[0]


def parse_parameters(
    texts: Sequence[str], variables: Mapping[str, TypeTag] | None = None
) -> tuple[tuple[TypeTag, ...], bool]:
    """Parse a parameter list, reporting whether the last entry is ``T...``.

    Raises:
        ValueError: If an entry is malformed or ``...`` appears before the
            last entry.
    """
    return java_type_parser().parse_parameters(list(texts), variables or {})


def format_type(tag: TypeTag, varargs: bool = False) -> str:
    """Inverse of parse_type (``varargs`` spells a trailing array as ``...``)."""
    text = str(tag)
    if varargs and tag.is_array:
        return text[:-2] + "..."
    return text
