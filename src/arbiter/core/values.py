"""Runtime argument values and their type tags."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from arbiter.core.errors import InvalidArgumentError
from arbiter.core.models import ArgumentValue, TypeTag
from arbiter.core.typesystem import (
    BOXED_BOOLEAN,
    BOXED_DOUBLE,
    BOXED_INT,
    BOXED_LONG,
    NULL_TYPE,
    STRING,
    parse_type,
)

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

_BOOLEAN_WORDS = {"true": True, "false": False}


def typed(value: Any, type_: TypeTag | str) -> ArgumentValue:
    """Pair a value with an explicit type (a tag or a Java-spelled string)."""
    tag = parse_type(type_) if isinstance(type_, str) else type_
    return ArgumentValue(value=value, type=tag)


def infer_type(value: Any) -> TypeTag:
    """Most specific tag for a plain Python value.

    Values arrive boxed, the way reflective calls see them: ``int`` becomes
    ``java.lang.Integer`` (``java.lang.Long`` outside the 32-bit range).
    """
    if value is None:
        return NULL_TYPE
    if isinstance(value, ArgumentValue):
        return value.type
    if isinstance(value, bool):
        return BOXED_BOOLEAN
    if isinstance(value, int):
        return BOXED_INT if _INT_MIN <= value <= _INT_MAX else BOXED_LONG
    if isinstance(value, float):
        return BOXED_DOUBLE
    if isinstance(value, str):
        return STRING
    raise InvalidArgumentError(
        "Cannot infer a type", f"{type(value).__name__} value; wrap it with typed()"
    )


def argument_value(value: Any) -> ArgumentValue:
    if isinstance(value, ArgumentValue):
        return value
    return ArgumentValue(value=value, type=infer_type(value))


def argument_values(values: Iterable[Any] | None) -> tuple[ArgumentValue, ...]:
    """Normalize an argument list; ``None`` means no arguments."""
    if values is None:
        return ()
    return tuple(argument_value(value) for value in values)


def _parse_scalar(tag: TypeTag, text: str) -> Any:
    name = tag.name if tag.is_primitive else tag.simple_name
    if name in ("int", "long", "short", "byte", "Integer", "Long", "Short", "Byte"):
        return int(text)
    if name in ("float", "double", "Float", "Double"):
        return float(text)
    if name in ("boolean", "Boolean"):
        if text.lower() not in _BOOLEAN_WORDS:
            raise ValueError(f"Not a boolean: {text!r}")
        return _BOOLEAN_WORDS[text.lower()]
    if name in ("char", "Character") and len(text) != 1:
        raise ValueError(f"Not a single character: {text!r}")
    return text


def parse_argument(text: str) -> ArgumentValue:
    """Parse a command-line argument such as ``int:1``, ``String:a`` or ``null``.

    Array types take comma-separated elements (``int[]:1,2,3``). Untyped text
    is inferred: ``true``/``false``, integers and decimals become Boolean,
    Integer/Long and Double; anything else is a String.

    Raises:
        InvalidArgumentError: If the type or value cannot be parsed.
    """
    if text == "null":
        return ArgumentValue(value=None, type=NULL_TYPE)
    type_text, sep, value_text = text.partition(":")
    if not sep:
        return argument_value(_infer_literal(text))
    try:
        tag = parse_type(type_text)
        if tag.is_null:
            return ArgumentValue(value=None, type=NULL_TYPE)
        if tag.is_array and tag.component is not None:
            component = tag.component
            items = value_text.split(",") if value_text else []
            value: Any = [_parse_scalar(component, item.strip()) for item in items]
        else:
            value = _parse_scalar(tag, value_text)
    except ValueError as e:
        raise InvalidArgumentError("Cannot parse argument", f"{text!r}: {e}") from e
    return ArgumentValue(value=value, type=tag)


def _infer_literal(text: str) -> Any:
    if text.lower() in _BOOLEAN_WORDS:
        return _BOOLEAN_WORDS[text.lower()]
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            continue
    return text
