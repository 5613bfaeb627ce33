"""Type registry validation.

This module checks a TypeRegistry for structural problems that would make
resolution fail or behave surprisingly: references to unregistered types,
classes and interfaces used in the wrong position, inheritance cycles and
duplicate overloads.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum

from arbiter.core.models import TypeTag
from arbiter.registry.base import TypeRegistry

logger = logging.getLogger(__name__)


class ValidationErrorType(str, Enum):
    """Types of validation errors."""

    DANGLING_SUPERTYPE = "dangling_supertype"
    DANGLING_DECLARING_TYPE = "dangling_declaring_type"
    INVALID_SUPERCLASS = "invalid_superclass"
    INVALID_INTERFACE = "invalid_interface"
    TYPE_ARGUMENT_MISMATCH = "type_argument_mismatch"
    INHERITANCE_CYCLE = "inheritance_cycle"
    DUPLICATE_SIGNATURE = "duplicate_signature"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    entity_id: str
    field_name: str
    invalid_ref: str
    message: str


@dataclass
class ValidationResult:
    """Result of registry validation."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    def add_error(
        self,
        error_type: ValidationErrorType,
        entity_id: str,
        field_name: str,
        invalid_ref: str,
        message: str,
    ) -> None:
        """Add a validation error."""
        logger.warning(message)
        self.errors.append(
            ValidationError(
                error_type=error_type,
                entity_id=entity_id,
                field_name=field_name,
                invalid_ref=invalid_ref,
                message=message,
            )
        )
        self.is_valid = False


def validate_registry(registry: TypeRegistry) -> ValidationResult:
    """Validate a registry for reference integrity and lattice shape.

    Args:
        registry: The registry to validate.

    Returns:
        ValidationResult containing validation status and any errors found.
    """
    result = ValidationResult(is_valid=True)

    for type_name, declaration in registry.types.items():
        superclass = declaration.superclass
        if superclass is not None:
            if declaration.is_interface:
                result.add_error(
                    error_type=ValidationErrorType.INVALID_SUPERCLASS,
                    entity_id=type_name,
                    field_name="superclass",
                    invalid_ref=str(superclass),
                    message=f"Interface '{type_name}' cannot have superclass '{superclass}'",
                )
            elif _check_reference(registry, result, type_name, "superclass", superclass):
                if registry.types[superclass.name].is_interface:
                    result.add_error(
                        error_type=ValidationErrorType.INVALID_SUPERCLASS,
                        entity_id=type_name,
                        field_name="superclass",
                        invalid_ref=str(superclass),
                        message=f"Class '{type_name}' extends interface '{superclass}'",
                    )

        for iface in declaration.interfaces:
            if not _check_reference(registry, result, type_name, "interfaces", iface):
                continue
            if not registry.types[iface.name].is_interface:
                result.add_error(
                    error_type=ValidationErrorType.INVALID_INTERFACE,
                    entity_id=type_name,
                    field_name="interfaces",
                    invalid_ref=str(iface),
                    message=f"Type '{type_name}' implements non-interface '{iface}'",
                )

    _validate_cycles(registry, result)
    return _validate_methods(registry, result)


def _check_reference(
    registry: TypeRegistry,
    result: ValidationResult,
    type_name: str,
    field_name: str,
    tag: TypeTag,
) -> bool:
    """Check that a supertype edge names a registered type with matching arguments."""
    target = registry.types.get(tag.name)
    if target is None:
        result.add_error(
            error_type=ValidationErrorType.DANGLING_SUPERTYPE,
            entity_id=type_name,
            field_name=field_name,
            invalid_ref=tag.name,
            message=f"Type '{type_name}' references non-existent type '{tag.name}'",
        )
        return False
    if tag.arguments and len(tag.arguments) != len(target.type_parameters):
        result.add_error(
            error_type=ValidationErrorType.TYPE_ARGUMENT_MISMATCH,
            entity_id=type_name,
            field_name=field_name,
            invalid_ref=str(tag),
            message=f"Type '{type_name}' passes {len(tag.arguments)} type argument(s) to "
            f"'{tag.name}', which declares {len(target.type_parameters)}",
        )
    return True


def _validate_cycles(registry: TypeRegistry, result: ValidationResult) -> None:
    """Report every registered type that is its own ancestor."""
    edges: dict[str, list[str]] = {}
    for type_name, declaration in registry.types.items():
        parents = [iface.name for iface in declaration.interfaces]
        if declaration.superclass is not None:
            parents.append(declaration.superclass.name)
        edges[type_name] = [parent for parent in parents if parent in registry.types]

    for type_name in edges:
        stack = list(edges[type_name])
        seen: set[str] = set()
        while stack:
            current = stack.pop()
            if current == type_name:
                result.add_error(
                    error_type=ValidationErrorType.INHERITANCE_CYCLE,
                    entity_id=type_name,
                    field_name="supertypes",
                    invalid_ref=type_name,
                    message=f"Type '{type_name}' inherits from itself",
                )
                break
            if current in seen:
                continue
            seen.add(current)
            stack.extend(edges.get(current, ()))


def _validate_methods(registry: TypeRegistry, result: ValidationResult) -> ValidationResult:
    """Validate method declarations in the registry.

    Args:
        registry: The registry to validate.
        result: The validation result to update.

    Returns:
        Updated ValidationResult.
    """
    for type_name, methods in registry.methods.items():
        if type_name not in registry.types:
            result.add_error(
                error_type=ValidationErrorType.DANGLING_DECLARING_TYPE,
                entity_id=type_name,
                field_name="methods",
                invalid_ref=type_name,
                message=f"Methods declared on non-existent type '{type_name}'",
            )
            continue

        by_key: dict[tuple[str, tuple[TypeTag, ...]], list[str]] = defaultdict(list)
        for method in methods:
            if method.declaring_type != type_name:
                result.add_error(
                    error_type=ValidationErrorType.DANGLING_DECLARING_TYPE,
                    entity_id=str(method),
                    field_name="declaring_type",
                    invalid_ref=method.declaring_type,
                    message=f"Method '{method}' is listed under '{type_name}'",
                )
            by_key[method.override_key].append(str(method))

        for (name, _), signatures in by_key.items():
            if len(signatures) > 1:
                result.add_error(
                    error_type=ValidationErrorType.DUPLICATE_SIGNATURE,
                    entity_id=type_name,
                    field_name="methods",
                    invalid_ref=signatures[0],
                    message=f"Type '{type_name}' declares {len(signatures)} methods "
                    f"'{name}' with the same erased parameters",
                )

    return result
