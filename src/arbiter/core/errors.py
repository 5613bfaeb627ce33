"""Error taxonomy for resolution, registry and invocation failures."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from arbiter.core.models import ArgumentValue, MethodSignature


class ArbiterError(Exception):
    """Base error carrying a short message and optional details."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message if details is None else f"{message}: {details}")
        self.message = message
        self.details = details


class InvalidArgumentError(ArbiterError, ValueError):
    """A required input was missing or malformed."""


class UnknownTypeError(InvalidArgumentError):
    """A type name is not present in the registry."""

    def __init__(self, type_name: str) -> None:
        super().__init__("Unknown type", type_name)
        self.type_name = type_name


def describe_arguments(arguments: Sequence[ArgumentValue]) -> str:
    return "(" + ", ".join(str(argument.type) for argument in arguments) + ")"


class NoMatchError(ArbiterError):
    """No applicable (or no accessible) method for a call."""

    def __init__(
        self,
        type_name: str,
        method_name: str,
        arguments: Sequence[ArgumentValue],
        reason: str = "No applicable method",
    ) -> None:
        super().__init__(reason, f"{type_name}.{method_name}{describe_arguments(arguments)}")
        self.type_name = type_name
        self.method_name = method_name
        self.arguments = tuple(arguments)


class AmbiguousMethodError(ArbiterError):
    """Raised when more than one candidate remains undominated."""

    def __init__(
        self,
        type_name: str,
        method_name: str,
        arguments: Sequence[ArgumentValue],
        matches: Sequence[MethodSignature],
    ) -> None:
        self.matches = list(matches)
        super().__init__(
            f"Ambiguous: {len(self.matches)} candidates",
            f"{type_name}.{method_name}{describe_arguments(arguments)} matches "
            + ", ".join(method.short_form for method in self.matches),
        )
        self.type_name = type_name
        self.method_name = method_name
        self.arguments = tuple(arguments)


class InvocationError(ArbiterError):
    """A resolved method could not be invoked."""

    def __init__(self, method: MethodSignature, reason: str) -> None:
        super().__init__(reason, str(method))
        self.method = method


class InvocationTargetError(InvocationError):
    """The invoked method itself raised; the original error is ``__cause__``."""

    def __init__(self, method: MethodSignature, error: BaseException) -> None:
        super().__init__(method, f"Target raised {type(error).__name__}")
        self.error = error
