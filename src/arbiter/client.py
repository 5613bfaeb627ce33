"""Public client interface for Arbiter.

Arbiter exposes lower-level building blocks (registry/, resolution/ and
services/). This module provides a stable, ergonomic entrypoint for external
callers.
"""

from __future__ import annotations

from pathlib import Path

from arbiter.core.config import ArbiterConfig
from arbiter.core.serializer import dump_universe, load_universe
from arbiter.core.validator import ValidationResult, validate_registry
from arbiter.registry.base import TypeRegistry
from arbiter.services.invocation import Invoker
from arbiter.services.method_service import MethodService


class ArbiterClient:
    """High-level client that owns a type registry and exposes services."""

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        *,
        config: ArbiterConfig | None = None,
        invoker: Invoker | None = None,
    ) -> None:
        """Create an Arbiter client.

        Args:
            registry: Optional pre-built registry (a fresh one by default).
                A pre-built registry keeps its own ``config`` for member
                caching.
            config: Optional configuration (defaults to get_config()).
            invoker: Optional invoker for the invoke_* operations.
        """
        self._registry = registry if registry is not None else TypeRegistry(config=config)
        self._config = config
        self._invoker = invoker
        self._methods: MethodService | None = None

    @classmethod
    def from_file(cls, path: str | Path, *, config: ArbiterConfig | None = None) -> ArbiterClient:
        """Create a client over a type universe file.

        Raises:
            SerializationError: If the file cannot be read or parsed.
        """
        registry = load_universe(path)
        registry.config = config
        return cls(registry, config=config)

    @property
    def registry(self) -> TypeRegistry:
        """Access the underlying type registry."""
        return self._registry

    @property
    def methods(self) -> MethodService:
        """Method resolution service."""
        if self._methods is None:
            self._methods = MethodService(
                self._registry, invoker=self._invoker, config=self._config
            )
        return self._methods

    def validate(self) -> ValidationResult:
        """Check the registry for dangling references, cycles and duplicates."""
        return validate_registry(self._registry)

    def save(self, path: str | Path) -> None:
        """Write the registry as a type universe file."""
        dump_universe(self._registry, path)
