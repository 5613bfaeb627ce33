"""Overload resolver.

Resolution runs in two passes. The direct pass keeps candidates whose arity
equals the argument count (a varargs slot counts as one array parameter) and
whose every parameter accepts its argument. Only when that pass finds nothing
does the expansion pass try variable-arity candidates with their trailing
arguments matched against the element type. Survivors are ranked with the
SpecificityComparator and the unique undominated one wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from arbiter.core.config import ArbiterConfig, get_config
from arbiter.core.models import (
    ArgumentValue,
    Candidate,
    CompatibilityTier,
    MethodSignature,
    Resolution,
    ResolutionStatus,
    signature_sort_key,
)
from arbiter.registry.base import MemberLister
from arbiter.resolution.comparator import SpecificityComparator
from arbiter.resolution.lattice import TypeLattice
from arbiter.resolution.oracle import CompatibilityOracle

logger = logging.getLogger(__name__)


class OverloadResolver:
    """Pick the most specific applicable method for an argument list.

    The resolver keeps no state between calls; every call builds its own
    lattice, oracle and comparator.
    """

    def __init__(self, lister: MemberLister, config: ArbiterConfig | None = None) -> None:
        self._lister = lister
        self._config = config

    @property
    def config(self) -> ArbiterConfig:
        return self._config or get_config()

    def _oracle(self) -> CompatibilityOracle:
        return CompatibilityOracle(TypeLattice(self._lister))

    def resolve(
        self, candidates: Iterable[MethodSignature], arguments: Sequence[ArgumentValue]
    ) -> Resolution:
        """Rank ``candidates`` against ``arguments``.

        Returns:
            A Resolution that is RESOLVED with the winning method, NO_MATCH
            when nothing applies, or AMBIGUOUS with the undominated contenders.
        """
        config = self.config
        oracle = self._oracle()
        ordered = sorted(candidates, key=signature_sort_key)

        applicable = [
            candidate
            for method in ordered
            if (candidate := self._direct(oracle, method, arguments)) is not None
        ]
        if not applicable or not config.prefer_direct_over_varargs:
            applicable += [
                candidate
                for method in ordered
                if (candidate := self._expanded(oracle, method, arguments)) is not None
            ]

        if not applicable:
            logger.debug(f"No applicable candidate among {len(ordered)}")
            return Resolution(status=ResolutionStatus.NO_MATCH)

        comparator = SpecificityComparator(
            oracle, zero_arg_fallback=config.zero_arg_varargs_fallback
        )
        return self._rank(comparator, applicable, arguments)

    def resolve_exact(
        self, candidates: Iterable[MethodSignature], arguments: Sequence[ArgumentValue]
    ) -> Resolution:
        """Accept only candidates matching every argument at EXACT tier.

        No widening, boxing or varargs expansion is allowed; a varargs method
        matches only when its array parameter is supplied as such.
        """
        oracle = self._oracle()
        exact = []
        for method in sorted(candidates, key=signature_sort_key):
            candidate = self._direct(oracle, method, arguments)
            if candidate is not None and all(
                tier is CompatibilityTier.EXACT for tier in candidate.tiers
            ):
                exact.append(candidate)
        if not exact:
            return Resolution(status=ResolutionStatus.NO_MATCH)
        if len(exact) > 1:
            return Resolution(status=ResolutionStatus.AMBIGUOUS, contenders=tuple(exact))
        return Resolution(status=ResolutionStatus.RESOLVED, method=exact[0].method, contenders=tuple(exact))

    def _rank(
        self,
        comparator: SpecificityComparator,
        applicable: list[Candidate],
        arguments: Sequence[ArgumentValue],
    ) -> Resolution:
        undominated = [
            candidate
            for candidate in applicable
            if not any(
                other is not candidate and comparator.dominates(other, candidate, arguments)
                for other in applicable
            )
        ]
        methods = {candidate.method for candidate in undominated}
        if len(methods) == 1:
            winner = undominated[0]
            logger.debug(f"Resolved {winner.method} (tiers {[t.name for t in winner.tiers]})")
            return Resolution(
                status=ResolutionStatus.RESOLVED, method=winner.method, contenders=(winner,)
            )
        contenders = tuple(undominated or applicable)
        logger.debug(
            f"Ambiguous between {', '.join(str(c.method) for c in contenders)}"
        )
        return Resolution(status=ResolutionStatus.AMBIGUOUS, contenders=contenders)

    @staticmethod
    def _direct(
        oracle: CompatibilityOracle, method: MethodSignature, arguments: Sequence[ArgumentValue]
    ) -> Candidate | None:
        params = method.parameters.types
        if len(params) != len(arguments):
            return None
        tiers = []
        for argument, param in zip(arguments, params):
            tier = oracle.compatible(argument.type, param)
            if tier is None:
                return None
            tiers.append(tier)
        return Candidate(
            method=method,
            tiers=tuple(tiers),
            natural_tiers=tuple(tiers),
            matched_types=params,
        )

    @staticmethod
    def _expanded(
        oracle: CompatibilityOracle, method: MethodSignature, arguments: Sequence[ArgumentValue]
    ) -> Candidate | None:
        element = method.parameters.varargs_element
        if element is None:
            return None
        prefix = method.parameters.fixed_prefix
        if len(prefix) > len(arguments):
            return None

        tiers: list[CompatibilityTier] = []
        natural: list[CompatibilityTier] = []
        matched = list(prefix)
        for argument, param in zip(arguments, prefix):
            tier = oracle.compatible(argument.type, param)
            if tier is None:
                return None
            tiers.append(tier)
            natural.append(tier)
        trailing = arguments[len(prefix):]
        for argument in trailing:
            tier = oracle.compatible(argument.type, element)
            if tier is None:
                return None
            tiers.append(CompatibilityTier.VARARGS_EXPANSION)
            natural.append(tier)
            matched.append(element)
        return Candidate(
            method=method,
            tiers=tuple(tiers),
            natural_tiers=tuple(natural),
            matched_types=tuple(matched),
            expanded=True,
            trailing=len(trailing),
        )
