"""Weighted draw engine selecting raffle winners without replacement."""

from __future__ import annotations

import logging
import random
import secrets
from typing import Any, Iterable, Optional, Sequence, TypeVar

from .selection import (
    CUMULATIVE_SCAN,
    DEFAULT_SELECTION_REGISTRY,
    NoPositiveWeightError,
    SelectionRegistry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _ticket_weight(candidate: Any) -> int:
    """Return ``candidate.tickets`` as a weight, treating negatives as zero."""
    tickets = candidate.tickets
    if isinstance(tickets, bool) or not isinstance(tickets, int):
        raise TypeError(
            f"tickets for '{candidate.name}' must be an integer, got {tickets!r}"
        )
    return tickets if tickets > 0 else 0


def filter_candidates(
    pool: Iterable[T], excluded_names: Optional[Iterable[str]] = None
) -> list[T]:
    """Return the members of ``pool`` whose ``name`` is not excluded, in order."""
    excluded = set(excluded_names or ())
    return [candidate for candidate in pool if candidate.name not in excluded]


class WeightedDrawEngine:
    """Draw distinct winners with probability proportional to ticket weight.

    The engine is pure: it never touches persistence. Callers supply the
    names that already won so that exclusion stays explicit.
    """

    def __init__(
        self,
        *,
        registry: Optional[SelectionRegistry] = None,
        algorithm_key: str = CUMULATIVE_SCAN,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Create a draw engine.

        Parameters
        ----------
        registry : Optional[SelectionRegistry], default: None
            Registry holding the selection algorithms. The default registry
            is used when omitted.
        algorithm_key : str, default: "cumulative_scan"
            Algorithm used when :meth:`select` is not given one.
        rng : Optional[random.Random], default: None
            Random generator. Defaults to :class:`secrets.SystemRandom`; pass
            a seeded :class:`random.Random` for reproducible draws.
        """

        self._registry = registry or DEFAULT_SELECTION_REGISTRY
        self._algorithm_key = algorithm_key
        self._rng = rng or secrets.SystemRandom()
        # Fail fast on a misspelled key.
        self._registry.get(algorithm_key)

    @property
    def algorithm_key(self) -> str:
        return self._algorithm_key

    def select(
        self,
        pool: Sequence[T],
        count: int,
        excluded_names: Optional[Iterable[str]] = None,
        *,
        algorithm_key: Optional[str] = None,
    ) -> list[T]:
        """Select up to ``count`` winners from ``pool``.

        Parameters
        ----------
        pool : Sequence[T]
            Candidates exposing ``name`` and integer ``tickets`` attributes.
        count : int
            Number of winners wanted. Only as many as there are eligible
            candidates are drawn.
        excluded_names : Optional[Iterable[str]], default: None
            Names removed from ``pool`` before drawing.
        algorithm_key : Optional[str], default: None
            Override for the engine's selection algorithm.

        Returns
        -------
        list[T]
            Distinct winners, first drawn first. Empty when ``count`` is zero
            or no candidate survives the exclusion.

        Raises
        ------
        ValueError
            If ``count`` is negative.
        NoPositiveWeightError
            If a round starts while every remaining candidate has zero
            tickets. ``drawn`` holds the winners of the earlier rounds.
        """
        if count < 0:
            raise ValueError("count must not be negative")

        candidates = filter_candidates(pool, excluded_names)
        rounds = min(count, len(candidates))
        if rounds == 0:
            return []

        weights = [_ticket_weight(candidate) for candidate in candidates]
        algorithm = self._registry.get(algorithm_key or self._algorithm_key)
        try:
            positions = algorithm.pick(weights, rounds, self._rng)
        except NoPositiveWeightError as exc:
            drawn = [candidates[pos] for pos in exc.drawn]
            logger.warning(
                f"Draw stopped after {len(drawn)} of {rounds} round(s): "
                "no positive-weight candidates remain"
            )
            raise NoPositiveWeightError(str(exc), drawn=drawn) from exc

        return [candidates[pos] for pos in positions]


def select_winners(
    pool: Sequence[T],
    count: int,
    excluded_names: Optional[Iterable[str]] = None,
    *,
    rng: Optional[random.Random] = None,
    algorithm_key: str = CUMULATIVE_SCAN,
    registry: Optional[SelectionRegistry] = None,
) -> list[T]:
    """Select ``count`` distinct winners from ``pool`` weighted by tickets.

    Convenience wrapper around :meth:`WeightedDrawEngine.select`; see there
    for the full contract.
    """

    engine = WeightedDrawEngine(registry=registry, algorithm_key=algorithm_key, rng=rng)
    return engine.select(pool, count, excluded_names)


__all__ = [
    "NoPositiveWeightError",
    "WeightedDrawEngine",
    "filter_candidates",
    "select_winners",
]
