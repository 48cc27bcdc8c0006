"""Weighted selection algorithms used by the draw engine."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Callable, Dict, Optional, Sequence


class NoPositiveWeightError(ZeroDivisionError):
    """Raised when candidates remain but none of them holds a positive weight.

    Attributes
    ----------
    drawn : list
        Selections made in earlier rounds of the same draw, in draw order.
        Algorithms report positions into the weight sequence; the engine
        replaces them with the matching contestants.
    """

    def __init__(self, message: str = "no positive-weight candidates", *, drawn=None):
        super().__init__(message)
        self.drawn = list(drawn or [])


Picker = Callable[[Sequence[int], int, random.Random], list[int]]


@dataclass(frozen=True)
class SelectionAlgorithm:
    """Definition of a weighted selection algorithm.

    Attributes
    ----------
    key : str
        Registry key used to identify the algorithm.
    picker : Callable[[Sequence[int], int, random.Random], list[int]]
        Callable that takes non-negative weights, the number of rounds and a
        random generator, and returns the chosen positions in draw order.
    description : Optional[str]
        Human-readable summary of the algorithm's behaviour.
    """

    key: str
    picker: Picker
    description: Optional[str] = None

    def pick(self, weights: Sequence[int], count: int, rng: random.Random) -> list[int]:
        """Draw ``count`` distinct positions from ``weights`` without replacement.

        Parameters
        ----------
        weights : Sequence[int]
            Non-negative integer weights, one per candidate.
        count : int
            Number of rounds; must not exceed ``len(weights)``.
        rng : random.Random
            Source of randomness.

        Returns
        -------
        list[int]
            Positions into ``weights``, first drawn first.

        Raises
        ------
        NoPositiveWeightError
            If a round starts with only zero-weight candidates left.
        """
        if count < 0:
            raise ValueError("count must not be negative")
        if count > len(weights):
            raise ValueError("count must not exceed the number of candidates")
        if any(w < 0 for w in weights):
            raise ValueError("weights must not be negative")
        return self.picker(weights, count, rng)


class SelectionRegistry:
    """Mutable registry mapping algorithm keys to definitions."""

    def __init__(self) -> None:
        self._algorithms: Dict[str, SelectionAlgorithm] = {}

    def register(self, algorithm: SelectionAlgorithm, *, replace: bool = False) -> None:
        """Register a selection algorithm under its key.

        Parameters
        ----------
        algorithm : SelectionAlgorithm
            Algorithm to add to the registry.
        replace : bool, default: False
            When ``True`` an existing registration with the same key is
            overwritten. Otherwise a duplicate raises :class:`ValueError`.
        """
        if not replace and algorithm.key in self._algorithms:
            raise ValueError(f"Algorithm '{algorithm.key}' is already registered")
        self._algorithms[algorithm.key] = algorithm

    def get(self, key: str) -> SelectionAlgorithm:
        """Return the algorithm registered under ``key``."""
        try:
            return self._algorithms[key]
        except KeyError as exc:
            raise KeyError(f"Unknown selection algorithm '{key}'") from exc

    def available_algorithms(self) -> Dict[str, SelectionAlgorithm]:
        """Return a copy of the registered algorithms keyed by identifier."""
        return dict(self._algorithms)


def _cumulative_scan(weights: Sequence[int], count: int, rng: random.Random) -> list[int]:
    """Walk the remaining candidates until the running total passes the target."""
    remaining = list(range(len(weights)))
    picked: list[int] = []
    for _ in range(count):
        total = sum(weights[i] for i in remaining)
        if total <= 0:
            raise NoPositiveWeightError(drawn=picked)
        target = rng.randrange(total)
        running = 0
        for pos, idx in enumerate(remaining):
            running += weights[idx]
            if running > target:
                break
        picked.append(remaining.pop(pos))
    return picked


class _FenwickTree:
    """Binary indexed tree over integer weights with prefix-sum descent."""

    def __init__(self, weights: Sequence[int]) -> None:
        self._size = len(weights)
        self._tree = [0] * (self._size + 1)
        for i, weight in enumerate(weights, start=1):
            self._tree[i] += weight
            parent = i + (i & -i)
            if parent <= self._size:
                self._tree[parent] += self._tree[i]

    def add(self, index: int, delta: int) -> None:
        i = index + 1
        while i <= self._size:
            self._tree[i] += delta
            i += i & -i

    def find(self, target: int) -> int:
        """Return the first position whose inclusive prefix sum exceeds ``target``."""
        pos = 0
        acc = 0
        step = 1 << (self._size.bit_length() - 1) if self._size else 0
        while step:
            nxt = pos + step
            if nxt <= self._size and acc + self._tree[nxt] <= target:
                pos = nxt
                acc += self._tree[nxt]
            step >>= 1
        return pos


def _fenwick_tree(weights: Sequence[int], count: int, rng: random.Random) -> list[int]:
    """Same picks as :func:`_cumulative_scan` in O(log n) per round."""
    tree = _FenwickTree(weights)
    total = sum(weights)
    picked: list[int] = []
    for _ in range(count):
        if total <= 0:
            raise NoPositiveWeightError(drawn=picked)
        target = rng.randrange(total)
        idx = tree.find(target)
        picked.append(idx)
        tree.add(idx, -weights[idx])
        total -= weights[idx]
    return picked


CUMULATIVE_SCAN = "cumulative_scan"
FENWICK_TREE = "fenwick_tree"

DEFAULT_SELECTION_REGISTRY = SelectionRegistry()
DEFAULT_SELECTION_REGISTRY.register(
    SelectionAlgorithm(
        key=CUMULATIVE_SCAN,
        picker=_cumulative_scan,
        description=(
            "Sum the remaining weights, draw an integer in [0, total) and walk "
            "the candidates until the running total exceeds it."
        ),
    )
)
DEFAULT_SELECTION_REGISTRY.register(
    SelectionAlgorithm(
        key=FENWICK_TREE,
        picker=_fenwick_tree,
        description=(
            "Cumulative selection backed by a binary indexed tree; suited to "
            "large pools and consumes randomness exactly like cumulative_scan."
        ),
    )
)

__all__ = [
    "CUMULATIVE_SCAN",
    "DEFAULT_SELECTION_REGISTRY",
    "FENWICK_TREE",
    "NoPositiveWeightError",
    "SelectionAlgorithm",
    "SelectionRegistry",
]
