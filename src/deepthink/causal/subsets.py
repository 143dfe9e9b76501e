"""SubsetSequence — lazy, finite, restartable enumeration of subsets.

Exhaustive searches (separators, adjustment sets, implied independencies)
walk subsets smallest first. Nothing is materialised: each iteration pulls
combinations from ``itertools.combinations`` on demand, and iterating the
sequence again starts over from the empty set.
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class SubsetSequence:
    """All subsets of ``items`` with ``min_size <= len <= max_size``.

    Subsets come out ordered by size, then lexicographically by position
    in ``items``. ``max_size=None`` means "up to every item".
    """

    items: tuple[str, ...]
    min_size: int = 0
    max_size: int | None = None

    @classmethod
    def of(
        cls,
        items: Iterable[str],
        min_size: int = 0,
        max_size: int | None = None,
    ) -> SubsetSequence:
        return cls(tuple(items), min_size, max_size)

    @property
    def upper(self) -> int:
        if self.max_size is None:
            return len(self.items)
        return min(self.max_size, len(self.items))

    def sizes(self) -> range:
        return range(max(self.min_size, 0), self.upper + 1)

    def of_size(self, k: int) -> Iterator[tuple[str, ...]]:
        """Subsets of exactly *k* items, lazily."""
        return itertools.combinations(self.items, k)

    def __iter__(self) -> Iterator[tuple[str, ...]]:
        for k in self.sizes():
            yield from self.of_size(k)

    def __len__(self) -> int:
        return sum(math.comb(len(self.items), k) for k in self.sizes())

    def first(self, predicate: Callable[[tuple[str, ...]], bool]) -> tuple[str, ...] | None:
        """Smallest subset satisfying *predicate*, or None."""
        for subset in self:
            if predicate(subset):
                return subset
        return None

    def all(self, predicate: Callable[[tuple[str, ...]], bool]) -> list[tuple[str, ...]]:
        return [subset for subset in self if predicate(subset)]

