"""Weighted random-access list used to pick the next card."""

from __future__ import annotations

import random
from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


def _check_weight(weight: float) -> None:
    if weight < 0:
        raise ValueError(f"item weight must be greater than or equal to zero, given: {weight}")


class WeightedList(Generic[T]):
    """Items with non-negative weights, drawn with probability proportional to weight.

    Weights change in place after every answer, so no ordering is maintained and a
    draw is a linear scan over cumulative weights.
    """

    def __init__(self) -> None:
        self._items: list[T] = []
        self._weights: list[float] = []
        self._total_weight = 0.0

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[T, float]]) -> WeightedList[T]:
        weighted: WeightedList[T] = cls()
        for item, weight in pairs:
            weighted.add(item, weight)
        return weighted

    def __len__(self) -> int:
        return len(self._items)

    @property
    def total_weight(self) -> float:
        return self._total_weight

    def add(self, item: T, weight: float) -> None:
        """Append an item."""
        _check_weight(weight)
        self._items.append(item)
        self._weights.append(weight)
        self._total_weight += weight

    def change_weight(self, index: int, weight: float) -> None:
        """Replace the weight stored at `index`."""
        _check_weight(weight)
        old_weight = self._weights[index]
        self._total_weight = (self._total_weight - old_weight) + weight
        self._weights[index] = weight

    def weights(self) -> list[float]:
        """Return a snapshot of the current weights."""
        return list(self._weights)

    def _random_index(self, rng: random.Random) -> int | None:
        count = len(self._items)
        if count == 0:
            return None
        if count == 1:
            return 0
        if self._total_weight <= 0:
            return rng.randrange(count)

        needle = rng.random() * self._total_weight
        running_total = 0.0
        last_positive = None
        for index, weight in enumerate(self._weights):
            running_total += weight
            if weight > 0:
                last_positive = index
            if needle < running_total:
                return index
        # Accumulated float error can leave the needle just past the final total.
        return last_positive if last_positive is not None else count - 1

    def get_random(self, rng: random.Random) -> tuple[T, int] | None:
        """Draw an item and its index without removing it."""
        index = self._random_index(rng)
        if index is None:
            return None
        return self._items[index], index

    def remove_random(self, rng: random.Random) -> tuple[T, float] | None:
        """Draw an item and swap-remove it from the list."""
        index = self._random_index(rng)
        if index is None:
            return None
        last = len(self._items) - 1
        self._items[index], self._items[last] = self._items[last], self._items[index]
        self._weights[index], self._weights[last] = self._weights[last], self._weights[index]
        item = self._items.pop()
        weight = self._weights.pop()
        self._total_weight -= weight
        if not self._items:
            self._total_weight = 0.0
        return item, weight

    def copy(self) -> WeightedList[T]:
        duplicate: WeightedList[T] = WeightedList()
        duplicate._items = list(self._items)
        duplicate._weights = list(self._weights)
        duplicate._total_weight = self._total_weight
        return duplicate

    def iter_shuffled(self, rng: random.Random) -> Iterator[tuple[T, float]]:
        """Yield every item once in weighted-random order, leaving this list untouched."""
        remaining = self.copy()
        while True:
            drawn = remaining.remove_random(rng)
            if drawn is None:
                return
            yield drawn
