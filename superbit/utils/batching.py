from __future__ import annotations

from itertools import islice
from typing import Iterable, Iterator, List, Tuple, TypeVar

T = TypeVar("T")


def iter_batches(items: Iterable[T], batch_size: int) -> Iterator[List[T]]:
    """
    Stream ``items`` as lists of at most ``batch_size`` elements.

    Only one batch is held in memory at a time, so unbounded iterables are
    consumed lazily.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be greater than zero")

    iterator = iter(items)
    while True:
        batch = list(islice(iterator, batch_size))
        if not batch:
            return
        yield batch


def iter_weighted_batches(
    pairs: Iterable[Tuple[T, float]], batch_size: int
) -> Iterator[Tuple[List[T], List[float]]]:
    """
    Stream ``(item, weight)`` pairs as ``(items, weights)`` batches.

    Pairs whose weight is zero are dropped before batching, so they never
    influence which items share a batch.
    """
    nonzero = ((item, float(weight)) for item, weight in pairs if weight != 0)
    for batch in iter_batches(nonzero, batch_size):
        items = [item for item, _ in batch]
        weights = [weight for _, weight in batch]
        yield items, weights
