"""
Classic SimHash (Charikar) with bit-wise majority voting.

Every item is hashed to an integer; each of the low ``length`` hash bits casts a
vote on the corresponding signature bit: +1 (or +w) when the hash bit is 0,
-1 (or -w) when it is 1. A signature bit is set iff its accumulated vote is
strictly positive, so an empty input yields the all-zero signature.

Items are consumed in bounded chunks and the votes of a chunk are summed with
numpy, which keeps the pass streaming while avoiding a Python loop per bit.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

import numpy as np
from numpy.typing import NDArray

from superbit._config.config import DEFAULT_BATCH_SIZE, ConfigurationError
from superbit.bits import U64, SimHashBits
from superbit.hasher import SimHasher
from superbit.utils.batching import iter_batches, iter_weighted_batches

logger = logging.getLogger(__name__)


class SimHash:
    """
    Weighted bit-voting SimHash engine.

    Parameters
    ----------
    hasher : SimHasher
        Hash primitive. Its ``bits`` must be at least ``length``.
    bits : type, default=U64
        Signature type (a :class:`~superbit.bits.SimHashBits` subclass).
    length : int, optional
        Number of signature bits L. Defaults to ``bits.BITS``; bits above L are
        always zero.
    batch_size : int, default=1024
        Number of items voted together per numpy step.

    Raises
    ------
    ConfigurationError
        If ``length`` is out of range for the signature type or the hasher,
        or ``batch_size`` is not positive.

    Examples
    --------
    >>> from superbit import SimHash, U64, Xxh3Hasher64
    >>> sim = SimHash(Xxh3Hasher64(), U64)
    >>> a = sim.create_signature("the quick brown fox".split())
    >>> b = sim.create_signature("the quick brown cat".split())
    >>> a.hamming_distance(b) < 32
    True
    """

    def __init__(
        self,
        hasher: SimHasher,
        bits: Type[SimHashBits] = U64,
        *,
        length: Optional[int] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if length is None:
            length = bits.BITS
        if not 0 < length <= bits.BITS:
            raise ConfigurationError(
                f"length must be in (0, {bits.BITS}] for {bits.__name__} "
                f"(received {length})"
            )
        if length > hasher.bits:
            raise ConfigurationError(
                f"hasher produces {hasher.bits} bits, fewer than length={length}"
            )
        if batch_size <= 0:
            raise ConfigurationError("batch_size must be greater than zero")

        self._hasher = hasher
        self._bits = bits
        self._length = length
        self._batch_size = batch_size
        self._hash_bytes = (hasher.bits + 7) // 8

        logger.debug(
            f"SimHash configured: length={length}, bits={bits.__name__}, "
            f"hasher={type(hasher).__name__}"
        )

    @property
    def length(self) -> int:
        return self._length

    @property
    def bits(self) -> Type[SimHashBits]:
        return self._bits

    @property
    def hasher(self) -> SimHasher:
        return self._hasher

    def create_signature(self, items: Iterable[Any]) -> SimHashBits:
        """
        Compute the unweighted SimHash of ``items``.

        Votes are integers, so the result does not depend on item order.
        """
        counts = np.zeros(self._length, dtype=np.int64)
        for batch in iter_batches(items, self._batch_size):
            ones = self._hash_bits(batch).sum(axis=0, dtype=np.int64)
            # zeros vote +1, ones vote -1
            counts += len(batch) - 2 * ones
        return self._threshold(counts)

    def create_signature_weighted(
        self, items_with_weight: Iterable[Tuple[Any, float]]
    ) -> SimHashBits:
        """
        Compute the weighted SimHash of ``(item, weight)`` pairs.

        Each item votes ``+weight`` on the bits where its hash is 0 and
        ``-weight`` where it is 1. Zero-weight items have no effect.
        """
        counts = np.zeros(self._length, dtype=np.float32)
        for batch, weights in iter_weighted_batches(items_with_weight, self._batch_size):
            signs = 1.0 - 2.0 * self._hash_bits(batch).astype(np.float32)
            counts += np.asarray(weights, dtype=np.float32) @ signs
        return self._threshold(counts)

    def create_centroid(self, signatures: Iterable[SimHashBits]) -> SimHashBits:
        """
        Majority vote across already computed signatures.

        A bit is set iff it is set in strictly more than ``n // 2`` of the ``n``
        signatures; ties resolve to 0 and an empty input gives zero.

        Raises
        ------
        TypeError
            If a signature is not of this engine's signature type.
        """
        counts = np.zeros(self._length, dtype=np.int64)
        total = 0
        for signature in signatures:
            if type(signature) is not self._bits:
                raise TypeError(
                    f"Expected {self._bits.__name__} signatures, "
                    f"received {type(signature).__name__}"
                )
            counts += signature.to_bools()[: self._length]
            total += 1
        return self._threshold(counts - total // 2)

    def stats(self) -> Dict[str, Any]:
        """Return the engine configuration."""
        return {
            "length": self._length,
            "bits": self._bits.__name__,
            "hasher": type(self._hasher).__name__,
            "hasher_bits": self._hasher.bits,
            "batch_size": self._batch_size,
        }

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return (
            "SimHash("
            f"length={self._length}, "
            f"bits={self._bits.__name__}, "
            f"hasher={type(self._hasher).__name__}"
            ")"
        )

    # Internal helpers -----------------------------------------------------

    def _hash_bits(self, items: List[Any]) -> NDArray[np.uint8]:
        """Return an ``(len(items), length)`` matrix of hash bits, LSB first."""
        raw = b"".join(
            int(self._hasher.hash(item)).to_bytes(self._hash_bytes, "little")
            for item in items
        )
        matrix = np.frombuffer(raw, dtype=np.uint8).reshape(len(items), self._hash_bytes)
        return np.unpackbits(matrix, axis=1, bitorder="little")[:, : self._length]

    def _threshold(self, counts: NDArray) -> SimHashBits:
        return self._bits.from_bools(counts > 0)
