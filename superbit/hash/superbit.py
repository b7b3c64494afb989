"""
Super-Bit Locality-Sensitive Hashing

Super-Bit LSH (Ji et al., 2012) improves random-hyperplane SimHash by
orthogonalising groups of hyperplanes. The ``length`` signature bits are split
into ``length // block_size`` blocks; every block owns a random
``block_size`` x ``block_size`` orthonormal matrix built once from the seed.

For each item the engine derives, per block, a pseudo-random sign vector
``g`` in {+1, -1}^r from the item hash and the seed, projects it through the
block matrix and accumulates ``weight * (Q_b @ g)`` into the block's counters.
Since projections within a block are orthogonal rather than merely independent,
the variance of the Hamming-distance angle estimator drops for a fixed angle.

All randomness is derived from SplitMix64 and seeded xxh3, so an engine rebuilt
with the same parameters reproduces bit-identical blocks and signatures.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Type

import numpy as np
from numpy.typing import NDArray

from superbit._config.config import (
    BLOCK_SEED_MULTIPLIER,
    BOX_MULLER_SALT,
    DEFAULT_BATCH_SIZE,
    GOLDEN_GAMMA,
    MASK64,
    NORM_FLOOR,
    ConfigurationError,
    SuperBitConfig,
)
from superbit.bits import BitArray, SimHashBits
from superbit.hasher import SimHasher
from superbit.utils.batching import iter_weighted_batches
from superbit.utils.mixing import splitmix64_array, u01

logger = logging.getLogger(__name__)

_TOP_BIT = np.uint64(63)


def block_seed(seed: int, block: int) -> int:
    """Seed of orthonormal block ``block`` for an engine seeded with ``seed``."""
    return seed ^ ((block * BLOCK_SEED_MULTIPLIER) & MASK64)


def make_orthonormal_block(size: int, seed: int) -> NDArray[np.float32]:
    """
    Build a random ``size`` x ``size`` float32 matrix with orthonormal columns.

    Cells are filled row-major with approximately standard-normal values from a
    hashed Box-Muller transform, then the columns are orthonormalised in order
    with Gram-Schmidt. Column norms are floored at ``NORM_FLOOR``.

    Args:
        size: Block size r.
        seed: Block seed, see :func:`block_seed`.

    Returns:
        Writable ``(size, size)`` float32 array.
    """
    u1 = np.empty(size * size, dtype=np.float32)
    u2 = np.empty(size * size, dtype=np.float32)
    k = 0
    for i in range(size):
        for j in range(size):
            u1[k] = u01(seed, k ^ (i << 16) ^ j)
            u2[k] = u01(seed, ((k * GOLDEN_GAMMA) & MASK64) ^ BOX_MULLER_SALT)
            k += 1

    radius = np.sqrt(np.float32(-2.0) * np.log(u1))
    theta = np.float32(2.0 * np.pi) * u2
    mat = (radius * np.cos(theta)).astype(np.float32).reshape(size, size)

    floor = np.float32(NORM_FLOOR)
    for j in range(size):
        # the column is updated in place, so later projections see earlier removals
        for p in range(j):
            dot = np.dot(mat[:, j], mat[:, p])
            mat[:, j] -= dot * mat[:, p]
        norm = max(np.sqrt(np.dot(mat[:, j], mat[:, j])), floor)
        mat[:, j] /= norm
    return mat


class SuperBitSimHash:
    """
    Super-Bit SimHash engine.

    Parameters
    ----------
    hasher : SimHasher
        64-bit hash primitive producing the per-item base value.
    block_size : int
        Super-Bit depth r. Must be positive and divide ``length``.
    seed : int
        Unsigned 64-bit seed for blocks and sign vectors.
    bits : type, default=BitArray.with_words(16)
        Signature type (1024 bits by default).
    length : int, optional
        Number of signature bits L, defaults to ``bits.BITS``.
    batch_size : int, default=1024
        Number of items processed together per numpy step.

    Raises
    ------
    ConfigurationError
        Raised immediately if ``block_size`` is zero or does not divide
        ``length``, the seed is not a 64-bit value, ``length`` exceeds the
        signature width, or the hasher is not 64-bit.

    Examples
    --------
    >>> from superbit import SuperBitSimHash, Xxh3Hasher64
    >>> sb = SuperBitSimHash(Xxh3Hasher64(), block_size=32, seed=0xDEADBEEF)
    >>> sb.num_blocks
    32
    >>> sig = sb.create_signature_weighted([("apple", 0.7), ("pear", 0.2)])
    """

    def __init__(
        self,
        hasher: SimHasher,
        block_size: int,
        seed: int,
        bits: Optional[Type[SimHashBits]] = None,
        *,
        length: Optional[int] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if bits is None:
            bits = BitArray.with_words(16)
        if length is None:
            length = bits.BITS
        if length > bits.BITS:
            raise ConfigurationError(
                f"length {length} exceeds the {bits.BITS} bits of {bits.__name__}"
            )
        if hasher.bits != 64:
            raise ConfigurationError(
                f"Super-Bit requires a 64-bit hasher (received {hasher.bits} bits)"
            )
        if batch_size <= 0:
            raise ConfigurationError("batch_size must be greater than zero")

        self._config = SuperBitConfig(length=length, block_size=block_size, seed=seed)
        self._hasher = hasher
        self._bits = bits
        self._batch_size = batch_size

        r = self._config.block_size
        m = self._config.num_blocks
        blocks = np.empty((m, r, r), dtype=np.float32)
        for b in range(m):
            blocks[b] = make_orthonormal_block(r, block_seed(seed, b))
        blocks.setflags(write=False)
        self._blocks = blocks

        # per-block salt of the sign-vector PRNG state
        block_ids = np.arange(m, dtype=np.uint64)
        self._salts = (
            np.uint64(seed) ^ (block_ids << np.uint64(32)) ^ np.uint64(GOLDEN_GAMMA)
        )
        self._salts.setflags(write=False)

        logger.debug(
            f"Built {m} orthonormal blocks of size {r} "
            f"(length={length}, seed={seed:#x})"
        )

    @property
    def length(self) -> int:
        return self._config.length

    @property
    def block_size(self) -> int:
        return self._config.block_size

    @property
    def num_blocks(self) -> int:
        return self._config.num_blocks

    @property
    def seed(self) -> int:
        return self._config.seed

    @property
    def bits(self) -> Type[SimHashBits]:
        return self._bits

    @property
    def config(self) -> SuperBitConfig:
        return self._config

    @property
    def blocks(self) -> NDArray[np.float32]:
        """Read-only ``(num_blocks, block_size, block_size)`` orthonormal blocks."""
        return self._blocks

    def create_signature(self, items: Iterable[Any]) -> SimHashBits:
        """Unweighted Super-Bit signature: every item has weight 1.0."""
        return self.create_signature_weighted((item, 1.0) for item in items)

    def create_signature_weighted(
        self, items_with_weight: Iterable[Tuple[Any, float]]
    ) -> SimHashBits:
        """
        Compute the Super-Bit signature of ``(item, weight)`` pairs.

        Zero-weight items are skipped. Weights must be finite.
        """
        r = self._config.block_size
        m = self._config.num_blocks
        counts = np.zeros((m, r), dtype=np.float32)

        for batch, weights in iter_weighted_batches(items_with_weight, self._batch_size):
            signs = self._sign_vectors(batch)
            w = np.asarray(weights, dtype=np.float32)
            # projection is linear, so sum the weighted sign vectors per block
            # first and project once per batch
            weighted = np.einsum("n,nbj->bj", w, signs)
            counts += np.einsum("bij,bj->bi", self._blocks, weighted)

        return self._bits.from_bools(counts.reshape(-1) > 0)

    def stats(self) -> Dict[str, Any]:
        """Return the engine configuration."""
        return {
            "length": self._config.length,
            "block_size": self._config.block_size,
            "num_blocks": self._config.num_blocks,
            "seed": self._config.seed,
            "bits": self._bits.__name__,
            "hasher": type(self._hasher).__name__,
            "batch_size": self._batch_size,
        }

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return (
            "SuperBitSimHash("
            f"length={self._config.length}, "
            f"block_size={self._config.block_size}, "
            f"seed={self._config.seed:#x}, "
            f"bits={self._bits.__name__}"
            ")"
        )

    # Internal helpers -----------------------------------------------------

    def _sign_vectors(self, items) -> NDArray[np.float32]:
        """
        Return the ``(len(items), num_blocks, block_size)`` sign vectors.

        The state for (item, block) starts at
        ``seed ^ base ^ (block << 32) ^ GOLDEN_GAMMA`` and is advanced once per
        component; a component is +1 when the top bit of the state is 0.
        """
        r = self._config.block_size
        bases = np.fromiter(
            (self._hasher.hash(item) for item in items),
            dtype=np.uint64,
            count=len(items),
        )
        state = bases[:, None] ^ self._salts[None, :]
        signs = np.empty((len(items), self._config.num_blocks, r), dtype=np.float32)
        for j in range(r):
            state = splitmix64_array(state)
            signs[:, :, j] = np.where((state >> _TOP_BIT) == 0, 1.0, -1.0)
        return signs
