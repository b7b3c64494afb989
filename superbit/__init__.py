"""
superbit: SimHash and Super-Bit signatures for near-duplicate detection.

Signatures are fixed-width bit vectors whose Hamming distance approximates the
angle between the (weighted) feature sets they summarise.

>>> from superbit import SimHash, U128, Xxh3Hasher128
>>> sim = SimHash(Xxh3Hasher128(), U128)
>>> sig = sim.create_signature(["near", "duplicate", "detection"])
"""

from __future__ import annotations

from superbit._config.config import ConfigurationError, SuperBitConfig
from superbit.bits import U64, U128, BitArray, SimHashBits, UIntBits
from superbit.hash.simhash import SimHash
from superbit.hash.superbit import SuperBitSimHash, make_orthonormal_block
from superbit.hasher import (
    Blake2bHasher64,
    Blake2bHasher128,
    SimHasher,
    Xxh3Hasher64,
    Xxh3Hasher128,
    encode_item,
)
from superbit.utils.similarity import (
    estimate_angle,
    estimate_cosine,
    hamming_similarity,
)

__all__ = [
    "BitArray",
    "Blake2bHasher64",
    "Blake2bHasher128",
    "ConfigurationError",
    "SimHash",
    "SimHashBits",
    "SimHasher",
    "SuperBitConfig",
    "SuperBitSimHash",
    "U64",
    "U128",
    "UIntBits",
    "Xxh3Hasher64",
    "Xxh3Hasher128",
    "encode_item",
    "estimate_angle",
    "estimate_cosine",
    "hamming_similarity",
    "make_orthonormal_block",
]
