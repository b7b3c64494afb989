"""Shared test fixtures."""

from __future__ import annotations

import math

import numpy as np
import pytest

from superbit import SuperBitSimHash, Xxh3Hasher64

S1 = (
    "SimHash is a technique used for detecting near-duplicates or for locality "
    "sensitive hashing. It was developed by Moses Charikar and is often used in "
    "large-scale applications to reduce the dimensionality of high-dimensional "
    "data, making it easier to process"
)
S2 = (
    "SimHash is a technique used for detecting near-duplicates or for locality "
    "sensitive hashing. It was developed by Moses Charikar and is often utilized in "
    "large-scale applications to reduce the dimensionality of high-dimensional "
    "data, making it easier to analyze"
)


@pytest.fixture
def near_duplicate_texts() -> tuple[list[str], list[str]]:
    """Two whitespace-tokenised sentences differing in two words."""
    return S1.split(), S2.split()


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator for deterministic tests."""
    return np.random.default_rng(12345)


@pytest.fixture
def flipped_bits(rng):
    """Two random 0/1 vectors where every fourth entry of the second is flipped."""
    n = 50_000
    data1 = rng.integers(0, 2, size=n)
    data2 = data1.copy()
    data2[::4] ^= 1
    return data1, data2


@pytest.fixture
def make_superbit():
    """Factory for Super-Bit engines with small test defaults."""

    def _make(block_size: int = 4, seed: int = 0xDEADBEEF, bits=None, **kwargs):
        return SuperBitSimHash(
            Xxh3Hasher64(), block_size=block_size, seed=seed, bits=bits, **kwargs
        )

    return _make


@pytest.fixture
def hamming_band():
    """Bounds of ``length * p_bit +/- sigmas * sd`` for a binomial bit-difference count."""

    def _band(p_bit: float, length: int, sigmas: float = 4.0) -> tuple[int, int]:
        mean = p_bit * length
        sd = math.sqrt(length * p_bit * (1.0 - p_bit))
        low = max(0, math.floor(mean - sigmas * sd))
        high = min(length, math.ceil(mean + sigmas * sd))
        return low, high

    return _band
