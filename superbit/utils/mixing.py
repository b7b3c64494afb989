"""
Deterministic pseudo-random primitives.

Everything random in the Super-Bit engine goes through these functions so that
a given seed reproduces the same blocks and sign vectors on every platform.
The language's default random facilities are deliberately not used.
"""

from __future__ import annotations

import numpy as np
import xxhash
from numpy.typing import NDArray

from superbit._config.config import GOLDEN_GAMMA, MASK64, SPLITMIX_M1, SPLITMIX_M2

_GAMMA = np.uint64(GOLDEN_GAMMA)
_M1 = np.uint64(SPLITMIX_M1)
_M2 = np.uint64(SPLITMIX_M2)
_S30 = np.uint64(30)
_S27 = np.uint64(27)
_S31 = np.uint64(31)

# 2**-53 in float32
_INV_2_53 = np.float32(1.0 / (1 << 53))
_HALF = np.float32(0.5)


def splitmix64(x: int) -> int:
    """
    One SplitMix64 step on a Python integer.

    The returned value is both the output and the next state.
    """
    x = (x + GOLDEN_GAMMA) & MASK64
    z = x
    z = ((z ^ (z >> 30)) * SPLITMIX_M1) & MASK64
    z = ((z ^ (z >> 27)) * SPLITMIX_M2) & MASK64
    return z ^ (z >> 31)


def splitmix64_array(x: NDArray[np.uint64]) -> NDArray[np.uint64]:
    """Vectorised :func:`splitmix64`; uint64 arithmetic wraps modulo 2**64."""
    z = np.asarray(x, dtype=np.uint64) + _GAMMA
    z = (z ^ (z >> _S30)) * _M1
    z = (z ^ (z >> _S27)) * _M2
    return z ^ (z >> _S31)


def u01(seed: int, x: int) -> np.float32:
    """
    Map ``(seed, x)`` to a float32 uniform in (0, 1].

    ``x`` is hashed as 8 little-endian bytes with seeded xxh3-64; the top 53
    bits of the digest are scaled into the unit interval with a half-step
    offset so the result is never exactly zero.
    """
    digest = xxhash.xxh3_64_intdigest((x & MASK64).to_bytes(8, "little"), seed=seed)
    return (np.float32(digest >> 11) + _HALF) * _INV_2_53
