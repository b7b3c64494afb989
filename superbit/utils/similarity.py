from __future__ import annotations

import math
from typing import Optional

import numpy as np

from superbit.bits import SimHashBits


def _resolve_length(a: SimHashBits, length: Optional[int]) -> int:
    if length is None:
        return a.BITS
    if not 0 < length <= a.BITS:
        raise ValueError(f"length must be in (0, {a.BITS}] (received {length})")
    return length


def hamming_similarity(
    a: SimHashBits, b: SimHashBits, length: Optional[int] = None
) -> float:
    """Return ``1 - hamming_distance / length`` for two signatures."""
    bits = _resolve_length(a, length)
    return 1.0 - a.hamming_distance(b) / bits


def estimate_angle(
    a: SimHashBits, b: SimHashBits, length: Optional[int] = None
) -> float:
    """Estimate the angle (radians) between the feature vectors behind ``a`` and ``b``."""
    bits = _resolve_length(a, length)
    return math.pi * a.hamming_distance(b) / bits


def estimate_cosine(
    a: SimHashBits, b: SimHashBits, length: Optional[int] = None
) -> float:
    """Estimate the cosine similarity of the feature vectors behind ``a`` and ``b``."""
    return math.cos(estimate_angle(a, b, length))


def cosine_similarity(x: np.ndarray, y: np.ndarray) -> float:
    """Exact cosine similarity of two dense vectors."""
    vx = np.asarray(x, dtype=np.float64).reshape(-1)
    vy = np.asarray(y, dtype=np.float64).reshape(-1)
    if vx.shape != vy.shape:
        raise ValueError(f"Shape mismatch: {vx.shape} vs {vy.shape}")
    nx = np.linalg.norm(vx)
    ny = np.linalg.norm(vy)
    if nx == 0 or ny == 0:
        raise ValueError("Cannot compute cosine similarity of a zero vector")
    return float(np.clip(vx @ vy / (nx * ny), -1.0, 1.0))
