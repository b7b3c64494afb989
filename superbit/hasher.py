"""
Hash primitives that turn an arbitrary item into a fixed-width integer.

The engines only rely on two attributes of a hasher: ``bits`` (the declared
output width) and ``hash(item)`` returning an integer in ``[0, 2**bits)``.
Any object providing them can be plugged in; the classes below cover the
common cases with unkeyed xxh3 and keyed BLAKE2b.
"""

from __future__ import annotations

import hashlib
import struct
from abc import ABC, abstractmethod
from typing import Any, Iterable, List

import numpy as np
import xxhash

from superbit._config.config import MASK64

_INT64_MIN = -(1 << 63)


def encode_item(item: Any) -> bytes:
    """
    Canonical byte encoding of an item.

    Supported inputs are bytes-like objects, ``str``, integers, floats and
    (nested) tuples or lists of those. Integers that fit in 64 bits are encoded
    as 8 little-endian bytes, two's complement for negatives.

    Raises:
        TypeError: If the item type has no canonical encoding.
    """
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, (np.integer, np.floating)):
        item = item.item()
    if isinstance(item, int):
        if _INT64_MIN <= item <= MASK64:
            return (item & MASK64).to_bytes(8, "little")
        length = (item.bit_length() + 8) // 8
        return item.to_bytes(length, "little", signed=True)
    if isinstance(item, float):
        return struct.pack("<d", item)
    if isinstance(item, (tuple, list)):
        parts = []
        for element in item:
            encoded = encode_item(element)
            parts.append(struct.pack("<I", len(encoded)))
            parts.append(encoded)
        return b"".join(parts)
    raise TypeError(f"Cannot hash items of type {type(item).__name__}")


def _check_u64(name: str, value: int) -> int:
    if not 0 <= value <= MASK64:
        raise ValueError(f"{name} must be an unsigned 64-bit integer (received {value})")
    return value


class SimHasher(ABC):
    """Maps items to unsigned integers of ``bits`` bits."""

    bits: int = 0

    @abstractmethod
    def hash(self, item: Any) -> int:
        """Return the hash of ``item`` as an integer in ``[0, 2**bits)``."""

    def hash_many(self, items: Iterable[Any]) -> List[int]:
        return [self.hash(item) for item in items]

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return f"{type(self).__name__}(bits={self.bits})"


class Xxh3Hasher64(SimHasher):
    """Unkeyed 64-bit xxh3."""

    bits = 64

    def __init__(self, seed: int = 0) -> None:
        self.seed = _check_u64("seed", seed)

    def hash(self, item: Any) -> int:
        return xxhash.xxh3_64_intdigest(encode_item(item), seed=self.seed)


class Xxh3Hasher128(SimHasher):
    """Unkeyed 128-bit xxh3."""

    bits = 128

    def __init__(self, seed: int = 0) -> None:
        self.seed = _check_u64("seed", seed)

    def hash(self, item: Any) -> int:
        return xxhash.xxh3_128_intdigest(encode_item(item), seed=self.seed)


class _KeyedBlake2b(SimHasher):
    """BLAKE2b keyed with two 64-bit keys, truncated to ``bits`` bits."""

    def __init__(self, key0: int, key1: int) -> None:
        self.key0 = _check_u64("key0", key0)
        self.key1 = _check_u64("key1", key1)
        self._key = key0.to_bytes(8, "little") + key1.to_bytes(8, "little")

    def hash(self, item: Any) -> int:
        digest = hashlib.blake2b(
            encode_item(item), digest_size=self.bits // 8, key=self._key
        ).digest()
        return int.from_bytes(digest, "little")


class Blake2bHasher64(_KeyedBlake2b):
    bits = 64


class Blake2bHasher128(_KeyedBlake2b):
    bits = 128
