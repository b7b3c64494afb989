"""
Fixed-width bit vectors used as signatures.

Every signature type implements the :class:`SimHashBits` capability: zero/one
constants, bitwise AND/OR/XOR, shifts, equality and Hamming distance. Two
families are provided:

* :class:`UIntBits` (``U64``, ``U128``) wraps a single Python integer masked to
  the declared width.
* :class:`BitArray` stores ``WORDS`` 64-bit words in a read-only numpy array,
  word 0 holding bits 0..63. ``BitArray.with_words(16)`` is a 1024-bit type.

Values are immutable and hashable, so signatures can be used as dictionary
keys or set members.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Sequence, Type, TypeVar

import numpy as np
from numpy.typing import ArrayLike, NDArray

from superbit._config.config import MASK64, WORD_BITS

B = TypeVar("B", bound="SimHashBits")


class SimHashBits(ABC):
    """
    Capability set shared by every signature type.

    Subclasses declare the class attribute ``BITS`` and implement the abstract
    operations. Operands of binary operations must be of the exact same type;
    mixing widths is a programming error and raises ``TypeError``.
    """

    BITS: int = 0

    __slots__ = ()

    @classmethod
    @abstractmethod
    def zero(cls: Type[B]) -> B:
        """Return the value with every bit cleared."""

    @classmethod
    @abstractmethod
    def one(cls: Type[B]) -> B:
        """Return the value with only bit 0 set."""

    @classmethod
    @abstractmethod
    def from_int(cls: Type[B], value: int) -> B:
        """Build a value from an unsigned integer in ``[0, 2**BITS)``."""

    @classmethod
    @abstractmethod
    def from_bools(cls: Type[B], bits: ArrayLike) -> B:
        """
        Build a value from a boolean vector, ``bits[i]`` becoming bit ``i``.

        Vectors shorter than ``BITS`` are zero-extended.
        """

    @abstractmethod
    def to_bools(self) -> NDArray[np.bool_]:
        """Return a boolean vector of length ``BITS`` with bit ``i`` at index ``i``."""

    @abstractmethod
    def hamming_distance(self: B, other: B) -> int:
        """Return the number of bit positions where ``self`` and ``other`` differ."""

    @abstractmethod
    def __and__(self: B, other: B) -> B: ...

    @abstractmethod
    def __or__(self: B, other: B) -> B: ...

    @abstractmethod
    def __xor__(self: B, other: B) -> B: ...

    @abstractmethod
    def __lshift__(self: B, shift: int) -> B: ...

    @abstractmethod
    def __rshift__(self: B, shift: int) -> B: ...

    @abstractmethod
    def __eq__(self, other: object) -> bool: ...

    @abstractmethod
    def __hash__(self) -> int: ...

    @abstractmethod
    def __int__(self) -> int: ...

    def bit(self, index: int) -> bool:
        """Return the value of bit ``index``."""
        if not 0 <= index < self.BITS:
            raise IndexError(f"bit index {index} out of range for {self.BITS} bits")
        one = self.one()
        return ((self >> index) & one) == one

    def __getitem__(self, index: int) -> bool:
        return self.bit(index)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{int(self):0{self.BITS // 4}x})"

    def _check_operand(self, other: object) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"Operands must share the same bit width: "
                f"{type(self).__name__} vs {type(other).__name__}"
            )


def _pack_bools(bits: ArrayLike, width: int) -> bytes:
    """Pack a boolean vector into ``width // 8`` little-endian bytes."""
    arr = np.asarray(bits, dtype=bool).reshape(-1)
    if arr.shape[0] > width:
        raise ValueError(f"Expected at most {width} bits, received {arr.shape[0]}")
    padded = np.zeros(width, dtype=bool)
    padded[: arr.shape[0]] = arr
    return np.packbits(padded, bitorder="little").tobytes()


def _unpack_bools(data: bytes) -> NDArray[np.bool_]:
    raw = np.frombuffer(data, dtype=np.uint8)
    return np.unpackbits(raw, bitorder="little").astype(bool)


class UIntBits(SimHashBits):
    """Single-integer signature masked to ``BITS`` bits."""

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        value = int(value)
        if not 0 <= value < (1 << self.BITS):
            raise ValueError(f"{value} does not fit in {self.BITS} unsigned bits")
        self._value = value

    @classmethod
    def zero(cls):
        return cls(0)

    @classmethod
    def one(cls):
        return cls(1)

    @classmethod
    def from_int(cls, value: int):
        return cls(value)

    @classmethod
    def from_bools(cls, bits: ArrayLike):
        return cls(int.from_bytes(_pack_bools(bits, cls.BITS), "little"))

    def to_bools(self) -> NDArray[np.bool_]:
        return _unpack_bools(self._value.to_bytes(self.BITS // 8, "little"))

    def hamming_distance(self, other: "UIntBits") -> int:
        self._check_operand(other)
        return (self._value ^ other._value).bit_count()

    def bit(self, index: int) -> bool:
        if not 0 <= index < self.BITS:
            raise IndexError(f"bit index {index} out of range for {self.BITS} bits")
        return bool((self._value >> index) & 1)

    def __and__(self, other: "UIntBits"):
        self._check_operand(other)
        return type(self)(self._value & other._value)

    def __or__(self, other: "UIntBits"):
        self._check_operand(other)
        return type(self)(self._value | other._value)

    def __xor__(self, other: "UIntBits"):
        self._check_operand(other)
        return type(self)(self._value ^ other._value)

    def __lshift__(self, shift: int):
        return type(self)((self._value << shift) & ((1 << self.BITS) - 1))

    def __rshift__(self, shift: int):
        return type(self)(self._value >> shift)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash((self.BITS, self._value))

    def __int__(self) -> int:
        return self._value


class U64(UIntBits):
    BITS = 64

    __slots__ = ()


class U128(UIntBits):
    BITS = 128

    __slots__ = ()


class BitArray(SimHashBits):
    """
    Multi-word signature of ``WORDS`` x 64 bits.

    Use :meth:`with_words` to obtain the concrete type for a given word count;
    ``BitArray`` itself has no width and cannot be instantiated.

    Example:
        >>> Bits1024 = BitArray.with_words(16)
        >>> Bits1024.BITS
        1024
        >>> (Bits1024.one() << 64).words[1]
        1
    """

    WORDS: int = 0

    __slots__ = ("_words",)

    def __init__(self, words: Sequence[int] | NDArray[np.uint64] | None = None) -> None:
        if self.WORDS <= 0:
            raise TypeError("BitArray has no width; use BitArray.with_words(n)")
        if words is None:
            arr = np.zeros(self.WORDS, dtype=np.uint64)
        else:
            arr = np.array(words, dtype=np.uint64).reshape(-1)
        if arr.shape[0] != self.WORDS:
            raise ValueError(f"Expected {self.WORDS} words, received {arr.shape[0]}")
        arr.setflags(write=False)
        self._words = arr

    @classmethod
    def with_words(cls, words: int) -> Type["BitArray"]:
        """Return the (cached) BitArray type holding ``words`` 64-bit words."""
        if words <= 0:
            raise ValueError("words must be greater than zero")
        return _bit_array_type(words)

    @property
    def words(self) -> NDArray[np.uint64]:
        """Read-only view of the underlying words, least significant first."""
        return self._words

    @classmethod
    def zero(cls):
        return cls()

    @classmethod
    def one(cls):
        words = np.zeros(cls.WORDS, dtype=np.uint64)
        words[0] = 1
        return cls(words)

    @classmethod
    def from_int(cls, value: int):
        if not 0 <= value < (1 << cls.BITS):
            raise ValueError(f"{value} does not fit in {cls.BITS} unsigned bits")
        return cls([(value >> (WORD_BITS * i)) & MASK64 for i in range(cls.WORDS)])

    @classmethod
    def from_bools(cls, bits: ArrayLike):
        packed = _pack_bools(bits, cls.BITS)
        return cls(np.frombuffer(packed, dtype="<u8").astype(np.uint64))

    def to_bools(self) -> NDArray[np.bool_]:
        return _unpack_bools(self._words.astype("<u8").tobytes())

    def hamming_distance(self, other: "BitArray") -> int:
        self._check_operand(other)
        diff = self._words ^ other._words
        return int(np.unpackbits(diff.view(np.uint8)).sum())

    def bit(self, index: int) -> bool:
        if not 0 <= index < self.BITS:
            raise IndexError(f"bit index {index} out of range for {self.BITS} bits")
        word, offset = divmod(index, WORD_BITS)
        return bool((int(self._words[word]) >> offset) & 1)

    def __and__(self, other: "BitArray"):
        self._check_operand(other)
        return type(self)(self._words & other._words)

    def __or__(self, other: "BitArray"):
        self._check_operand(other)
        return type(self)(self._words | other._words)

    def __xor__(self, other: "BitArray"):
        self._check_operand(other)
        return type(self)(self._words ^ other._words)

    def __lshift__(self, shift: int):
        if shift < 0:
            raise ValueError("negative shift count")
        n = self.WORDS
        word_shift, bit_shift = divmod(shift, WORD_BITS)
        out = np.zeros(n, dtype=np.uint64)
        if word_shift >= n:
            return type(self)(out)

        out[word_shift:] = self._words[: n - word_shift]
        if bit_shift:
            # high bits of word i spill into the low bits of word i + 1
            carry = np.zeros(n, dtype=np.uint64)
            carry[1:] = out[:-1] >> np.uint64(WORD_BITS - bit_shift)
            out = (out << np.uint64(bit_shift)) | carry
        return type(self)(out)

    def __rshift__(self, shift: int):
        if shift < 0:
            raise ValueError("negative shift count")
        n = self.WORDS
        word_shift, bit_shift = divmod(shift, WORD_BITS)
        out = np.zeros(n, dtype=np.uint64)
        if word_shift >= n:
            return type(self)(out)

        out[: n - word_shift] = self._words[word_shift:]
        if bit_shift:
            # low bits of word i + 1 spill into the high bits of word i
            carry = np.zeros(n, dtype=np.uint64)
            carry[:-1] = out[1:] << np.uint64(WORD_BITS - bit_shift)
            out = (out >> np.uint64(bit_shift)) | carry
        return type(self)(out)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(np.array_equal(self._words, other._words))

    def __hash__(self) -> int:
        return hash((self.BITS, self._words.tobytes()))

    def __int__(self) -> int:
        return sum(int(word) << (WORD_BITS * i) for i, word in enumerate(self._words))


@lru_cache(maxsize=None)
def _bit_array_type(words: int) -> Type[BitArray]:
    bits = words * WORD_BITS
    return type(
        f"BitArray{bits}",
        (BitArray,),
        {"WORDS": words, "BITS": bits, "__slots__": (), "__module__": __name__},
    )
