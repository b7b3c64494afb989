"""Tests for the signature bit types: U64, U128 and multi-word BitArray."""

from __future__ import annotations

import numpy as np
import pytest

from superbit import U64, U128, BitArray

Bits1024 = BitArray.with_words(16)
Bits128 = BitArray.with_words(2)


def random_int(rng: np.random.Generator, bits: int) -> int:
    return int.from_bytes(rng.bytes(bits // 8), "little")


# ---------------------------------------------------------------------------
# Constants and construction
# ---------------------------------------------------------------------------


class TestConstruction:
    @pytest.mark.parametrize("cls", [U64, U128, Bits128, Bits1024])
    def test_zero_and_one(self, cls):
        assert int(cls.zero()) == 0
        assert int(cls.one()) == 1
        assert cls.zero() != cls.one()

    def test_uint_out_of_range_rejected(self):
        with pytest.raises(ValueError, match="does not fit"):
            U64(1 << 64)
        with pytest.raises(ValueError, match="does not fit"):
            U128(-1)

    def test_bit_array_from_int_out_of_range_rejected(self):
        with pytest.raises(ValueError, match="does not fit"):
            Bits128.from_int(1 << 128)

    def test_bit_array_word_count_checked(self):
        with pytest.raises(ValueError, match="Expected 2 words"):
            Bits128([1, 2, 3])

    def test_bare_bit_array_has_no_width(self):
        with pytest.raises(TypeError, match="with_words"):
            BitArray()

    def test_with_words_is_cached(self):
        assert BitArray.with_words(16) is Bits1024
        assert Bits1024.BITS == 1024
        assert Bits1024.WORDS == 16

    def test_with_words_must_be_positive(self):
        with pytest.raises(ValueError, match="greater than zero"):
            BitArray.with_words(0)

    def test_words_are_read_only(self):
        value = Bits128.from_int(5)
        with pytest.raises(ValueError):
            value.words[0] = 7

    def test_from_int_word_order(self):
        value = Bits128.from_int((3 << 64) | 9)
        assert value.words.tolist() == [9, 3]

    def test_bools_conversion(self, rng):
        raw = rng.integers(0, 2, size=1024).astype(bool)
        value = Bits1024.from_bools(raw)
        assert np.array_equal(value.to_bools(), raw)
        assert int(value) == sum(1 << int(i) for i in np.flatnonzero(raw))

    def test_from_bools_zero_extends(self):
        value = U64.from_bools([True, False, True])
        assert int(value) == 0b101

    def test_from_bools_rejects_too_many_bits(self):
        with pytest.raises(ValueError, match="at most 64 bits"):
            U64.from_bools(np.ones(65, dtype=bool))


# ---------------------------------------------------------------------------
# Bitwise operations against Python integer reference arithmetic
# ---------------------------------------------------------------------------


class TestOperations:
    @pytest.mark.parametrize("cls", [U64, U128, Bits128, Bits1024])
    def test_bitwise_ops_match_int(self, cls, rng):
        a_int, b_int = random_int(rng, cls.BITS), random_int(rng, cls.BITS)
        a, b = cls.from_int(a_int), cls.from_int(b_int)
        assert int(a & b) == a_int & b_int
        assert int(a | b) == a_int | b_int
        assert int(a ^ b) == a_int ^ b_int

    @pytest.mark.parametrize("shift", [0, 1, 7, 63, 64, 65, 127, 128, 200, 1023, 1024, 5000])
    def test_bit_array_shifts_carry_across_words(self, shift, rng):
        mask = (1 << 1024) - 1
        value_int = random_int(rng, 1024)
        value = Bits1024.from_int(value_int)
        assert int(value << shift) == (value_int << shift) & mask
        assert int(value >> shift) == value_int >> shift

    @pytest.mark.parametrize("shift", [0, 1, 63, 64, 127, 128])
    def test_uint_shifts_truncate(self, shift):
        value_int = (1 << 128) - 1
        value = U128(value_int)
        assert int(value << shift) == (value_int << shift) & value_int
        assert int(value >> shift) == value_int >> shift

    def test_single_bit_crosses_word_boundary(self):
        value = Bits128.one() << 63
        moved = value << 1
        assert moved.words.tolist() == [0, 1]
        assert (moved >> 1) == value

    def test_negative_shift_rejected(self):
        with pytest.raises(ValueError):
            Bits128.one() << -1

    def test_bit_indexing(self):
        value = Bits1024.from_int((1 << 700) | (1 << 3))
        assert value[700] and value[3]
        assert not value[699]
        assert U64(0b100).bit(2)
        with pytest.raises(IndexError):
            value.bit(1024)

    def test_mixing_widths_is_a_type_error(self):
        with pytest.raises(TypeError, match="same bit width"):
            U64.one() ^ U128.one()
        with pytest.raises(TypeError, match="same bit width"):
            Bits128.one().hamming_distance(Bits1024.one())

    def test_cross_type_values_are_not_equal(self):
        assert U128.one() != Bits128.one()

    def test_values_are_hashable(self):
        seen = {U64(1), U64(1), U64(2), Bits128.from_int(1), Bits128.from_int(1)}
        assert len(seen) == 3


# ---------------------------------------------------------------------------
# Hamming distance
# ---------------------------------------------------------------------------


class TestHammingDistance:
    @pytest.mark.parametrize("cls", [U64, U128, Bits128, Bits1024])
    def test_matches_popcount_of_xor(self, cls, rng):
        a_int, b_int = random_int(rng, cls.BITS), random_int(rng, cls.BITS)
        a, b = cls.from_int(a_int), cls.from_int(b_int)
        assert a.hamming_distance(b) == bin(a_int ^ b_int).count("1")

    @pytest.mark.parametrize("cls", [U64, U128, Bits1024])
    def test_symmetric_and_zero_iff_identical(self, cls, rng):
        a = cls.from_int(random_int(rng, cls.BITS))
        b = cls.from_int(random_int(rng, cls.BITS))
        assert a.hamming_distance(b) == b.hamming_distance(a)
        assert a.hamming_distance(a) == 0
        assert a.hamming_distance(b) > 0
        assert a.hamming_distance(a ^ cls.one()) == 1

    def test_complement_is_full_width(self):
        full = Bits1024.from_int((1 << 1024) - 1)
        assert Bits1024.zero().hamming_distance(full) == 1024
