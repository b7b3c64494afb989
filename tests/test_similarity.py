from __future__ import annotations

import math

import numpy as np
import pytest

from superbit import U64, BitArray, estimate_angle, estimate_cosine, hamming_similarity
from superbit.utils.similarity import cosine_similarity


class TestSignatureSimilarity:
    def test_identical_signatures(self):
        a = U64(0xDEADBEEF)
        assert hamming_similarity(a, a) == 1.0
        assert estimate_angle(a, a) == 0.0
        assert estimate_cosine(a, a) == 1.0

    def test_complementary_signatures(self):
        a, b = U64(0), U64((1 << 64) - 1)
        assert hamming_similarity(a, b) == 0.0
        assert estimate_angle(a, b) == pytest.approx(math.pi)
        assert estimate_cosine(a, b) == pytest.approx(-1.0)

    def test_half_differing_is_orthogonal(self):
        Bits = BitArray.with_words(2)
        a, b = Bits.zero(), Bits.from_int((1 << 64) - 1)
        assert hamming_similarity(a, b) == 0.5
        assert estimate_cosine(a, b) == pytest.approx(0.0, abs=1e-12)

    def test_explicit_length(self):
        a, b = U64(0), U64(0b11)
        assert hamming_similarity(a, b, length=16) == pytest.approx(1 - 2 / 16)
        with pytest.raises(ValueError, match="length must be in"):
            hamming_similarity(a, b, length=65)


class TestCosineSimilarity:
    def test_known_values(self):
        assert cosine_similarity([1, 0], [0, 1]) == 0.0
        assert cosine_similarity([1, 1], [2, 2]) == pytest.approx(1.0)
        assert cosine_similarity(np.array([1.0, 0.0]), np.array([-3.0, 0.0])) == -1.0

    def test_zero_vector_rejected(self):
        with pytest.raises(ValueError, match="zero vector"):
            cosine_similarity([0, 0], [1, 1])

    def test_shape_mismatch_rejected(self):
        with pytest.raises(ValueError, match="Shape mismatch"):
            cosine_similarity([1, 2, 3], [1, 2])
