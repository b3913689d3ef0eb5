"""
Tests for wide modular arithmetic.

Tests verify:
1. Correctness: mulmod/powmod match arbitrary-precision results near 2^128
2. Edge cases: zero operands, modulus one, exponent zero and one
3. Validation: width checking and rejected moduli/exponents
4. NumPy operands: scalars and arrays are promoted before multiplying
5. Batch: mulmod_array/powmod_array match the scalar functions
"""

import random

import numpy as np
import pytest

from modular_arithmetic import (
    WIDTH,
    WIDE_WIDTH,
    MAX_VALUE,
    check_width,
    mulmod,
    powmod,
    mulmod_array,
    powmod_array,
)


# ============================================================================
# PART 1: MULMOD TESTS
# ============================================================================

class TestMulmod:
    """Test overflow-free modular multiplication."""

    def test_small_values(self):
        assert mulmod(3, 4, 5) == 2
        assert mulmod(0, 12345, 7) == 0
        assert mulmod(12345, 67890, 1) == 0

    def test_near_width_boundary(self):
        """Operands just below 2^128 whose product needs 256 bits."""
        m = MAX_VALUE
        a = MAX_VALUE - 1
        b = MAX_VALUE - 2
        assert (a * b).bit_length() > WIDTH
        assert mulmod(a, b, m) == (a * b) % m
        # (-1) * (-2) mod m
        assert mulmod(a, b, m) == 2

    def test_matches_arbitrary_precision(self):
        """Random a, b < m < 2^128 against Python integer arithmetic."""
        rng = random.Random(128)
        for _ in range(500):
            m = rng.randrange(2, 1 << WIDTH)
            a = rng.randrange(m)
            b = rng.randrange(m)
            result = mulmod(a, b, m)
            assert result == (a * b) % m
            assert 0 <= result < m

    def test_truncated_product_would_differ(self):
        """Reducing a product truncated to 128 bits gives a wrong answer."""
        m = (1 << WIDTH) - 159
        a = b = m - 1
        truncated = ((a * b) & MAX_VALUE) % m
        assert mulmod(a, b, m) == 1
        assert truncated != 1

    def test_numpy_scalars_near_2_63(self):
        """np.uint64 operands would wrap at 64 bits if multiplied as given."""
        p = 2**61 - 1
        assert mulmod(np.uint64(p - 1), np.uint64(p - 1), p) == 1
        a = np.uint64(2**63 + 5)
        b = np.uint64(2**63 - 7)
        m = np.uint64(2**63 - 25)
        result = mulmod(a, b, m)
        assert result == ((2**63 + 5) * (2**63 - 7)) % (2**63 - 25)
        assert type(result) is int

    @pytest.mark.parametrize("m", [0, -7])
    def test_rejects_non_positive_modulus(self, m):
        with pytest.raises(ValueError):
            mulmod(2, 3, m)


# ============================================================================
# PART 2: POWMOD TESTS
# ============================================================================

class TestPowmod:
    """Test square-and-multiply exponentiation."""

    def test_base_cases(self):
        assert powmod(7, 0, 13) == 1
        assert powmod(7, 0, 1) == 0
        assert powmod(20, 1, 13) == 7
        assert powmod(0, 5, 13) == 0

    def test_fermat(self):
        p = 2**127 - 1
        for a in [2, 3, 12345678901234567890]:
            assert powmod(a, p - 1, p) == 1

    def test_matches_builtin_pow(self):
        rng = random.Random(256)
        for _ in range(200):
            m = rng.randrange(2, 1 << WIDTH)
            a = rng.randrange(1 << WIDTH)
            e = rng.randrange(1 << WIDTH)
            assert powmod(a, e, m) == pow(a, e, m)

    def test_wider_than_width(self):
        """powmod itself does not limit the operand width."""
        m = 2**521 - 1
        assert powmod(3, m - 1, m) == 1

    def test_numpy_operands(self):
        p = 2**61 - 1
        assert powmod(np.uint64(3), p - 1, p) == 1
        assert powmod(np.int64(3), np.int64(p - 1), np.int64(p)) == 1
        q = 2**63 - 25
        assert powmod(np.uint64(q - 2), np.uint64(q - 1), np.uint64(q)) == 1

    def test_rejects_negative_exponent(self):
        with pytest.raises(ValueError):
            powmod(2, -1, 7)

    def test_rejects_zero_modulus(self):
        with pytest.raises(ValueError):
            powmod(2, 3, 0)


# ============================================================================
# PART 3: WIDTH CHECKING TESTS
# ============================================================================

class TestCheckWidth:
    """Test fixed-width operand validation."""

    def test_accepts_range(self):
        assert WIDE_WIDTH == 2 * WIDTH
        assert check_width(0) == 0
        assert check_width(MAX_VALUE) == MAX_VALUE

    def test_rejects_too_wide(self):
        with pytest.raises(ValueError, match="does not fit in 128 bits"):
            check_width(MAX_VALUE + 1)

    def test_rejects_negative(self):
        with pytest.raises(ValueError, match="negative"):
            check_width(-1)

    def test_custom_width(self):
        assert check_width(255, width=8) == 255
        with pytest.raises(ValueError):
            check_width(256, width=8)

    def test_numpy_scalars(self):
        result = check_width(np.uint64(2**64 - 1))
        assert result == 2**64 - 1
        assert type(result) is int
        with pytest.raises(ValueError, match="negative"):
            check_width(np.int64(-3))


# ============================================================================
# PART 4: BATCH MULMOD TESTS
# ============================================================================

class TestMulmodArray:
    """Test NumPy batch multiply-mod."""

    def test_matches_scalar(self):
        rng = random.Random(7)
        m = (1 << WIDTH) - 159
        a = [rng.randrange(m) for _ in range(100)]
        b = [rng.randrange(m) for _ in range(100)]

        result = mulmod_array(a, b, m)

        assert isinstance(result, np.ndarray)
        assert result.shape == (100,)
        assert result.tolist() == [mulmod(x, y, m) for x, y in zip(a, b)]

    def test_no_int64_wraparound(self):
        """int64 inputs are promoted before multiplying."""
        m = 2**61 - 1
        a = np.array([2**62, 2**62 + 1], dtype=np.int64)
        b = np.array([2**62, 3], dtype=np.int64)

        result = mulmod_array(a, b, m)

        assert result.tolist() == [(2**124) % m, ((2**62 + 1) * 3) % m]

    def test_broadcast_scalar(self):
        result = mulmod_array([1, 2, 3], 5, 7)
        assert result.tolist() == [5, 3, 1]

    def test_empty(self):
        assert mulmod_array([], [], 7).tolist() == []

    def test_rejects_zero_modulus(self):
        with pytest.raises(ValueError):
            mulmod_array([1], [1], 0)

    def test_list_of_numpy_scalars(self):
        """Elements given as np.uint64 scalars are promoted, not multiplied in 64 bits."""
        p = 2**61 - 1
        a = [np.uint64(p - 1), np.uint64(2**63)]
        result = mulmod_array(a, a, p)
        assert result.tolist() == [1, (2**126) % p]

    def test_modulus_per_element(self):
        result = mulmod_array([3, 3, 3], [5, 5, 5], [7, 11, 13])
        assert result.tolist() == [1, 4, 2]

    def test_rejects_non_positive_modulus_in_array(self):
        with pytest.raises(ValueError):
            mulmod_array([1, 2], [1, 2], [7, 0])


class TestPowmodArray:
    """Test batched square-and-multiply."""

    def test_matches_scalar(self):
        rng = random.Random(9)
        m = [rng.randrange(2, 1 << WIDTH) for _ in range(50)]
        a = [rng.randrange(1 << WIDTH) for _ in range(50)]
        e = [rng.randrange(1 << WIDTH) for _ in range(50)]

        result = powmod_array(a, e, m)

        assert result.tolist() == [powmod(x, y, z) for x, y, z in zip(a, e, m)]

    def test_mixed_exponents(self):
        """Zero, one and large exponents in the same batch."""
        p = 2**127 - 1
        result = powmod_array([5, 5, 5, 5], [0, 1, 2, p - 1], p)
        assert result.tolist() == [1, 5, 25, 1]

    def test_broadcast_scalar_exponent_and_modulus(self):
        result = powmod_array(np.array([2, 3, 4], dtype=np.int64), 10, 1000)
        assert result.tolist() == [24, 49, 576]

    def test_modulus_one(self):
        assert powmod_array([7, 8], [0, 3], 1).tolist() == [0, 0]

    def test_empty(self):
        assert powmod_array([], [], 7).tolist() == []

    def test_rejects_negative_exponent(self):
        with pytest.raises(ValueError):
            powmod_array([2, 3], [1, -1], 7)

    def test_rejects_zero_modulus(self):
        with pytest.raises(ValueError):
            powmod_array([2], [3], [0])
