"""
Wide modular arithmetic for the factorization library.

Operands are fixed-width unsigned integers of up to WIDTH (128) bits. Products
of two operands need up to WIDE_WIDTH (256) bits before they are reduced, so
every multiplication here is formed at full precision and only then reduced
modulo m. Nothing is ever truncated back to WIDTH bits before the reduction.

CONTENTS:
1. Width checking: boundary validation for fixed-width operands
2. mulmod / powmod: scalar multiply-mod and square-and-multiply power-mod
3. mulmod_array / powmod_array: NumPy elementwise multiply-mod and power-mod
   on object arrays, one modulus per element if needed
"""

import operator

import numpy as np
from typing import List, Sequence, Union

WIDTH: int = 128
WIDE_WIDTH: int = 2 * WIDTH
MAX_VALUE: int = (1 << WIDTH) - 1


# ============================================================================
# PART 1: WIDTH CHECKING
# ============================================================================

def check_width(n: int, width: int = WIDTH) -> int:
    """
    Validate that n is an unsigned integer representable in `width` bits.

    Args:
        n: Value to check
        width: Number of bits available

    Returns:
        n as a Python int

    Raises:
        ValueError: if n is negative or needs more than `width` bits
    """
    n = operator.index(n)
    if n < 0:
        raise ValueError(f"{n} is negative, expected an unsigned integer")
    if n.bit_length() > width:
        raise ValueError(f"{n} does not fit in {width} bits")
    return n


# ============================================================================
# PART 2: SCALAR MODULAR ARITHMETIC
# ============================================================================

def mulmod(a: int, b: int, m: int) -> int:
    """
    Compute (a * b) mod m without intermediate overflow.

    The product a * b of two WIDTH-bit operands can take WIDE_WIDTH bits. It is
    formed as an exact integer and reduced afterwards, so the result matches
    arbitrary-precision arithmetic for every a, b < 2**WIDTH.

    Args:
        a: First factor
        b: Second factor
        m: Modulus (must be positive)

    Returns:
        (a * b) mod m, in [0, m)
    """
    a, b, m = operator.index(a), operator.index(b), operator.index(m)
    if m <= 0:
        raise ValueError(f"modulus must be positive, got {m}")
    return (a * b) % m


def powmod(a: int, e: int, m: int) -> int:
    """
    Compute (a ** e) mod m by repeated squaring.

    Every squaring and every multiplication goes through mulmod.

    Args:
        a: Base
        e: Exponent (non-negative)
        m: Modulus (must be positive)

    Returns:
        (a ** e) mod m
    """
    a, e, m = operator.index(a), operator.index(e), operator.index(m)
    if e < 0:
        raise ValueError(f"exponent must be non-negative, got {e}")
    if m <= 0:
        raise ValueError(f"modulus must be positive, got {m}")
    if e == 0:
        return 1 % m
    base: int = a % m
    if e == 1:
        return base

    result: int = 1 % m
    while e > 0:
        if e & 1:
            result = mulmod(result, base, m)
        e >>= 1
        if e:
            base = mulmod(base, base, m)
    return result


# ============================================================================
# PART 3: BATCH MODULAR ARITHMETIC (NumPy)
# ============================================================================

_to_python_int = np.frompyfunc(operator.index, 1, 1)


def _as_object_array(values: Union[int, Sequence[int], np.ndarray]) -> np.ndarray:
    """Object array whose elements are Python ints (NumPy scalars would wrap)."""
    return np.asarray(_to_python_int(np.asarray(values, dtype=object)), dtype=object)


def mulmod_array(
    a: Union[Sequence[int], np.ndarray],
    b: Union[Sequence[int], np.ndarray],
    m: Union[int, Sequence[int], np.ndarray]
) -> np.ndarray:
    """
    Elementwise (a * b) mod m over arrays of wide integers.

    Fixed-size NumPy dtypes top out at 64 bits and would wrap silently, so
    the operands are held in object arrays of Python ints and every element
    keeps full precision. Shapes broadcast the usual NumPy way, so m may be a
    single modulus or one modulus per element.

    Args:
        a: Sequence or array of first factors
        b: Sequence or array of second factors
        m: Modulus or array of moduli (all positive)

    Returns:
        Object array of reduced products
    """
    m_arr: np.ndarray = _as_object_array(m)
    if np.any(m_arr <= 0):
        raise ValueError(f"moduli must be positive, got {m}")
    return (_as_object_array(a) * _as_object_array(b)) % m_arr


def powmod_array(
    a: Union[Sequence[int], np.ndarray],
    e: Union[int, Sequence[int], np.ndarray],
    m: Union[int, Sequence[int], np.ndarray]
) -> np.ndarray:
    """
    Elementwise (a ** e) mod m by repeated squaring over the whole batch.

    One pass per exponent bit: every element is squared through mulmod_array,
    and multiplied into its result only where its own exponent has that bit
    set. Exponents and moduli broadcast against the bases.
    """
    a_arr, e_arr, m_arr = np.broadcast_arrays(
        _as_object_array(a), _as_object_array(e), _as_object_array(m)
    )
    if np.any(e_arr < 0):
        raise ValueError("exponents must be non-negative")
    if np.any(m_arr <= 0):
        raise ValueError("moduli must be positive")

    result: np.ndarray = np.ones(a_arr.shape, dtype=object) % m_arr
    base: np.ndarray = a_arr % m_arr
    e_arr = e_arr.copy()
    while np.any((e_arr > 0).astype(bool)):
        odd: np.ndarray = ((e_arr & 1) == 1).astype(bool)
        result = np.where(odd, mulmod_array(result, base, m_arr), result)
        e_arr = e_arr >> 1
        base = mulmod_array(base, base, m_arr)
    return result


__all__: List[str] = [
    'WIDTH',
    'WIDE_WIDTH',
    'MAX_VALUE',
    'check_width',
    'mulmod',
    'powmod',
    'mulmod_array',
    'powmod_array',
]
