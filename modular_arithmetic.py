"""
Modular arithmetic kernel for the primality and factorization engine.

Scalar operations work on Python ints of any size. The vectorized variants
apply the same double-and-add method element-wise over NumPy int64 arrays,
which keeps every intermediate below 2*m and therefore inside int64 for any
modulus below 2**62.

KERNEL:
1. mulmod: binary (double-and-add) modular multiplication
2. powmod: square-and-multiply modular exponentiation
3. mulmod_array / powmod_array: NumPy vectorized counterparts
4. sieve_of_eratosthenes: NumPy boolean prime table
"""

import math
from typing import Callable, List, Optional

import numpy as np

from prime_errors import InvalidInput, InvalidModulus

# Largest modulus accepted by the int64 array kernel (a + a must not overflow).
ARRAY_MODULUS_LIMIT: int = 1 << 62


def _require_int(name: str, value) -> None:
    # bool is an int subclass but never a meaningful operand here
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an int, got {type(value).__name__}")


def _require_modulus(m) -> None:
    _require_int("modulus", m)
    if m <= 0:
        raise InvalidModulus(m)


def normalize_residue(a: int, m: int) -> int:
    """Map any integer a into [0, m)."""
    _require_int("a", a)
    _require_modulus(m)
    return a % m


# ============================================================================
# PART 1: SCALAR KERNEL
# ============================================================================

def mulmod(a: int, b: int, m: int) -> int:
    """
    Compute (a * b) mod m by binary double-and-add accumulation.

    b is halved every step while a is doubled modulo m; a is added into the
    accumulator whenever the current low bit of b is set. No intermediate
    exceeds 2*m.

    Args:
        a, b: Factors (negative values are normalized into [0, m))
        m: Modulus, m >= 1

    Returns:
        r with 0 <= r < m
    """
    _require_int("a", a)
    _require_int("b", b)
    _require_modulus(m)

    a %= m
    b %= m
    acc: int = 0
    while b:
        if b & 1:
            acc += a
            if acc >= m:
                acc -= m
        b >>= 1
        a += a
        if a >= m:
            a -= m
    return acc


def _product_mod(a: int, b: int, m: int) -> int:
    # Python ints are unbounded, so multiply-then-reduce never overflows
    return (a * b) % m


def powmod(a: int, b: int, m: int,
           multiply: Optional[Callable[[int, int, int], int]] = None) -> int:
    """
    Compute (a ** b) mod m by square-and-multiply.

    Python ints never overflow, so the default step multiplies directly and
    reduces; Miller-Rabin runs on that path. Passing multiply=mulmod gives the
    addition-only composition for arithmetic without unbounded products.

    Args:
        a: Base (negative values are normalized into [0, m))
        b: Exponent, b >= 0
        m: Modulus, m >= 1
        multiply: Modular multiplication step. Defaults to a direct product,
                  pass mulmod to run the whole computation on additions.

    Returns:
        r with 0 <= r < m (powmod(a, 0, m) == 1 % m)
    """
    _require_int("a", a)
    _require_int("b", b)
    _require_modulus(m)
    if b < 0:
        raise InvalidInput(f"exponent must be >= 0, got {b}")

    mul = multiply or _product_mod
    a %= m
    result: int = 1 % m
    while b:
        if b & 1:
            result = mul(result, a, m)
        b >>= 1
        if b:
            a = mul(a, a, m)
    return result


# ============================================================================
# PART 2: VECTORIZED KERNEL (NumPy)
# ============================================================================

def _require_array_modulus(m) -> None:
    _require_modulus(m)
    if m >= ARRAY_MODULUS_LIMIT:
        raise InvalidInput(f"array kernel needs modulus < 2**62, got {m}")


def mulmod_array(a, b, m: int) -> np.ndarray:
    """
    Element-wise (a * b) mod m over int64 arrays (broadcasting like NumPy).

    Same double-and-add loop as mulmod, run on all lanes at once until every
    multiplier is exhausted.
    """
    _require_array_modulus(m)
    mod = np.int64(m)
    a_arr = np.mod(np.asarray(a, dtype=np.int64), mod)
    b_arr = np.mod(np.asarray(b, dtype=np.int64), mod)
    a_arr, b_arr = (np.array(x, dtype=np.int64) for x in np.broadcast_arrays(a_arr, b_arr))

    acc: np.ndarray = np.zeros_like(a_arr)
    while np.any(b_arr):
        odd = (b_arr & 1).astype(bool)
        acc[odd] = np.mod(acc[odd] + a_arr[odd], mod)
        b_arr >>= 1
        a_arr = np.mod(a_arr + a_arr, mod)
    return acc


def powmod_array(bases, exponent: int, m: int) -> np.ndarray:
    """Raise every element of bases to a shared exponent modulo m."""
    _require_int("exponent", exponent)
    if exponent < 0:
        raise InvalidInput(f"exponent must be >= 0, got {exponent}")
    _require_array_modulus(m)

    base: np.ndarray = np.mod(np.asarray(bases, dtype=np.int64), np.int64(m))
    result: np.ndarray = np.full(base.shape, 1 % m, dtype=np.int64)
    e = exponent
    while e:
        if e & 1:
            result = mulmod_array(result, base, m)
        e >>= 1
        if e:
            base = mulmod_array(base, base, m)
    return result


def sieve_of_eratosthenes(limit: int) -> np.ndarray:
    """
    Boolean table of length limit where entry i is True iff i is prime.

    Multiples are struck out with strided slice assignment, one prime at a time.
    """
    _require_int("limit", limit)
    if limit < 0:
        raise InvalidInput(f"limit must be >= 0, got {limit}")

    sieve: np.ndarray = np.ones(limit, dtype=bool)
    sieve[:2] = False
    if limit > 4:
        sieve[4::2] = False
    for i in range(3, math.isqrt(max(limit - 1, 0)) + 1, 2):
        if sieve[i]:
            sieve[i * i::2 * i] = False
    return sieve


__all__: List[str] = [
    'ARRAY_MODULUS_LIMIT',
    'normalize_residue',
    'mulmod',
    'powmod',
    'mulmod_array',
    'powmod_array',
    'sieve_of_eratosthenes',
]
