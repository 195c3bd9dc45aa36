"""
Primality testing and integer factorization for integers of any size.

ALGORITHMS:
1. Trial division: exact primality oracle and small-factor stripping
   - Pre-sieved small-prime table built with NumPy
2. Miller-Rabin: probabilistic primality test
   - Random witnesses, error <= 4**-rounds for composite inputs
3. Pollard's Rho: randomized factor finder
   - Floyd walk on x -> x^2 + c with batched GCDs (window doubles up to 128)
4. Factorization drivers: largest_prime_factor, factor_all, factor_counts
   - Explicit worklist instead of recursion
   - Retry budget (attempts and/or wall-clock time) on the factor search

Randomized functions accept ``rng`` (anything with ``getrandbits``); the
default is a per-thread generator, see randomness.py.
"""
import logging
import math
import time
from collections import Counter
from functools import lru_cache
from typing import Optional

import numpy as np

from modular_arithmetic import powmod, sieve_of_eratosthenes
from prime_errors import FactorSearchExhausted, InvalidInput
from randomness import RandomSource, random_below, random_in_range

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 20
BATCH_CAP = 128
DEFAULT_MAX_ATTEMPTS = 256

# Pre-computed primes used to strip small factors before any randomized search
SMALL_PRIMES_LIMIT = 10000

# Below this the drivers classify values exactly instead of with Miller-Rabin
TRIAL_DIVISION_CUTOFF = 10**6


def _require_natural(n, name: str = "n") -> None:
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidInput(f"{name} must be an int, got {type(n).__name__}")
    if n < 0:
        raise InvalidInput(f"{name} must be >= 0, got {n}")


@lru_cache(maxsize=1)
def get_small_primes() -> tuple[int, ...]:
    """Primes up to SMALL_PRIMES_LIMIT (memoized)."""
    sieve = sieve_of_eratosthenes(SMALL_PRIMES_LIMIT + 1)
    return tuple(int(p) for p in np.flatnonzero(sieve))


def clear_caches():
    """Clear all memoization caches."""
    get_small_primes.cache_clear()
    _is_prime_exact_cached.cache_clear()
    _trial_division_cached.cache_clear()


# ============================================================================
# TRIAL DIVISION
# ============================================================================

def is_prime_exact(n: int) -> bool:
    """
    Deterministic primality by trial division (memoized).

    Exact for every n but O(sqrt(n)); intended for small inputs and as the
    reference oracle for is_probable_prime.
    """
    _require_natural(n)
    return _is_prime_exact_cached(n)


@lru_cache(maxsize=1024)
def _is_prime_exact_cached(n: int) -> bool:
    if n < 2:
        return False
    if n == 2 or n == 3:
        return True
    if (n & 1) == 0:
        return False
    for d in range(3, math.isqrt(n) + 1, 2):
        if n % d == 0:
            return False
    return True


is_prime_trial = is_prime_exact


@lru_cache(maxsize=64)
def _trial_division_cached(n: int, bound: int) -> tuple[tuple[int, ...], int]:
    factors: list[int] = []

    while (n & 1) == 0:
        factors.append(2)
        n >>= 1
    if n == 1:
        return tuple(factors), n

    if bound <= SMALL_PRIMES_LIMIT:
        primes = get_small_primes()
    else:
        primes = tuple(int(p) for p in np.flatnonzero(sieve_of_eratosthenes(bound + 1)))

    for p in primes:
        if p > bound:
            break
        if p == 2:
            continue
        if p * p > n:
            # no divisor up to sqrt(n) left, so n itself is prime
            factors.append(n)
            n = 1
            break
        while n % p == 0:
            factors.append(p)
            n //= p
        if n == 1:
            break

    return tuple(factors), n


def trial_division(n: int, bound: int = SMALL_PRIMES_LIMIT) -> tuple[list[int], int]:
    """
    Strip every prime factor <= bound from n.

    Args:
        n: Integer to reduce, n >= 1
        bound: Largest trial divisor

    Returns:
        (factors, remainder): factors found in ascending order with multiplicity,
        and the cofactor that has no prime factor <= bound (1 if fully factored)
    """
    _require_natural(n)
    if n == 0:
        raise InvalidInput("cannot trial-divide 0")
    _require_natural(bound, "bound")
    factors, remainder = _trial_division_cached(n, bound)
    return list(factors), remainder


# ============================================================================
# MILLER-RABIN
# ============================================================================

def split_power_of_two(m: int) -> tuple[int, int]:
    """Return (s, d) with m == d * 2**s and d odd, for m >= 1."""
    _require_natural(m, "m")
    if m == 0:
        raise InvalidInput("0 has no odd part")
    s: int = 0
    d: int = m
    while (d & 1) == 0:
        d >>= 1
        s += 1
    return s, d


def witness_passes(a: int, n: int, s: Optional[int] = None, d: Optional[int] = None) -> bool:
    """
    Single Miller-Rabin round for odd n > 3 with witness a in [1, n - 2].

    Returns False only when a proves n composite. (s, d) is the decomposition
    n - 1 == d * 2**s and is computed when not supplied.
    """
    if s is None or d is None:
        s, d = split_power_of_two(n - 1)

    x: int = powmod(a, d, n)
    if x == 1 or x == n - 1:
        return True
    for _ in range(s - 1):
        x = powmod(x, 2, n)
        if x == n - 1:
            return True
    return False


def is_probable_prime(n: int, rounds: int = DEFAULT_ROUNDS,
                      rng: Optional[RandomSource] = None) -> bool:
    """
    Miller-Rabin primality test.

    A prime always returns True. A composite survives a single random witness
    with probability at most 1/4, so it is reported prime with probability at
    most 4**-rounds.

    Args:
        n: Candidate, n >= 0
        rounds: Number of independent random witnesses
        rng: Randomness source (defaults to the per-thread generator)
    """
    _require_natural(n)
    if isinstance(rounds, bool) or not isinstance(rounds, int) or rounds < 1:
        raise InvalidInput(f"rounds must be a positive int, got {rounds!r}")
    if n == 2 or n == 3:
        return True
    if n < 2 or (n & 1) == 0:
        return False

    s, d = split_power_of_two(n - 1)
    for _ in range(rounds):
        a = random_below(n - 2, rng) + 1
        if not witness_passes(a, n, s, d):
            return False
    return True


def _is_prime(n: int, rounds: int, rng: Optional[RandomSource]) -> bool:
    if n < TRIAL_DIVISION_CUTOFF:
        return is_prime_exact(n)
    return is_probable_prime(n, rounds, rng)


# ============================================================================
# POLLARD'S RHO
# ============================================================================

def find_factor(n: int, rng: Optional[RandomSource] = None) -> int:
    """
    One Pollard's Rho search for a factor of n >= 4.

    Walks x -> (x^2 + c) mod n from a random start with a random offset c,
    the slow position one step and the fast position two steps at a time.
    |slow - fast| is multiplied into an accumulator for a batch of steps and
    a single GCD with n is taken per batch; the batch length doubles up to
    BATCH_CAP.

    Returns:
        A nontrivial factor, or n itself when the walk cycled without
        revealing one (retry with fresh randomness; not a primality proof).
    """
    _require_natural(n)
    if n < 4:
        raise InvalidInput(f"find_factor needs n >= 4, got {n}")
    if n == 4:
        return 2

    c: int = random_in_range(3, n - 1, rng)
    slow: int = random_in_range(0, n - 1, rng)
    fast: int = slow

    def step(x: int) -> int:
        return (x * x % n + c) % n

    slow = step(slow)
    fast = step(step(fast))
    lim: int = 1
    while slow != fast:
        product: int = 1
        for _ in range(lim):
            tmp = product * abs(slow - fast) % n
            if tmp == 0:
                break
            product = tmp
            slow = step(slow)
            fast = step(step(fast))
        g = math.gcd(product, n)
        if g > 1:
            return g
        lim = min(lim * 2, BATCH_CAP)

    logger.debug("rho walk for %d closed its cycle (c=%d) without a factor", n, c)
    return n


def _search_factor(n: int, rng: Optional[RandomSource], max_attempts: Optional[int],
                   deadline: Optional[float], started: float) -> int:
    attempts = 0
    while True:
        if ((max_attempts is not None and attempts >= max_attempts)
                or (deadline is not None and time.monotonic() >= deadline)):
            elapsed = time.monotonic() - started
            logger.warning("factor search for %d exhausted after %d attempts", n, attempts)
            raise FactorSearchExhausted(n, attempts, elapsed)
        attempts += 1
        f = find_factor(n, rng)
        if f != n:
            if attempts > 1:
                logger.debug("factor %d of %d found on attempt %d", f, n, attempts)
            return f


def _deadline(timeout: Optional[float], started: float) -> Optional[float]:
    if timeout is None:
        return None
    if timeout < 0:
        raise InvalidInput(f"timeout must be >= 0, got {timeout}")
    return started + timeout


def find_nontrivial_factor(n: int, rng: Optional[RandomSource] = None,
                           max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
                           timeout: Optional[float] = None) -> int:
    """
    Retry find_factor with fresh randomness until it yields f with 1 < f < n.

    n must be composite; a prime input exhausts the budget.

    Raises:
        FactorSearchExhausted: max_attempts searches (or timeout seconds) passed
    """
    _require_natural(n)
    if n < 4:
        raise InvalidInput(f"{n} has no nontrivial factor")
    started = time.monotonic()
    return _search_factor(n, rng, max_attempts, _deadline(timeout, started), started)


# ============================================================================
# FACTORIZATION DRIVERS
# ============================================================================

def largest_prime_factor(n: int, rounds: int = DEFAULT_ROUNDS,
                         rng: Optional[RandomSource] = None,
                         max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
                         timeout: Optional[float] = None) -> int:
    """
    Largest prime factor of n (n itself when n is prime, 0 when n < 2).

    Small primes are stripped by trial division, then a worklist of cofactors
    is reduced with Pollard's Rho. Values no larger than the best prime found
    so far are skipped, since none of their factors can beat it.

    Args:
        n: Integer to factor, n >= 0
        rounds: Miller-Rabin rounds per primality check
        rng: Randomness source (defaults to the per-thread generator)
        max_attempts: Factor-search attempts allowed per composite (None: unbounded)
        timeout: Wall-clock seconds for the whole call (None: unbounded)

    Raises:
        FactorSearchExhausted: the retry budget ran out
    """
    _require_natural(n)
    started = time.monotonic()
    deadline = _deadline(timeout, started)
    if n < 2:
        return 0

    small_factors, rest = trial_division(n)
    current_max: int = small_factors[-1] if small_factors else 0

    worklist: list[int] = [rest]
    while worklist:
        m = worklist.pop()
        if m <= current_max or m < 2:
            continue
        if _is_prime(m, rounds, rng):
            current_max = m
            continue
        p = _search_factor(m, rng, max_attempts, deadline, started)
        while m % p == 0:
            m //= p
        logger.debug("split off %d, cofactor %d, %d entries pending", p, m, len(worklist))
        worklist.append(m)
        worklist.append(p)

    logger.debug("largest prime factor of %d is %d", n, current_max)
    return current_max


def factor_counts(n: int, rounds: int = DEFAULT_ROUNDS,
                  rng: Optional[RandomSource] = None,
                  max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
                  timeout: Optional[float] = None) -> Counter:
    """
    Prime factorization of n >= 1 as a Counter {prime: exponent}.

    Each worklist entry carries the multiplicity it contributes, so stripping
    k copies of a found factor p pushes (p, k * multiplicity).
    """
    _require_natural(n)
    if n == 0:
        raise InvalidInput("0 has no prime factorization")
    started = time.monotonic()
    deadline = _deadline(timeout, started)

    counts: Counter = Counter()
    if n == 1:
        return counts

    small_factors, rest = trial_division(n)
    counts.update(small_factors)

    worklist: list[tuple[int, int]] = [(rest, 1)]
    while worklist:
        m, multiplicity = worklist.pop()
        if m == 1:
            continue
        if _is_prime(m, rounds, rng):
            counts[m] += multiplicity
            continue
        p = _search_factor(m, rng, max_attempts, deadline, started)
        k = 0
        while m % p == 0:
            m //= p
            k += 1
        logger.debug("split off %d^%d, cofactor %d, %d entries pending", p, k, m, len(worklist))
        worklist.append((p, multiplicity * k))
        worklist.append((m, multiplicity))

    return counts


def factor_all(n: int, rounds: int = DEFAULT_ROUNDS,
               rng: Optional[RandomSource] = None,
               max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
               timeout: Optional[float] = None) -> list[int]:
    """
    Factorize n into prime factors.

    Returns:
        Prime factors in ascending order, repeated by multiplicity
        (empty for n == 1)
    """
    counts = factor_counts(n, rounds, rng, max_attempts, timeout)
    return sorted(counts.elements())


__all__ = [
    'DEFAULT_ROUNDS',
    'BATCH_CAP',
    'DEFAULT_MAX_ATTEMPTS',
    'SMALL_PRIMES_LIMIT',
    'TRIAL_DIVISION_CUTOFF',
    'get_small_primes',
    'clear_caches',
    'is_prime_exact',
    'is_prime_trial',
    'trial_division',
    'split_power_of_two',
    'witness_passes',
    'is_probable_prime',
    'find_factor',
    'find_nontrivial_factor',
    'largest_prime_factor',
    'factor_counts',
    'factor_all',
]
