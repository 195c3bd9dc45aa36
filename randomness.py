"""
Randomness provider: uniform big integers in bounded ranges.

Every consumer takes an optional ``rng`` (anything with ``getrandbits``).
When omitted, a per-thread ``random.Random`` is used so that concurrent callers
never share generator state. Not cryptographically secure.
"""

import logging
import random
import threading
from typing import Optional, Protocol

from prime_errors import InvalidInput, InvalidModulus, SamplingExhausted

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def getrandbits(self, k: int) -> int: ...


_thread_state = threading.local()


def default_source() -> random.Random:
    """Return the calling thread's generator, creating it on first use."""
    source = getattr(_thread_state, "source", None)
    if source is None:
        source = random.Random()
        _thread_state.source = source
    return source


def seed_default_source(seed) -> None:
    """Reseed the calling thread's default generator."""
    default_source().seed(seed)


def _byte_length(n: int) -> int:
    # two's-complement length: a positive value always keeps a clear sign bit
    return n.bit_length() // 8 + 1


def random_below(n: int, rng: Optional[RandomSource] = None,
                 max_draws: Optional[int] = None) -> int:
    """
    Uniform integer in [1, n - 1].

    Draws as many bytes as n occupies and clears the top bit. Draws at or
    above the largest multiple of n that fits are rejected, so reducing
    modulo n is unbiased; zero is rejected too. At least half of the masked
    range is accepted and zero has probability at most 1/2, so the expected
    number of draws is O(1).

    Args:
        n: Exclusive upper bound, n > 1
        rng: Randomness source (defaults to the per-thread generator)
        max_draws: Optional cap on draws before raising SamplingExhausted
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidInput(f"bound must be an int, got {type(n).__name__}")
    if n <= 1:
        raise InvalidModulus(n, minimum=2)
    source = rng if rng is not None else default_source()

    nbits = _byte_length(n) * 8
    top_bit_clear = (1 << (nbits - 1)) - 1
    # largest multiple of n not above the masked range
    accept_below = ((1 << (nbits - 1)) // n) * n
    draws = 0
    while True:
        if max_draws is not None and draws >= max_draws:
            logger.warning("random_below(%d) gave up after %d draws", n, draws)
            raise SamplingExhausted(n, draws)
        draws += 1
        raw = source.getrandbits(nbits) & top_bit_clear
        if raw >= accept_below:
            continue
        result = raw % n
        if result > 0:
            return result


def random_in_range(lo: int, hi: int, rng: Optional[RandomSource] = None,
                    max_draws: Optional[int] = None) -> int:
    """Uniform integer in [lo, hi] inclusive."""
    for name, value in (("lo", lo), ("hi", hi)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInput(f"{name} must be an int, got {type(value).__name__}")
    if lo > hi:
        raise InvalidInput(f"empty range [{lo}, {hi}]")
    # random_below(w + 2) covers [1, w + 1], i.e. w + 1 equally likely values
    return lo + random_below(hi - lo + 2, rng, max_draws) - 1


__all__ = [
    "RandomSource",
    "default_source",
    "seed_default_source",
    "random_below",
    "random_in_range",
]
