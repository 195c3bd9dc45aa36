"""Tests for the randomness provider."""

import random
import threading
from collections import Counter

import pytest

from prime_errors import InvalidInput, InvalidModulus, SamplingExhausted, SearchExhausted
from randomness import (
    default_source,
    random_below,
    random_in_range,
    seed_default_source,
)


class ConstantSource:
    """Fake source that always returns the same bit pattern."""

    def __init__(self, fill_ones: bool):
        self.fill_ones = fill_ones
        self.requested = []

    def getrandbits(self, k: int) -> int:
        self.requested.append(k)
        return (1 << k) - 1 if self.fill_ones else 0


@pytest.fixture
def rng():
    return random.Random(5)


class TestRandomBelow:

    @pytest.mark.parametrize("n", [2, 3, 7, 255, 256, 257, 2**64, 2**521 - 1])
    def test_range(self, rng, n):
        for _ in range(500):
            assert 1 <= random_below(n, rng) <= n - 1

    def test_two_always_gives_one(self, rng):
        assert {random_below(2, rng) for _ in range(50)} == {1}

    def test_covers_whole_range(self, rng):
        counts = Counter(random_below(11, rng) for _ in range(5000))
        assert set(counts) == set(range(1, 11))
        # roughly uniform: every value well above zero share
        assert min(counts.values()) > 300

    @pytest.mark.parametrize("n", [65, 127])
    def test_uniform_at_byte_length_boundaries(self, n):
        # bit length 7: the masked 7-bit draw covers fewer than 2n values
        rng = random.Random(1)
        counts = Counter(random_below(n, rng) for _ in range(2000 * (n - 1)))
        assert set(counts) == set(range(1, n))
        assert max(counts.values()) < 1.3 * min(counts.values())

    def test_draws_byte_length_of_n(self):
        source = ConstantSource(fill_ones=True)
        random_below(256, source)
        random_below(2**16, source)
        # 256 needs a sign byte on top of its 9 bits; 2**16 needs three bytes
        assert source.requested == [16, 24]

    def test_top_bit_is_cleared(self):
        source = ConstantSource(fill_ones=True)
        # 15 bits of ones after masking: 32767 % 1024 == 1023
        assert random_below(1024, source) == 1023

    def test_draws_past_last_full_multiple_are_rejected(self):
        # 32767 lies beyond 32 * 1000, the last complete block of residues
        with pytest.raises(SamplingExhausted) as excinfo:
            random_below(1000, ConstantSource(fill_ones=True), max_draws=4)
        assert excinfo.value.attempts == 4

    def test_zero_draws_are_rejected(self):
        with pytest.raises(SamplingExhausted) as excinfo:
            random_below(97, ConstantSource(fill_ones=False), max_draws=5)
        assert excinfo.value.attempts == 5
        assert excinfo.value.bound == 97
        assert isinstance(excinfo.value, SearchExhausted)

    @pytest.mark.parametrize("n", [1, 0, -5])
    def test_bound_too_small(self, n):
        with pytest.raises(InvalidModulus):
            random_below(n)

    def test_non_integer_bound(self):
        with pytest.raises(InvalidInput):
            random_below(10.0)

    def test_seeded_sources_repeat(self):
        first = [random_below(10**30, random.Random(1)) for _ in range(3)]
        second = [random_below(10**30, random.Random(1)) for _ in range(3)]
        assert first == second


class TestRandomInRange:

    def test_inclusive_bounds(self, rng):
        seen = {random_in_range(3, 6, rng) for _ in range(2000)}
        assert seen == {3, 4, 5, 6}

    def test_zero_lower_bound(self, rng):
        seen = {random_in_range(0, 2, rng) for _ in range(1000)}
        assert seen == {0, 1, 2}

    def test_single_value(self, rng):
        assert random_in_range(42, 42, rng) == 42

    def test_negative_range(self, rng):
        for _ in range(200):
            assert -10 <= random_in_range(-10, -5, rng) <= -5

    def test_empty_range(self):
        with pytest.raises(InvalidInput):
            random_in_range(5, 4)


class TestDefaultSource:

    def test_same_object_within_thread(self):
        assert default_source() is default_source()

    def test_distinct_per_thread(self):
        sources = []

        def worker():
            sources.append(default_source())

        threads = [threading.Thread(target=worker) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len({id(s) for s in sources}) == 3
        assert all(s is not default_source() for s in sources)

    def test_seeding_is_reproducible(self):
        seed_default_source(123)
        first = [random_below(10**12) for _ in range(5)]
        seed_default_source(123)
        assert [random_below(10**12) for _ in range(5)] == first
