"""
Benchmark suite for the primality and factorization engine.

Benchmarks:
1. Arithmetic Kernel: double-and-add mulmod vs direct product, vectorized lanes
2. Primality Testing: Miller-Rabin by round count, trial division oracle
3. Pollard's Rho: single searches on semiprimes
4. Drivers: largest_prime_factor and factor_all across sizes
5. Cache Performance: memoized trial division and exact oracle
6. Stress Test: random semiprimes
"""

import time
import sys
import random
import statistics
from typing import List, Callable

import numpy as np

from factorization import (
    is_probable_prime, is_prime_exact, trial_division, find_nontrivial_factor,
    largest_prime_factor, factor_all, clear_caches
)
from modular_arithmetic import mulmod, powmod, mulmod_array, powmod_array


# ============================================================================
# BENCHMARK UTILITIES
# ============================================================================

class BenchmarkResult:
    """Timing statistics for one benchmarked call."""

    def __init__(self, name: str, times: List[float]):
        self.name = name
        self.times = sorted(times)

        self.min = min(times)
        self.max = max(times)
        self.mean = statistics.mean(times)
        self.median = statistics.median(times)
        self.stdev = statistics.stdev(times) if len(times) > 1 else 0

    def __str__(self):
        return (f"{self.name:40} | "
                f"Mean: {self.mean*1000:8.3f}ms | "
                f"Median: {self.median*1000:8.3f}ms | "
                f"StdDev: {self.stdev*1000:8.3f}ms | "
                f"Min: {self.min*1000:8.3f}ms | "
                f"Max: {self.max*1000:8.3f}ms")


def benchmark(func: Callable, *args, iterations: int = 5, **kwargs) -> BenchmarkResult:
    """
    Time func(*args, **kwargs) after one warm-up call.

    Returns:
        BenchmarkResult with timing statistics
    """
    times = []

    func(*args, **kwargs)

    for _ in range(iterations):
        start = time.perf_counter()
        func(*args, **kwargs)
        times.append(time.perf_counter() - start)

    return BenchmarkResult(func.__name__, times)


def _section(title: str):
    print("\n" + "="*100)
    print(title)
    print("="*100)


# ============================================================================
# 1. ARITHMETIC KERNEL BENCHMARKS
# ============================================================================

def benchmark_kernel():
    """Compare the addition-only kernel with direct multiplication."""
    _section("ARITHMETIC KERNEL BENCHMARKS")

    rng = random.Random(1)
    for bits in (64, 256, 1024):
        m = rng.getrandbits(bits) | 1
        a, b = rng.randrange(m), rng.randrange(m)

        result = benchmark(mulmod, a, b, m, iterations=20)
        result.name = f"mulmod double-and-add ({bits} bits)"
        print(result)

        result = benchmark(powmod, a, b, m, iterations=5)
        result.name = f"powmod direct product ({bits} bits)"
        print(result)

        if bits <= 256:
            result = benchmark(powmod, a, b, m, multiply=mulmod, iterations=2)
            result.name = f"powmod via mulmod ({bits} bits)"
            print(result)

    print("\n[Vectorized lanes]")
    m = (1 << 61) - 1
    for lanes in (16, 256, 4096):
        a = np.random.randint(0, m, size=lanes, dtype=np.int64)
        b = np.random.randint(0, m, size=lanes, dtype=np.int64)
        result = benchmark(mulmod_array, a, b, m, iterations=5)
        result.name = f"mulmod_array ({lanes} lanes)"
        print(result)

        result = benchmark(powmod_array, a, 65537, m, iterations=3)
        result.name = f"powmod_array e=65537 ({lanes} lanes)"
        print(result)


# ============================================================================
# 2. PRIMALITY TESTING BENCHMARKS
# ============================================================================

def benchmark_primality():
    """Benchmark Miller-Rabin against the trial division oracle."""
    _section("PRIMALITY TESTING BENCHMARKS")

    test_primes = [
        (104729, "Small prime (6 digits)"),
        (982451653, "Large prime (9 digits)"),
        (2**61 - 1, "Mersenne prime 2^61-1"),
        (2**521 - 1, "Mersenne prime 2^521-1"),
    ]

    for prime, description in test_primes:
        for rounds in (1, 20):
            result = benchmark(is_probable_prime, prime, rounds, iterations=5)
            result.name = f"{description:28} (r={rounds})"
            print(result)

    print("\n[Trial division oracle]")
    for prime in (104729, 982451653):
        clear_caches()
        times = []
        for _ in range(3):
            start = time.perf_counter()
            is_prime_exact(prime)
            times.append(time.perf_counter() - start)
        print(BenchmarkResult(f"is_prime_exact({prime})", times))


# ============================================================================
# 3. POLLARD RHO BENCHMARKS
# ============================================================================

def benchmark_pollard_rho():
    """Benchmark single factor searches."""
    _section("POLLARD RHO BENCHMARKS")

    test_cases = [
        (10403, "Small semiprime (101 * 103)"),
        (1000003 * 1000033, "Semiprime (~10^12)"),
        (1000000007 * 1000000009, "Semiprime (~10^18)"),
    ]

    for n, description in test_cases:
        result = benchmark(find_nontrivial_factor, n, iterations=3)
        result.name = description
        print(result)


# ============================================================================
# 4. DRIVER BENCHMARKS
# ============================================================================

def benchmark_drivers():
    """Benchmark largest_prime_factor and factor_all."""
    _section("FACTORIZATION DRIVER BENCHMARKS")

    test_cases = [
        (360, "Small composite"),
        (600851475143, "Classic benchmark 600851475143"),
        (2**64 + 1, "Fermat-like 2^64+1"),
        (1000000007 * 1000000009 * 3, "Two large primes times 3"),
    ]

    for n, description in test_cases:
        clear_caches()
        result = benchmark(largest_prime_factor, n, iterations=3)
        result.name = f"largest: {description}"
        print(result)

        clear_caches()
        result = benchmark(factor_all, n, iterations=3)
        result.name = f"all:     {description}"
        print(result)


# ============================================================================
# 5. CACHING IMPACT BENCHMARKS
# ============================================================================

def benchmark_caching_impact():
    """Benchmark the impact of memoized trial division."""
    _section("CACHING IMPACT BENCHMARKS")

    numbers = [1234567, 9876543, 10101010, 12345678, 98765432]

    clear_caches()
    times_cold = []
    for n in numbers:
        start = time.perf_counter()
        trial_division(n)
        times_cold.append(time.perf_counter() - start)
    result_cold = BenchmarkResult("trial_division (cold cache)", times_cold)
    print(result_cold)

    times_warm = []
    for n in numbers:
        start = time.perf_counter()
        trial_division(n)
        times_warm.append(time.perf_counter() - start)
    result_warm = BenchmarkResult("trial_division (warm cache)", times_warm)
    print(result_warm)

    speedup = result_cold.mean / result_warm.mean if result_warm.mean > 0 else float('inf')
    print(f"Cache speedup: {speedup:.2f}x\n")


# ============================================================================
# 6. STRESS TEST
# ============================================================================

def benchmark_stress_test():
    """Factor random semiprimes and verify the products."""
    _section("STRESS TEST (20 Random Semiprimes)")

    rng = random.Random(7)
    test_numbers = []
    while len(test_numbers) < 20:
        p = rng.randrange(10**5, 10**7)
        q = rng.randrange(10**5, 10**7)
        if is_probable_prime(p) and is_probable_prime(q):
            test_numbers.append(p * q)

    times = []
    successful = 0
    start_total = time.perf_counter()
    for n in test_numbers:
        start = time.perf_counter()
        factors = factor_all(n)
        elapsed = time.perf_counter() - start
        if np.prod(np.array(factors, dtype=object)) == n:
            successful += 1
            times.append(elapsed)
    total_time = time.perf_counter() - start_total

    if times:
        print(BenchmarkResult("Stress test factorizations", times))
    print(f"Successful: {successful}/{len(test_numbers)}")
    print(f"Total time: {total_time:.3f}s")


# ============================================================================
# MAIN BENCHMARK SUITE
# ============================================================================

def run_all_benchmarks():
    """Run all benchmarks."""
    print("\n")
    print("╔" + "="*98 + "╗")
    print("║" + " "*22 + "PRIMALITY / FACTORIZATION BENCHMARK SUITE" + " "*35 + "║")
    print("╚" + "="*98 + "╝")

    try:
        benchmark_kernel()
        benchmark_primality()
        benchmark_pollard_rho()
        benchmark_drivers()
        benchmark_caching_impact()
        benchmark_stress_test()

        print("\n" + "="*100)
        print("BENCHMARK COMPLETE")
        print("="*100 + "\n")

    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    run_all_benchmarks()
