"""
Benchmark suite for the prime factorization library.

Benchmarks:
1. Primality Testing: Miller-Rabin on random values of 16 to 2048 bits,
   one value at a time vs the batched is_prime_many
2. Modular Arithmetic: scalar mulmod/powmod vs batch mulmod_array at 128 bits
3. Semiprime Factorization: products of two random primes, 16 to 64 bits
4. Batch Throughput: sequential vs process-pool factorization of many inputs
"""

import time
import sys
import random
import statistics
from typing import List, Callable
import numpy as np

from factorization import (
    is_prime, is_prime_many, factorization, gen_prime, factor_many, close_pool
)
from modular_arithmetic import mulmod, powmod, mulmod_array, WIDTH


# ============================================================================
# BENCHMARK UTILITIES
# ============================================================================

class BenchmarkResult:
    """Timing statistics for one benchmark; `items` is the batch size per run."""

    def __init__(self, name: str, times: List[float], items: int = 1):
        self.name = name
        self.items = items
        self.mean = statistics.mean(times)
        self.median = statistics.median(times)
        self.stdev = statistics.stdev(times) if len(times) > 1 else 0
        self.min = min(times)
        self.max = max(times)

    def __str__(self):
        line = (f"{self.name:40} | "
                f"Median: {self.median*1000:8.3f}ms | "
                f"Mean: {self.mean*1000:8.3f}ms ± {self.stdev*1000:7.3f} | "
                f"Range: {self.min*1000:8.3f}-{self.max*1000:.3f}ms")
        if self.items > 1:
            line += f" | Per item: {self.median / self.items * 1e6:8.2f}us"
        return line


def benchmark(func: Callable, *args, iterations: int = 5, items: int = 1, **kwargs) -> BenchmarkResult:
    """
    Benchmark a function and return statistics.

    Args:
        func: Function to benchmark
        *args: Positional arguments to function
        iterations: Number of iterations to run
        items: Values processed per call, for per-item timing
        **kwargs: Keyword arguments to function

    Returns:
        BenchmarkResult with timing statistics
    """
    times = []

    # Warm up
    func(*args, **kwargs)

    for _ in range(iterations):
        start = time.perf_counter()
        func(*args, **kwargs)
        elapsed = time.perf_counter() - start
        times.append(elapsed)

    return BenchmarkResult(func.__name__, times, items)


def benchmark_batched(setup: Callable, func: Callable, iterations: int = 5) -> BenchmarkResult:
    """
    Time func on a fresh input from setup() each iteration; setup is not timed.
    """
    times = []
    for _ in range(iterations):
        value = setup()
        start = time.perf_counter()
        func(value)
        times.append(time.perf_counter() - start)
    return BenchmarkResult(func.__name__, times)


def gen_semiprime(bits: int, rng: random.Random) -> int:
    """Product of two random primes below 2**bits."""
    return gen_prime(bits, rng) * gen_prime(bits, rng)


# ============================================================================
# 1. PRIMALITY TESTING BENCHMARKS
# ============================================================================

def benchmark_primality(rng: random.Random):
    """Benchmark Miller-Rabin on random values of increasing bit length."""
    print("\n" + "="*100)
    print("PRIMALITY TESTING BENCHMARKS")
    print("="*100)

    for bits in (16, 32, 64, 128, 1024, 2048):
        result = benchmark_batched(lambda: rng.getrandbits(bits), is_prime, iterations=10)
        result.name = f"miller_rabin {bits}bit"
        print(result)

    # Worst case: a prime runs every round
    prime = 241393502644931236824083437316691947053
    result = benchmark(is_prime, prime, iterations=10)
    result.name = "miller_rabin 128bit prime (all rounds)"
    print(result)

    # Batch: scalar loop vs one vectorized pass over the same values
    values = [rng.getrandbits(128) | 1 for _ in range(500)]

    def scalar_loop():
        return [is_prime(v) for v in values]

    result = benchmark(scalar_loop, iterations=3, items=len(values))
    result.name = "is_prime x500 128bit (scalar loop)"
    print(result)

    result = benchmark(is_prime_many, values, iterations=3, items=len(values))
    result.name = "is_prime_many x500 128bit (batched)"
    print(result)


# ============================================================================
# 2. MODULAR ARITHMETIC BENCHMARKS
# ============================================================================

def benchmark_modular_arithmetic(rng: random.Random):
    """Benchmark scalar and batch multiply-mod near the 128-bit boundary."""
    print("\n" + "="*100)
    print("MODULAR ARITHMETIC BENCHMARKS")
    print("="*100)

    m = (1 << WIDTH) - 159
    a = [rng.randrange(m) for _ in range(1000)]
    b = [rng.randrange(m) for _ in range(1000)]

    def scalar_loop():
        return [mulmod(x, y, m) for x, y in zip(a, b)]

    result = benchmark(scalar_loop, iterations=10, items=1000)
    result.name = "mulmod x1000 (scalar loop)"
    print(result)

    a_arr = np.asarray(a, dtype=object)
    b_arr = np.asarray(b, dtype=object)
    result = benchmark(mulmod_array, a_arr, b_arr, m, iterations=10, items=1000)
    result.name = "mulmod_array x1000 (object array)"
    print(result)

    result = benchmark(powmod, a[0], m - 1, m, iterations=10)
    result.name = "powmod 128bit exponent"
    print(result)


# ============================================================================
# 3. SEMIPRIME FACTORIZATION BENCHMARKS
# ============================================================================

def benchmark_semiprimes(rng: random.Random):
    """Benchmark factorization of semiprimes built from two random primes."""
    print("\n" + "="*100)
    print("SEMIPRIME FACTORIZATION BENCHMARKS")
    print("="*100)

    for bits in (8, 16, 24, 32):
        result = benchmark_batched(lambda: gen_semiprime(bits, rng), factorization, iterations=5)
        result.name = f"factor semiprime {bits * 2}bit"
        print(result)


# ============================================================================
# 4. BATCH THROUGHPUT BENCHMARKS
# ============================================================================

def benchmark_batch_throughput(rng: random.Random):
    """Compare sequential and process-pool factorization of many inputs."""
    print("\n" + "="*100)
    print("BATCH THROUGHPUT BENCHMARKS")
    print("="*100)

    values = [gen_semiprime(24, rng) for _ in range(32)]

    start = time.perf_counter()
    sequential = factor_many(values, use_parallel=False)
    seq_time = time.perf_counter() - start
    print(f"{'32 semiprimes (sequential)':40} | Total: {seq_time*1000:8.3f}ms")

    start = time.perf_counter()
    parallel = factor_many(values, use_parallel=True)
    par_time = time.perf_counter() - start
    print(f"{'32 semiprimes (process pool)':40} | Total: {par_time*1000:8.3f}ms")

    if sequential != parallel:
        print("  ✗ sequential and parallel results differ")
    else:
        print(f"  → Parallel speedup: {seq_time / par_time:.1f}x")


# ============================================================================
# MAIN BENCHMARK SUITE
# ============================================================================

def run_all_benchmarks(seed: int = 42):
    """Run all benchmarks."""
    rng = random.Random(seed)

    print("\n")
    print("╔" + "="*98 + "╗")
    print("║" + " "*20 + "PRIME FACTORIZATION BENCHMARK SUITE" + " "*43 + "║")
    print("╚" + "="*98 + "╝")

    try:
        benchmark_primality(rng)
        benchmark_modular_arithmetic(rng)
        benchmark_semiprimes(rng)
        benchmark_batch_throughput(rng)

        print("\n" + "="*100)
        print("BENCHMARK COMPLETE")
        print("="*100 + "\n")

    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user")
        sys.exit(1)
    finally:
        close_pool()


if __name__ == "__main__":
    run_all_benchmarks()
