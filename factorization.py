"""
Prime factorization of unsigned integers up to 128 bits using the Miller-Rabin
primality test and Pollard's Rho algorithm (Brent-style batching).

ALGORITHMS:
1. Miller-Rabin: probabilistic primality test, 100 random witnesses by default
   - A prime is never reported composite
   - A composite passes all rounds with probability at most 4^-rounds
2. Pollard's Rho: f(v) = v^2 + 1 mod n, lagged checkpoint teleported to the
   hare at the end of each doubling batch (2, 4, 8, ... steps)
   - Degenerate attempts (gcd == n) restart from a fresh random seed
3. Recursive factorization: strip one rho factor at a time, recurse on it,
   keep dividing the cofactor until it is prime, then sort

RANDOMNESS:
Every probabilistic function takes an optional `rng` (a random.Random or
anything with randrange/getrandbits). None means the process-wide `random`
module source. Pass a seeded random.Random for reproducible runs.

DEPENDENCIES:
- NumPy: batch primality results and wide-integer batch arithmetic
"""
import argparse
import enum
import logging
import math
import operator
import random
import sys
from functools import partial
from multiprocessing import Pool, cpu_count
from typing import Any, Iterable

import numpy as np
from modular_arithmetic import (
    WIDTH,
    check_width,
    mulmod,
    mulmod_array,
    powmod,
    powmod_array,
)

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS: int = 100

# Global process pool for reuse (avoid creation overhead)
_pool = None
_pool_size: int = min(4, cpu_count())

_SMALL_PRIMES: tuple[int, ...] = (2, 3, 5, 7, 11, 13, 17, 19, 23)


class InvariantError(AssertionError):
    """A factor finder or primality test returned a mathematically wrong answer."""


class MillerRabinResult(enum.Enum):
    COMPOSITE = "composite"
    PROBABLY_PRIME = "probably prime"


def _source(rng: Any) -> Any:
    return random if rng is None else rng


def _get_pool():
    """Get or create global process pool (lazy initialization)."""
    global _pool
    if _pool is None:
        _pool = Pool(_pool_size, initializer=random.seed)
    return _pool


def close_pool():
    """Close the shared process pool if it was created."""
    global _pool
    if _pool is not None:
        _pool.close()
        _pool.join()
        _pool = None


# Miller–Rabin primality test
def miller_rabin_test(n: int, k: int = DEFAULT_ROUNDS, rng: Any = None) -> MillerRabinResult:
    """
    Run k rounds of Miller-Rabin on n with uniformly random witnesses.

    Args:
        n: Odd or even integer, at least 4
        k: Number of rounds
        rng: Random source for the witnesses

    Returns:
        MillerRabinResult.COMPOSITE as soon as a witness proves compositeness,
        MillerRabinResult.PROBABLY_PRIME if all k rounds pass
    """
    n = operator.index(n)
    if n < 4:
        raise ValueError(f"Miller-Rabin needs n >= 4, got {n}")
    if k < 1:
        raise ValueError(f"Miller-Rabin needs at least one round, got {k}")
    rng = _source(rng)

    # write n-1 as d * 2^r
    t: int = n - 1
    r: int = (t & -t).bit_length() - 1
    d: int = t >> r

    for _ in range(k):
        a: int = rng.randrange(2, n - 1)
        x: int = powmod(a, d, n)
        if x == 1 or x == t:
            continue
        for _ in range(r - 1):
            x = mulmod(x, x, n)
            if x == t:
                break
        else:
            return MillerRabinResult.COMPOSITE
    return MillerRabinResult.PROBABLY_PRIME


def is_prime(n: int, rounds: int = DEFAULT_ROUNDS, rng: Any = None) -> bool:
    n = operator.index(n)
    if n < 2:
        return False
    # small primes check
    for p in _SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False
    return miller_rabin_test(n, rounds, rng) is MillerRabinResult.PROBABLY_PRIME


def is_prime_many(values: Iterable[int], rounds: int = DEFAULT_ROUNDS, rng: Any = None) -> np.ndarray:
    """
    Primality of every value, as a boolean array in input order.

    Same decision procedure as is_prime, run over the whole batch at once:
    the small-prime screen is one vectorized pass per prime, and each
    Miller-Rabin round draws one witness per undecided value and advances
    all of them together through powmod_array/mulmod_array. Values are
    dropped from later rounds as soon as a witness proves them composite.

    Args:
        values: Integers to test (any width; NumPy integers are accepted)
        rounds: Miller-Rabin rounds
        rng: Random source for the witnesses

    Returns:
        Boolean array, True where the value is (probably) prime
    """
    if rounds < 1:
        raise ValueError(f"Miller-Rabin needs at least one round, got {rounds}")
    rng = _source(rng)
    n: np.ndarray = np.array([operator.index(v) for v in values], dtype=object)
    prime: np.ndarray = np.zeros(n.shape, dtype=bool)
    decided: np.ndarray = (n < 2).astype(bool)

    # small primes check
    for p in _SMALL_PRIMES:
        equal = ~decided & (n == p).astype(bool)
        prime |= equal
        decided |= equal | (~decided & (n % p == 0).astype(bool))

    # write n-1 as d * 2^r for every remaining candidate
    idx: np.ndarray = np.flatnonzero(~decided)
    cand: np.ndarray = n[idx]
    t: np.ndarray = cand - 1
    r: np.ndarray = np.array([(v & -v).bit_length() - 1 for v in t], dtype=np.int64)
    d: np.ndarray = t >> r.astype(object)
    alive: np.ndarray = np.ones(cand.shape, dtype=bool)

    for _ in range(rounds):
        live: np.ndarray = np.flatnonzero(alive)
        if live.size == 0:
            break
        m, t_live, r_live = cand[live], t[live], r[live]
        a = np.array([rng.randrange(2, v - 1) for v in m], dtype=object)
        x = powmod_array(a, d[live], m)
        passed = ((x == 1) | (x == t_live)).astype(bool)
        for step in range(1, int(r_live.max())):
            x = mulmod_array(x, x, m)
            passed |= (r_live > step) & (x == t_live).astype(bool)
        alive[live[~passed]] = False

    prime[idx] = alive
    return prime


def gen_prime(bits: int, rng: Any = None) -> int:
    """
    Sample random values below 2**bits until one is (probably) prime.

    Args:
        bits: Bit length of the sampled values
        rng: Random source; used both for sampling and for the primality test

    Returns:
        A probable prime smaller than 2**bits
    """
    if bits < 2:
        raise ValueError(f"no prime fits in {bits} bits")
    rng = _source(rng)
    while True:
        n: int = rng.getrandbits(bits)
        if is_prime(n, rng=rng):
            return n


# Pollard's Rho
def pollard_rho_once(n: int, x: int) -> int | None:
    """
    One Pollard's Rho attempt on n starting from seed x.

    The lagged value y is reset to x at the start of every batch; batches
    grow 2, 4, 8, ... steps. Returns a proper factor, or None when the gcd
    collapses to n itself.
    """
    n, x = operator.index(n), operator.index(x)
    steps: int = 2
    while True:
        y: int = x
        for _ in range(steps):
            x = (mulmod(x, x, n) + 1) % n
            g: int = math.gcd(x - y if x >= y else y - x, n)
            if g > 1:
                return g if g != n else None
        steps <<= 1


def _smallest_factor(n: int) -> int:
    """Smallest prime factor of n by trial division (slow fallback)."""
    if (n & 1) == 0:
        return 2
    limit: int = math.isqrt(n)
    p: int = 3
    while p <= limit:
        if n % p == 0:
            return p
        p += 2
    return n


def pollard_rho(n: int, rng: Any = None, max_attempts: int | None = None) -> int:
    """
    Find a nontrivial factor of a composite n.

    Args:
        n: Composite integer, 4 <= n < 2**WIDTH
        rng: Random source for the seeds
        max_attempts: Number of seeds to try before falling back to trial
                      division. None retries forever.

    Returns:
        A factor f with 1 < f < n
    """
    n = check_width(n)
    if n < 4:
        raise ValueError(f"{n} has no nontrivial factor")
    if (n & 1) == 0:
        return 2
    rng = _source(rng)

    attempt: int = 0
    while max_attempts is None or attempt < max_attempts:
        attempt += 1
        seed: int = rng.randrange(2, n)
        d = pollard_rho_once(n, seed)
        if d is not None:
            logger.debug("pollard rho: %d = %d * %d (attempt %d)", n, d, n // d, attempt)
            return d
        logger.debug("pollard rho: seed %d degenerated for %d, retrying", seed, n)

    logger.warning("pollard rho: no factor of %d after %d attempts, using trial division", n, attempt)
    return _smallest_factor(n)


# recursive factorization
def factorization(
    n: int,
    rng: Any = None,
    rounds: int = DEFAULT_ROUNDS,
    max_attempts: int | None = None
) -> list[int]:
    """
    Factorize n into prime factors.

    Args:
        n: Integer to factorize, 1 <= n < 2**WIDTH
        rng: Random source shared by the primality test and Pollard's Rho
        rounds: Miller-Rabin rounds per primality test
        max_attempts: Pollard's Rho seed limit (see pollard_rho)

    Returns:
        Prime factors with multiplicity, ascending; their product is n.
        factorization(1) is the empty list.
    """
    n = check_width(n)
    if n == 0:
        raise ValueError("0 has no prime factorization")
    if n == 1:
        return []
    if is_prime(n, rounds, rng):
        return [n]

    factors: list[int] = []
    while not is_prime(n, rounds, rng):
        f: int = pollard_rho(n, rng, max_attempts)
        if not 0 < f < n:
            raise InvariantError(f"pollard rho returned {f}, not a proper factor of {n}")
        if n % f != 0:
            raise InvariantError(f"pollard rho returned {f}, which does not divide {n}")
        factors.extend(factorization(f, rng, rounds, max_attempts))
        n //= f

    if n > 1:
        factors.append(n)

    factors.sort()
    return factors


def factor_many(
    values: Iterable[int],
    use_parallel: bool = False,
    rounds: int = DEFAULT_ROUNDS,
    max_attempts: int | None = None
) -> list[list[int]]:
    """
    Factorize independent integers, optionally across a process pool.

    Pool workers reseed their `random` module from OS entropy on start-up,
    so forked workers do not replay the parent's seed sequence.

    Args:
        values: Integers to factorize
        use_parallel: Map the work over the shared multiprocessing pool
        rounds: Miller-Rabin rounds per primality test
        max_attempts: Pollard's Rho seed limit (see pollard_rho)

    Returns:
        One sorted factor list per input value, in input order
    """
    values = [int(v) for v in values]
    worker = partial(factorization, rounds=rounds, max_attempts=max_attempts)
    if use_parallel and len(values) > 1:
        pool = _get_pool()
        return pool.map(worker, values)
    return [worker(v) for v in values]


def _parse_number(text: str) -> int:
    try:
        n: int = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if n < 1 or n.bit_length() > WIDTH:
        raise argparse.ArgumentTypeError(f"expected 1 <= n < 2**{WIDTH}, got {text}")
    return n


def _positive_int(text: str) -> int:
    value: int = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="prime-factorization",
        description="Factor unsigned integers (up to 128 bits) into primes."
    )
    parser.add_argument("numbers", nargs="+", type=_parse_number, metavar="N",
                        help="integers to factor (decimal, or 0x/0o/0b prefixed)")
    parser.add_argument("--check", action="store_true",
                        help="only report whether each number is prime")
    parser.add_argument("--rounds", type=_positive_int, default=DEFAULT_ROUNDS,
                        help="Miller-Rabin rounds (default: %(default)s)")
    parser.add_argument("--max-attempts", type=_positive_int, default=None,
                        help="Pollard rho seeds before trial division (default: unbounded)")
    parser.add_argument("--parallel", action="store_true",
                        help="factor the numbers in a process pool")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log factor search progress")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )

    if args.check:
        for n in args.numbers:
            print(f"{n}: {'prime' if is_prime(n, args.rounds) else 'composite'}")
        return 0

    try:
        results = factor_many(args.numbers, use_parallel=args.parallel,
                              rounds=args.rounds, max_attempts=args.max_attempts)
    finally:
        close_pool()

    for n, factors in zip(args.numbers, results):
        print(f"{n}: {' '.join(str(f) for f in factors)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
