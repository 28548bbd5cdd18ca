# primecheck/miller_rabin.py
# Single-round Miller-Rabin building blocks (gmpy2 / GMP)
# - n-1 = 2^s * d decomposition
# - Uniform witness sampling in [2, n-2]
# - One strong-probable-prime round for a given witness

from __future__ import annotations
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import gmpy2
from gmpy2 import mpz

from .errors import InvalidCandidate, RangeError

_MPZ = type(mpz(0))

# First twelve primes: a deterministic witness set for every n < 3.3e24, which covers 2^64.
DETERMINISTIC_BASES_64 = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)
U64_MAX = 0xFFFF_FFFF_FFFF_FFFF

# ---------- Utilities ----------

def as_mpz(value, what: str = "n") -> mpz:
    """Accept int or mpz, refuse everything else (floats would silently round)."""
    if isinstance(value, bool) or not isinstance(value, (int, _MPZ)):
        raise TypeError(f"{what} must be an integer, got {type(value).__name__}")
    return mpz(value)

# ---------- Decomposition ----------

@dataclass(frozen=True)
class Decomposition:
    """n - 1 = 2^s * d with d odd. Shared read-only by every round of one test."""
    s: int
    d: mpz

def decompose(n) -> Decomposition:
    """Factor the powers of two out of n-1. Requires n > 2 and n odd."""
    n = as_mpz(n)
    if n <= 2 or gmpy2.is_even(n):
        raise InvalidCandidate(f"decompose needs an odd n > 2, got {n}")
    m = n - 1
    s = gmpy2.bit_scan1(m)  # trailing zero bits of n-1
    return Decomposition(s=int(s), d=m >> s)

# ---------- Witness sampling ----------

class RangeSampler:
    """
    Draws witnesses uniformly from [2, n-2].

    Rejection sampling over getrandbits keeps the draw unbiased for any range
    width. The default source is SystemRandom (OS entropy); pass a seeded
    random.Random for reproducible runs. One sampler is only ever used from
    the thread that owns it.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.SystemRandom()

    @classmethod
    def seeded(cls, seed) -> "RangeSampler":
        return cls(random.Random(seed))

    def sample(self, n) -> mpz:
        n = as_mpz(n)
        if n <= 3:
            raise RangeError(f"no witness range [2, n-2] for n={n}")
        width = int(n - 3)  # count of values in [2, n-2]
        if width == 1:
            return mpz(2)
        bits = (width - 1).bit_length()
        while True:
            r = self._rng.getrandbits(bits)
            if r < width:
                return mpz(2 + r)

    def sample_many(self, n, k: int) -> List[mpz]:
        return [self.sample(n) for _ in range(k)]

# ---------- One Miller-Rabin round ----------

class RoundOutcome(str, Enum):
    COMPOSITE_PROOF = "composite_proof"
    INCONCLUSIVE = "inconclusive"

def evaluate_witness(n: mpz, dec: Decomposition, a: mpz) -> RoundOutcome:
    """One strong round for witness a in [2, n-2]. Pure: no shared state touched."""
    n_minus_one = n - 1
    x = gmpy2.powmod(a, dec.d, n)
    if x == 1 or x == n_minus_one:
        return RoundOutcome.INCONCLUSIVE
    for _ in range(dec.s - 1):
        x = gmpy2.powmod(x, 2, n)
        if x == n_minus_one:
            return RoundOutcome.INCONCLUSIVE
        if x == 1:
            # 1 squares to 1 forever, n-1 can no longer appear
            break
    return RoundOutcome.COMPOSITE_PROOF

def fixed_witnesses(n) -> List[mpz]:
    """The deterministic 64-bit witness set, trimmed to bases below n-1."""
    n = as_mpz(n)
    return [mpz(a) for a in DETERMINISTIC_BASES_64 if a < n - 1]
