# primecheck/pipeline.py
# Public entry points: validate -> small/even fast paths -> decompose once -> fan out rounds

from __future__ import annotations
import logging
from typing import Iterable, Optional

import gmpy2
from gmpy2 import mpz

from .errors import EmptyWitnessSet, InvalidCandidate, InvalidRoundCount, InvalidWitness
from .exec_tools import ParallelRoundExecutor
from .miller_rabin import U64_MAX, RangeSampler, as_mpz, decompose, fixed_witnesses
from .verdict import PrimalityVerdict

log = logging.getLogger(__name__)

def _check_candidate(n) -> mpz:
    n = as_mpz(n)
    if n < 2:
        raise InvalidCandidate(f"n must be >= 2, got {n}")
    return n

def _fast_path(n: mpz) -> Optional[PrimalityVerdict]:
    """Answers that need no witness round at all."""
    if n <= 3:
        log.debug("n=%s answered by lookup", n)
        return PrimalityVerdict.known_prime()
    if gmpy2.is_even(n):
        log.debug("n=%s is even, composite without rounds", n)
        return PrimalityVerdict.composite()
    return None

def test_primality(n, rounds: int, parallelism: Optional[int] = None, *,
                   sampler: Optional[RangeSampler] = None,
                   backend: str = "thread") -> PrimalityVerdict:
    """
    Miller-Rabin with `rounds` random witnesses evaluated in parallel.

    Raises InvalidCandidate for n < 2 and InvalidRoundCount for rounds < 1,
    before any work starts. A PROBABLY_PRIME verdict is wrong with
    probability at most 4^-rounds; a COMPOSITE verdict is always right.
    """
    n = _check_candidate(n)
    if isinstance(rounds, bool) or not isinstance(rounds, int) or rounds < 1:
        raise InvalidRoundCount(f"rounds must be a positive integer, got {rounds!r}")
    executor = ParallelRoundExecutor(parallelism, backend)

    fast = _fast_path(n)
    if fast is not None:
        return fast
    return executor.run_sampled(n, decompose(n), rounds, sampler)

def test_primality_with_witnesses(n, witnesses: Iterable, parallelism: Optional[int] = None, *,
                                  backend: str = "thread") -> PrimalityVerdict:
    """Deterministic variant: every given witness (each in [2, n-2]) is one round."""
    n = _check_candidate(n)
    ws = [as_mpz(a, "witness") for a in witnesses]
    if not ws:
        raise EmptyWitnessSet("at least one witness is required")
    executor = ParallelRoundExecutor(parallelism, backend)

    fast = _fast_path(n)
    if fast is not None:
        return fast
    for a in ws:
        if a < 2 or a > n - 2:
            raise InvalidWitness(f"witness {a} outside [2, {n - 2}]")
    return executor.run(n, decompose(n), ws)

def is_prime(n, k: int = 16, parallelism: Optional[int] = None) -> bool:
    """
    Boolean shortcut. Below 2^64 the first twelve prime bases give an exact
    answer; above it `k` random rounds run.
    """
    n = as_mpz(n)
    if n < 2:
        return False
    fast = _fast_path(n)
    if fast is not None:
        return fast.is_probably_prime
    if n <= U64_MAX:
        verdict = test_primality_with_witnesses(n, fixed_witnesses(n), parallelism)
    else:
        verdict = test_primality(n, k, parallelism)
    return verdict.is_probably_prime
