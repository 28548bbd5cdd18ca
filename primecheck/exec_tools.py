from __future__ import annotations
import logging
import os
import threading
import concurrent.futures
from typing import Optional, Sequence

import gmpy2
from gmpy2 import mpz

from .errors import ComputationError, InvalidBackend, InvalidParallelism, InvalidRoundCount
from .miller_rabin import Decomposition, RangeSampler, RoundOutcome, evaluate_witness
from .verdict import PrimalityVerdict

log = logging.getLogger(__name__)

BACKENDS = ("thread", "process")

def _round_task(n: mpz, dec: Decomposition, a: mpz,
                cancelled: Optional[threading.Event] = None) -> Optional[RoundOutcome]:
    # None means the round was skipped because another one already found a proof
    if cancelled is not None and cancelled.is_set():
        return None
    return evaluate_witness(n, dec, a)

def _release_gil() -> None:
    # gmpy2 contexts are per thread; powmod on large operands may then run without the GIL
    gmpy2.get_context().allow_release_gil = True

def resolve_parallelism(parallelism: Optional[int]) -> int:
    if parallelism is None:
        return os.cpu_count() or 1
    if isinstance(parallelism, bool) or not isinstance(parallelism, int) or parallelism < 1:
        raise InvalidParallelism(f"parallelism must be a positive integer, got {parallelism!r}")
    return parallelism

class ParallelRoundExecutor:
    """
    Fans k independent Miller-Rabin rounds out over a worker pool.

    The reduction is an OR over "composite proof": the first proof observed
    wins, queued rounds are cancelled, and rounds already running are left to
    finish with their results discarded. With no proof, every round must come
    back inconclusive before PROBABLY_PRIME is returned. parallelism=1 runs
    the rounds in the calling thread with the same observable results.
    """

    def __init__(self, parallelism: Optional[int] = None, backend: str = "thread"):
        if backend not in BACKENDS:
            raise InvalidBackend(f"backend must be one of {BACKENDS}, got {backend!r}")
        self.parallelism = resolve_parallelism(parallelism)
        self.backend = backend

    def run(self, n: mpz, dec: Decomposition, witnesses: Sequence[mpz],
            rounds: Optional[int] = None) -> PrimalityVerdict:
        """Evaluate the first `rounds` witnesses (all of them by default)."""
        if rounds is None:
            rounds = len(witnesses)
        if rounds < 1:
            raise InvalidRoundCount(f"rounds must be >= 1, got {rounds}")
        if len(witnesses) < rounds:
            raise InvalidRoundCount(f"{rounds} rounds requested but only {len(witnesses)} witnesses given")
        batch = list(witnesses[:rounds])
        workers = min(self.parallelism, len(batch))

        if workers <= 1:
            found = self._run_sequential(n, dec, batch)
        else:
            found = self._run_pool(n, dec, batch, workers)

        if found:
            return PrimalityVerdict.composite()
        return PrimalityVerdict.probably_prime(len(batch))

    def run_sampled(self, n: mpz, dec: Decomposition, rounds: int,
                    sampler: Optional[RangeSampler] = None) -> PrimalityVerdict:
        """Draw `rounds` fresh witnesses, then run them.

        Witnesses are drawn here, in the calling thread, so the sampler's RNG
        is never touched by two workers.
        """
        if rounds < 1:
            raise InvalidRoundCount(f"rounds must be >= 1, got {rounds}")
        sampler = sampler or RangeSampler()
        return self.run(n, dec, sampler.sample_many(n, rounds))

    # ---------- strategies ----------

    def _run_sequential(self, n: mpz, dec: Decomposition, batch) -> bool:
        for i, a in enumerate(batch):
            try:
                outcome = evaluate_witness(n, dec, a)
            except Exception as e:
                raise ComputationError(f"witness evaluation failed: {e}") from e
            if outcome is RoundOutcome.COMPOSITE_PROOF:
                log.debug("composite proof from witness #%d (sequential), %d rounds skipped",
                          i, len(batch) - i - 1)
                return True
        return False

    def _run_pool(self, n: mpz, dec: Decomposition, batch, workers: int) -> bool:
        if self.backend == "thread":
            cancelled = threading.Event()
            pool = concurrent.futures.ThreadPoolExecutor(max_workers=workers, initializer=_release_gil)
        else:
            # Events do not cross process boundaries; Future.cancel covers queued rounds
            cancelled = None
            pool = concurrent.futures.ProcessPoolExecutor(max_workers=workers)
        log.debug("running %d rounds on %d %s workers", len(batch), workers, self.backend)
        try:
            futures = [pool.submit(_round_task, n, dec, a, cancelled) for a in batch]
            for fut in concurrent.futures.as_completed(futures):
                try:
                    outcome = fut.result()
                except Exception as e:
                    self._cancel(futures, cancelled)
                    raise ComputationError(f"witness evaluation failed: {e}") from e
                if outcome is RoundOutcome.COMPOSITE_PROOF:
                    dropped = self._cancel(futures, cancelled)
                    log.debug("composite proof observed, %d queued rounds cancelled", dropped)
                    return True
            return False
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    @staticmethod
    def _cancel(futures, cancelled: Optional[threading.Event]) -> int:
        if cancelled is not None:
            cancelled.set()
        return sum(1 for f in futures if f.cancel())
