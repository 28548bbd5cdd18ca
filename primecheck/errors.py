from __future__ import annotations


class PrimalityError(ValueError):
    """Base class for every input or computation failure raised by primecheck."""


class InvalidCandidate(PrimalityError):
    """n < 2."""


class InvalidRoundCount(PrimalityError):
    """rounds == 0 (or negative) on the random-witness entry point."""


class EmptyWitnessSet(PrimalityError):
    """The explicit-witness entry point got no witnesses."""


class InvalidWitness(PrimalityError):
    """An explicit witness lies outside [2, n-2]."""


class RangeError(PrimalityError):
    """Sampler asked for a witness when no valid range exists (n <= 3).

    Callers never see this one: n in {2, 3} is answered before any sampling.
    """


class InvalidParallelism(PrimalityError):
    pass


class InvalidBackend(PrimalityError):
    pass


class ComputationError(PrimalityError):
    """A worker failed while evaluating a round; the whole round set is aborted."""
