from .errors import (
    ComputationError,
    EmptyWitnessSet,
    InvalidBackend,
    InvalidCandidate,
    InvalidParallelism,
    InvalidRoundCount,
    InvalidWitness,
    PrimalityError,
    RangeError,
)
from .exec_tools import ParallelRoundExecutor
from .miller_rabin import Decomposition, RangeSampler, RoundOutcome, decompose, evaluate_witness
from .pipeline import is_prime, test_primality, test_primality_with_witnesses
from .verdict import Classification, PrimalityVerdict

__version__ = "0.1.1"

__all__ = [
    "Classification",
    "ComputationError",
    "Decomposition",
    "EmptyWitnessSet",
    "InvalidBackend",
    "InvalidCandidate",
    "InvalidParallelism",
    "InvalidRoundCount",
    "InvalidWitness",
    "ParallelRoundExecutor",
    "PrimalityError",
    "PrimalityVerdict",
    "RangeError",
    "RangeSampler",
    "RoundOutcome",
    "decompose",
    "evaluate_witness",
    "is_prime",
    "test_primality",
    "test_primality_with_witnesses",
]
