from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Optional


class Classification(str, Enum):
    COMPOSITE = "composite"
    PROBABLY_PRIME = "probably_prime"


@dataclass(frozen=True)
class PrimalityVerdict:
    """
    Final answer of one primality test.

    COMPOSITE is a proof and carries nothing else. PROBABLY_PRIME carries the
    number of inconclusive rounds and the false-positive bound 4^-rounds.
    2 and 3 are answered by lookup and flagged exact (bound 0).
    """
    classification: Classification
    rounds: Optional[int] = None
    error_bound: Fraction = Fraction(0)
    exact: bool = False

    # ---------- constructors ----------

    @classmethod
    def composite(cls) -> "PrimalityVerdict":
        return cls(Classification.COMPOSITE)

    @classmethod
    def probably_prime(cls, rounds: int) -> "PrimalityVerdict":
        return cls(Classification.PROBABLY_PRIME, rounds, Fraction(1, 4 ** rounds))

    @classmethod
    def known_prime(cls) -> "PrimalityVerdict":
        return cls(Classification.PROBABLY_PRIME, 0, Fraction(0), exact=True)

    # ---------- queries ----------

    @property
    def is_composite(self) -> bool:
        return self.classification is Classification.COMPOSITE

    @property
    def is_probably_prime(self) -> bool:
        return self.classification is Classification.PROBABLY_PRIME

    @property
    def security_bits(self) -> float:
        """-log2(error_bound); inf when the answer is certain."""
        if self.is_composite or self.exact:
            return math.inf
        return 2 * self.rounds

    def meets(self, bits: int) -> bool:
        """True when the false-positive bound is at most 2^-bits."""
        return self.error_bound <= Fraction(1, 2 ** bits)

    def to_dict(self) -> dict:
        d = {
            "classification": self.classification.value,
            "rounds": self.rounds,
            "exact": self.exact,
        }
        if self.is_probably_prime:
            bits = self.security_bits
            d["security_bits"] = None if bits == math.inf else int(bits)
            d["error_bound"] = "0" if self.exact else f"1/4^{self.rounds}"
        return d
