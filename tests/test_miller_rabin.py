import random

import pytest
from gmpy2 import mpz

from primecheck.errors import InvalidCandidate, RangeError
from primecheck.miller_rabin import (
    DETERMINISTIC_BASES_64,
    Decomposition,
    RangeSampler,
    RoundOutcome,
    as_mpz,
    decompose,
    evaluate_witness,
    fixed_witnesses,
)


class TestDecompose:

    @pytest.mark.parametrize("n,s,d", [(3, 1, 1), (5, 2, 1), (221, 2, 55), (561, 4, 35), (97, 5, 3)])
    def test_known_values(self, n, s, d):
        dec = decompose(n)
        assert dec.s == s
        assert dec.d == d

    def test_reconstructs_n_minus_one(self):
        n = mpz(2) ** 127 - 1
        dec = decompose(n)
        assert dec.d % 2 == 1
        assert dec.s >= 1
        assert (mpz(2) ** dec.s) * dec.d == n - 1

    def test_idempotent(self):
        assert decompose(7919) == decompose(mpz(7919))

    @pytest.mark.parametrize("n", [0, 1, 2, 4, 100])
    def test_rejects_even_or_small(self, n):
        with pytest.raises(InvalidCandidate):
            decompose(n)

    def test_is_frozen(self):
        dec = decompose(13)
        with pytest.raises(Exception):
            dec.s = 7


class TestRangeSampler:

    def test_values_in_range(self):
        sampler = RangeSampler.seeded(1)
        n = mpz(1009)
        for _ in range(2000):
            a = sampler.sample(n)
            assert 2 <= a <= n - 2

    def test_narrow_ranges(self):
        sampler = RangeSampler.seeded(7)
        assert sampler.sample(4) == 2
        seen = {int(sampler.sample(5)) for _ in range(200)}
        assert seen == {2, 3}

    def test_roughly_uniform(self):
        # width 10 is not a power of two, so 6 of every 16 raw draws get rejected
        sampler = RangeSampler.seeded(12345)
        counts = {}
        for _ in range(5000):
            a = int(sampler.sample(13))
            counts[a] = counts.get(a, 0) + 1
        assert sorted(counts) == list(range(2, 12))
        for c in counts.values():
            assert 400 < c < 600

    def test_out_of_range_draws_are_retried(self):
        class CountingRandom(random.Random):
            calls = 0

            def getrandbits(self, k):
                CountingRandom.calls += 1
                return super().getrandbits(k)

        sampler = RangeSampler(CountingRandom(8))
        draws = [sampler.sample(13) for _ in range(500)]
        assert all(2 <= a <= 11 for a in draws)
        assert CountingRandom.calls > len(draws)

    def test_seeded_is_reproducible(self):
        n = mpz(2) ** 521 - 1
        a = RangeSampler.seeded(42).sample_many(n, 10)
        b = RangeSampler.seeded(42).sample_many(n, 10)
        assert a == b

    def test_custom_rng(self):
        sampler = RangeSampler(random.Random(3))
        assert len(sampler.sample_many(10 ** 40 + 1, 5)) == 5

    def test_default_source_is_system_random(self):
        a = RangeSampler().sample(mpz(2) ** 256 + 1)
        assert 2 <= a <= mpz(2) ** 256 - 1

    @pytest.mark.parametrize("n", [0, 1, 2, 3])
    def test_degenerate_range(self, n):
        with pytest.raises(RangeError):
            RangeSampler.seeded(0).sample(n)


class TestEvaluateWitness:

    def test_strong_liar_and_witness_for_221(self):
        n = mpz(221)  # 13 * 17
        dec = decompose(n)
        assert evaluate_witness(n, dec, mpz(174)) is RoundOutcome.INCONCLUSIVE
        assert evaluate_witness(n, dec, mpz(137)) is RoundOutcome.COMPOSITE_PROOF

    def test_base_two_fooled_by_2047(self):
        n = mpz(2047)  # 23 * 89, strong pseudoprime to base 2
        dec = decompose(n)
        assert evaluate_witness(n, dec, mpz(2)) is RoundOutcome.INCONCLUSIVE
        assert evaluate_witness(n, dec, mpz(3)) is RoundOutcome.COMPOSITE_PROOF

    def test_carmichael_561(self):
        n = mpz(561)
        assert evaluate_witness(n, decompose(n), mpz(2)) is RoundOutcome.COMPOSITE_PROOF

    def test_prime_never_proved_composite(self):
        n = mpz(7919)
        dec = decompose(n)
        for a in range(2, 200):
            assert evaluate_witness(n, dec, mpz(a)) is RoundOutcome.INCONCLUSIVE

    def test_minus_one_witness(self):
        n = mpz(91)
        assert evaluate_witness(n, decompose(n), n - 1) is RoundOutcome.INCONCLUSIVE

    def test_uses_given_decomposition(self):
        n = mpz(221)
        assert evaluate_witness(n, Decomposition(s=2, d=mpz(55)), mpz(137)) is RoundOutcome.COMPOSITE_PROOF


class TestHelpers:

    def test_as_mpz_accepts_int_and_mpz(self):
        assert as_mpz(5) == 5
        assert as_mpz(mpz(5)) == 5

    @pytest.mark.parametrize("bad", [5.0, "5", None, True])
    def test_as_mpz_rejects_non_integers(self, bad):
        with pytest.raises(TypeError):
            as_mpz(bad)

    def test_fixed_witnesses_trimmed_below_n_minus_one(self):
        assert fixed_witnesses(7) == [2, 3, 5]
        assert fixed_witnesses(5) == [2, 3]
        assert len(fixed_witnesses(10 ** 6 + 3)) == len(DETERMINISTIC_BASES_64)
