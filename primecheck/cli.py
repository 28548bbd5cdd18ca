# Tiny CLI: python -m primecheck N [N ...] [--rounds K] [--parallelism P]
from __future__ import annotations
import argparse
import json
import logging
import sys
import time

from gmpy2 import mpz

from .config import Settings
from .errors import PrimalityError
from .exec_tools import BACKENDS
from .pipeline import test_primality, test_primality_with_witnesses

log = logging.getLogger("primecheck")

def parse_int(text: str) -> mpz:
    """Decimal or 0x-prefixed hex; mpz parses without the str->int digit limit."""
    try:
        return mpz(text.strip(), 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None

def build_parser(settings: Settings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="primecheck",
                                 description="Parallel Miller-Rabin probable-prime test")
    ap.add_argument("n", nargs="+", type=parse_int, help="candidate(s), decimal or 0x hex")
    ap.add_argument("--rounds", "-k", type=int, default=settings.rounds,
                    help=f"random witness rounds (default {settings.rounds})")
    ap.add_argument("--parallelism", "-p", type=int, default=settings.workers,
                    help="worker count (default: CPU count)")
    ap.add_argument("--backend", choices=BACKENDS, default=settings.backend)
    ap.add_argument("--witness", "-w", type=parse_int, action="append", default=None,
                    help="explicit witness (repeatable); disables random rounds")
    ap.add_argument("--verbose", "-v", action="store_true")
    return ap

def _check_one(n: mpz, args) -> dict:
    t0 = time.perf_counter()
    if args.witness:
        verdict = test_primality_with_witnesses(n, args.witness, args.parallelism, backend=args.backend)
    else:
        verdict = test_primality(n, args.rounds, args.parallelism, backend=args.backend)
    ms = (time.perf_counter() - t0) * 1000
    out = {"n": str(n), "bits": int(n.bit_length())}
    out.update(verdict.to_dict())
    out["ms"] = round(ms, 3)
    return out

def main(argv=None) -> int:
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"primecheck: {e}", file=sys.stderr)
        return 2
    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log.debug("settings: %s", settings)

    code = 0
    for n in args.n:
        try:
            res = _check_one(n, args)
        except PrimalityError as e:
            print(f"primecheck: {e}", file=sys.stderr)
            return 2
        print(json.dumps(res), flush=True)
        if res["classification"] == "composite":
            code = 1
    return code

if __name__ == "__main__":
    sys.exit(main())
