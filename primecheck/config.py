from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exec_tools import BACKENDS


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Defaults for the CLI and the HTTP API. The library functions never read these."""
    rounds: int = 40
    parallelism: int = 0          # 0 -> os.cpu_count()
    backend: str = "thread"
    max_bits: int = 8192          # HTTP input caps
    max_rounds: int = 4096
    max_parallelism: int = 64

    @property
    def workers(self) -> Optional[int]:
        return self.parallelism or None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        backend = (env.get("PRIMECHECK_BACKEND") or cls.backend).strip().lower()
        if backend not in BACKENDS:
            raise ValueError(f"PRIMECHECK_BACKEND must be one of {BACKENDS}, got {backend!r}")
        s = cls(
            rounds=_int_env(env, "PRIMECHECK_ROUNDS", cls.rounds),
            parallelism=_int_env(env, "PRIMECHECK_PARALLELISM", cls.parallelism),
            backend=backend,
            max_bits=_int_env(env, "PRIMECHECK_MAX_BITS", cls.max_bits),
            max_rounds=_int_env(env, "PRIMECHECK_MAX_ROUNDS", cls.max_rounds),
            max_parallelism=_int_env(env, "PRIMECHECK_MAX_PARALLELISM", cls.max_parallelism),
        )
        if s.rounds < 1:
            raise ValueError("PRIMECHECK_ROUNDS must be >= 1")
        if s.parallelism < 0:
            raise ValueError("PRIMECHECK_PARALLELISM must be >= 0")
        if s.max_bits < 2:
            raise ValueError("PRIMECHECK_MAX_BITS must be >= 2")
        if s.max_rounds < s.rounds:
            raise ValueError("PRIMECHECK_MAX_ROUNDS must be >= PRIMECHECK_ROUNDS")
        if s.max_parallelism < 1:
            raise ValueError("PRIMECHECK_MAX_PARALLELISM must be >= 1")
        return s
