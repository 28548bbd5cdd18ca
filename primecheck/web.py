from __future__ import annotations
import time
from typing import Optional

import gmpy2
from gmpy2 import mpz
from flask import Blueprint, Flask, current_app, jsonify, request

from .config import Settings
from .errors import PrimalityError
from .pipeline import test_primality, test_primality_with_witnesses

primality_bp = Blueprint("primality_bp", __name__)

# ------------------ helpers ------------------
def _settings() -> Settings:
    return current_app.config["PRIMECHECK_SETTINGS"]

def _params() -> dict:
    if request.method == "POST":
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.args.to_dict()

def _parse_n(raw) -> mpz:
    text = str(raw if raw is not None else "").strip()
    if not text.isdigit():
        raise ValueError("Provide n as a non-negative decimal integer string.")
    return mpz(text)

def _opt_int(data: dict, key: str) -> Optional[int]:
    v = data.get(key)
    if v is None or v == "":
        return None
    if isinstance(v, bool) or not isinstance(v, (int, str)):
        raise ValueError(f"{key} must be an integer")
    return int(v)

# ------------------ API ------------------
@primality_bp.get("/api/health")
def health():
    return jsonify({"ok": True, "gmpy2": gmpy2.version(), "time": int(time.time())})

@primality_bp.route("/api/primality", methods=["GET", "POST"])
def primality():
    settings = _settings()
    data = _params()
    try:
        n = _parse_n(data.get("n"))
        rounds = _opt_int(data, "rounds")
        if rounds is None:
            rounds = settings.rounds
        parallelism = _opt_int(data, "parallelism")
        if parallelism is None:
            parallelism = settings.workers
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400
    bits = int(n.bit_length())
    if bits > settings.max_bits:
        return jsonify({"error": f"Max {settings.max_bits} bits."}), 400
    if rounds > settings.max_rounds:
        return jsonify({"error": f"rounds capped at {settings.max_rounds}."}), 400
    if parallelism is not None and parallelism > settings.max_parallelism:
        return jsonify({"error": f"parallelism capped at {settings.max_parallelism}."}), 400

    witnesses = data.get("witnesses") if request.method == "POST" else None
    t0 = time.perf_counter()
    try:
        if witnesses is not None:
            if not isinstance(witnesses, list):
                return jsonify({"error": "witnesses must be a list"}), 400
            if len(witnesses) > settings.max_rounds:
                return jsonify({"error": f"at most {settings.max_rounds} witnesses."}), 400
            ws = [_parse_n(w) for w in witnesses]
            verdict = test_primality_with_witnesses(n, ws, parallelism, backend=settings.backend)
        else:
            verdict = test_primality(n, rounds, parallelism, backend=settings.backend)
    except (PrimalityError, ValueError) as e:
        return jsonify({"error": str(e)}), 400
    out = {"n": str(n), "bits": bits}
    out.update(verdict.to_dict())
    resp = jsonify(out)
    resp.headers["X-Compute-ms"] = str(int((time.perf_counter() - t0) * 1000))
    return resp

def create_app(settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)
    app.config["PRIMECHECK_SETTINGS"] = settings or Settings.from_env()
    app.register_blueprint(primality_bp)
    return app

if __name__ == "__main__":
    create_app().run("127.0.0.1", 8082)
