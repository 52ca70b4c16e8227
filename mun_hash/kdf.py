from __future__ import annotations

import hashlib

from mun_hash.errors import EncodingError, InvalidParameter

PBKDF2_ITERATIONS = 50_000
HASH_BYTES = 32  # 256 bits
PBKDF2_DIGEST = "sha256"


def derive_hash(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS, hash_bytes: int = HASH_BYTES) -> bytes:
    """
    PBKDF2-HMAC-SHA256 of `password` under `salt`.

    The iteration count is deliberately high; this is the CPU-bound step of a
    run. `hashlib.pbkdf2_hmac` releases the GIL, so calls may run in parallel
    threads.
    """
    if iterations <= 0:
        raise InvalidParameter(f"iterations must be positive, got {iterations}")
    if hash_bytes <= 0:
        raise InvalidParameter(f"hash_bytes must be positive, got {hash_bytes}")

    try:
        pw = password.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(f"password is not representable as UTF-8: {exc}") from exc

    return hashlib.pbkdf2_hmac(PBKDF2_DIGEST, pw, salt, iterations, dklen=hash_bytes)


def derive_hash_hex(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS, hash_bytes: int = HASH_BYTES) -> str:
    return derive_hash(password, salt, iterations, hash_bytes).hex()
