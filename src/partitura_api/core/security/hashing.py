"""Password hashing for stored user credentials.

Hashes are self-describing strings ``scrypt$<n>$<r>$<p>$<salt>$<key>`` so the
cost parameters can change without invalidating existing accounts.
"""

from __future__ import annotations

import base64
import hashlib
import os
import secrets
from dataclasses import dataclass

_SCHEME = "scrypt"


@dataclass(frozen=True, slots=True)
class _ScryptParams:
    n: int
    r: int = 8
    p: int = 1
    salt_bytes: int = 16
    key_bytes: int = 32


_DEFAULT_PARAMS = _ScryptParams(n=2**14)
# Test suites hash many passwords; a low cost keeps them quick.
_FAST_PARAMS = _ScryptParams(n=2**10)


def _params() -> _ScryptParams:
    return _FAST_PARAMS if os.getenv("PARTITURA_TEST_FAST_HASH") else _DEFAULT_PARAMS


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password must not be empty")

    params = _params()
    salt = secrets.token_bytes(params.salt_bytes)
    key = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=params.n,
        r=params.r,
        p=params.p,
        dklen=params.key_bytes,
    )
    return "$".join((_SCHEME, str(params.n), str(params.r), str(params.p), _b64(salt), _b64(key)))


__all__ = ["hash_password"]
