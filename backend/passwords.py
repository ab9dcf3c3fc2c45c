"""
Password hashing for the users file.

Hashed values look like  pbkdf2_sha256$<iterations>$<salt>$<hex digest>.
Anything else is a cleartext password written by an older deployment; it is
still accepted, compared in constant time.
"""

import hashlib
import hmac
import secrets

SCHEME = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 200_000
SALT_BYTES = 16


def _digest(password: str, salt: str, iterations: int) -> str:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    ).hex()


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    salt = secrets.token_hex(SALT_BYTES)
    return f"{SCHEME}${iterations}${salt}${_digest(password, salt, iterations)}"


def is_hashed(stored: str) -> bool:
    return stored.startswith(SCHEME + "$")


def verify_password(password: str, stored: str) -> bool:
    if not is_hashed(stored):
        return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))

    try:
        _, iterations, salt, expected = stored.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if rounds <= 0:
        return False

    return hmac.compare_digest(_digest(password, salt, rounds), expected)
