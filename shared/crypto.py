"""
Cryptographic helpers — one-way hashing for passwords and one-time codes.

Uses argon2 (via argon2-cffi). The same hash/verify pair is used for agent
passwords, optional user passwords and OTP codes, so a stored code is never
recoverable from the database.
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_hasher = PasswordHasher()


def hash_secret(plain: str) -> str:
    """Hash *plain* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _hasher.hash(plain)


def verify_secret(plain: str, hashed: str) -> bool:
    """Verify *plain* against an argon2 *hashed* value.

    Returns:
        ``True`` if it matches, ``False`` for any failure
        (mismatch, malformed hash, empty hash).
    """
    if not hashed:
        return False
    try:
        return _hasher.verify(hashed, plain)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
