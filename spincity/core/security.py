"""Security helpers (hashing and verification).

Legacy records (the seeded admin, data restored from older backups) keep
passwords in plain text, and the admin pass-key is always plain text. Those
are compared by string equality only for compatibility with existing data;
this is a known weakness, not a recommended pattern. New passwords are
stored as Argon2 hashes.
"""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create a modern Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def is_hashed(stored: str | None) -> bool:
    return bool(stored) and stored.startswith(_PREFIX)


def plain_text_matches(given: str | None, stored: str | None) -> bool:
    """Constant-time equality for plain-text secrets (admin key, legacy passwords)."""
    return secrets.compare_digest((given or "").encode(), (stored or "").encode())


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored:
        return False
    if stored.startswith(_PREFIX):
        hashed = stored[len(_PREFIX) :]
        try:
            return _ph.verify(hashed, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    return plain_text_matches(password, stored)
