"""
Password hashing utilities.

Passwords are pre-hashed with SHA256 so that inputs longer than bcrypt's
72-byte limit are still fully significant.
"""

import hashlib
import bcrypt


def _pre_hash_password(password: str) -> bytes:
    """Return the 32-byte SHA256 digest of the password."""
    return hashlib.sha256(password.encode("utf-8")).digest()


def get_password_hash(password: str) -> str:
    """Hash a password for storage."""
    hashed = bcrypt.hashpw(_pre_hash_password(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its stored hash."""
    return bcrypt.checkpw(_pre_hash_password(plain_password), hashed_password.encode("utf-8"))
