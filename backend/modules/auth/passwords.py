"""
Password hashing helpers.

Thin wrapper over bcrypt so the rest of the code treats hashing as an
opaque one-way function with a verify operation.
"""

import secrets

import bcrypt

DEFAULT_ROUNDS = 12

# No 0/O, 1/l/I: temporary passwords are read aloud and retyped.
_PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with a fresh salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_random_password(length: int = 12) -> str:
    """Generate a temporary password for manual enrollments."""
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))
