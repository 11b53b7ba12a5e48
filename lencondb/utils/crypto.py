"""
Password hashing with bcrypt.

Hashes are stored as the ``$2b$`` text form in ``users.password_hash``.
"""

import bcrypt

BCRYPT_ROUNDS = 12


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plain-text password against its bcrypt hash.

    Returns False for non-string input or non-bcrypt hashes instead of raising.
    """
    if not isinstance(plain_password, str) or not plain_password or not password_hash:
        return False
    if not password_hash.startswith(("$2b$", "$2a$", "$2y$")):
        return False
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        password_hash.encode("utf-8"),
    )
