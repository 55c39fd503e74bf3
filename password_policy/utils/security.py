# password_policy/utils/security.py
"""Default password verification capability backed by bcrypt

The engine never compares hash strings itself: every history lookup goes
through a ``verify(plain, hashed, salt=None)`` callable. This module provides
the bcrypt implementation used when the host does not supply one, plus the
matching ``hash_password`` the demo application uses to store credentials.
"""
from typing import Optional

import bcrypt

BCRYPT_ROUNDS = 12


def _combine(password: str, salt: Optional[str]) -> bytes:
    # Legacy rows carry an explicit salt that was appended before hashing
    if salt:
        return f"{password}{salt}".encode('utf-8')
    return password.encode('utf-8')


def hash_password(password: str, salt: Optional[str] = None, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash password using bcrypt

    Args:
        password: Plain text password
        salt: Optional legacy salt appended to the password before hashing
        rounds: bcrypt cost factor

    Returns:
        bcrypt hash as a string
    """
    hashed = bcrypt.hashpw(_combine(password, salt), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def verify_password(password: str, stored_hash: str, salt: Optional[str] = None) -> bool:
    """
    Verify password against stored hash using bcrypt's constant-time check

    Args:
        password: Plain text password to verify
        stored_hash: bcrypt hash previously produced by ``hash_password``
        salt: Optional legacy salt stored next to the hash

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    if not password or not stored_hash:
        return False
    try:
        return bcrypt.checkpw(_combine(password, salt), stored_hash.encode('utf-8'))
    except ValueError:
        return False
