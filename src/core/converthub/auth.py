from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from .store import ConversionStore


_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def register_user(store: ConversionStore, email: str, password: str) -> str:
    if not email or not password:
        raise ValueError("Email and password are required")
    return str(store.add_user(email.strip(), hash_password(password)))


def authenticate(store: ConversionStore, email: str, password: str) -> str | None:
    """Return the owner identity for valid credentials, otherwise ``None``."""
    user = store.get_user_by_email(email.strip())
    if user is None:
        return None
    user_id, password_hash = user
    try:
        _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return None
    return str(user_id)


__all__ = ["authenticate", "hash_password", "register_user"]
