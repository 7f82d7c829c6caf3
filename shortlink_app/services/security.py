"""
Password hashing and token signing primitives used by the identity store.
"""

from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt

from shortlink_app.config import settings


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh per-password salt"""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash (constant-time comparison)"""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long input
        return False


def encode_token(
    user_id: str,
    jti: str,
    issued_at: datetime,
    expires_at: Optional[datetime] = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        user_id: Subject of the token
        jti: Unique token id, also the primary key of the stored Token row
        issued_at: Issue time (UTC)
        expires_at: Expiry time (UTC), or None for a non-expiring token

    Returns:
        Encoded JWT token
    """
    payload = {"sub": user_id, "jti": jti, "iat": issued_at}
    if expires_at is not None:
        payload["exp"] = expires_at

    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """
    Decode and verify a JWT.

    Raises:
        jwt.ExpiredSignatureError: If the token is past its exp claim
        jwt.InvalidTokenError: For any other signature/format problem
    """
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "jti"]},
    )


def token_expiry(issued_at: datetime, ttl_minutes: int) -> Optional[datetime]:
    """Expiry for a token issued now; ttl <= 0 means no expiry"""
    if ttl_minutes <= 0:
        return None
    return issued_at + timedelta(minutes=ttl_minutes)
