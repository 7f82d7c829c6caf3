import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shortlink_app.config import settings
from shortlink_app.database.connection import store_operation
from shortlink_app.errors import AuthError, ConflictError, ValidationError
from shortlink_app.models.user import Token, User
from shortlink_app.services.security import (
    decode_token,
    encode_token,
    hash_password,
    token_expiry,
    verify_password,
)
from shortlink_app.utils.validators import validate_credentials

logger = logging.getLogger(__name__)

BAD_CREDENTIALS = "Invalid username or password"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class IdentityStore:
    """
    Users and bearer tokens.

    Sole writer of the ``users`` and ``tokens`` tables. Each public method is
    an async wrapper that runs the blocking work (bcrypt, database) in a
    worker thread so the event loop keeps serving other requests.
    """

    _dummy_hashes = {}  # rounds -> hash checked when the username is unknown

    def __init__(
        self,
        db: Session,
        token_ttl_minutes: Optional[int] = None,
        bcrypt_rounds: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            db: Database session
            token_ttl_minutes: Token lifetime; defaults to settings, <= 0 disables expiry
            bcrypt_rounds: bcrypt cost; defaults to settings
            clock: Source of "now" for issued tokens
        """
        self.db = db
        self.token_ttl_minutes = (
            settings.token_ttl_minutes if token_ttl_minutes is None else token_ttl_minutes
        )
        self.bcrypt_rounds = bcrypt_rounds or settings.bcrypt_rounds
        self.clock = clock

    async def register(self, username: str, password: str) -> Tuple[str, str]:
        """
        Create an account and issue its first token.

        Returns:
            (user_id, token)

        Raises:
            ValidationError: username not 3-50 chars or password shorter than 6
            ConflictError: username already taken
        """
        return await asyncio.to_thread(self._register, username, password)

    async def login(self, username: str, password: str) -> Tuple[str, str]:
        """
        Check credentials and issue a new token.

        Unknown usernames and wrong passwords fail identically, and both
        pay for one bcrypt check.

        Returns:
            (user_id, token)

        Raises:
            ValidationError: username or password missing
            AuthError: bad credentials
        """
        return await asyncio.to_thread(self._login, username, password)

    async def validate(self, token: str) -> str:
        """
        Resolve a bearer token to its user id.

        Raises:
            AuthError: token malformed, badly signed, expired, unknown or revoked
        """
        return await asyncio.to_thread(self._validate, token)

    async def revoke(self, token: str) -> None:
        """
        Revoke a token (server-side logout). The token must currently be valid.
        """
        await asyncio.to_thread(self._revoke, token)

    def _register(self, username: str, password: str) -> Tuple[str, str]:
        username = validate_credentials(username, password)

        with store_operation(self.db, "check username"):
            taken = self.db.query(User.id).filter(User.username == username).first()
        if taken:
            raise ConflictError("Username already taken")

        user = User(username=username, password_hash=hash_password(password, self.bcrypt_rounds))
        try:
            with store_operation(self.db, "create user"):
                self.db.add(user)
                self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            raise ConflictError("Username already taken")

        logger.info("Registered user %s (%s)", username, user.id)
        return user.id, self._issue_token(user.id)

    def _login(self, username: str, password: str) -> Tuple[str, str]:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")

        with store_operation(self.db, "look up user"):
            user = self.db.query(User).filter(User.username == username).first()

        if user is None:
            verify_password(password, self._dummy_hash())
            raise AuthError(BAD_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            raise AuthError(BAD_CREDENTIALS)

        return user.id, self._issue_token(user.id)

    def _validate(self, token: str) -> str:
        if not token:
            raise AuthError("Authorization header required")

        try:
            claims = decode_token(token)
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")

        with store_operation(self.db, "validate token"):
            row = self.db.get(Token, claims["jti"])

        if row is None or row.user_id != claims["sub"]:
            raise AuthError("Invalid token")
        if row.revoked_at is not None:
            raise AuthError("Token revoked")

        expires_at = _as_utc(row.expires_at)
        if expires_at is not None and expires_at <= _utcnow():
            raise AuthError("Token expired")

        return row.user_id

    def _revoke(self, token: str) -> None:
        self._validate(token)
        claims = decode_token(token)

        with store_operation(self.db, "revoke token"):
            row = self.db.get(Token, claims["jti"])
            row.revoked_at = _utcnow()
            self.db.commit()

        logger.info("Revoked token %s for user %s", row.jti, row.user_id)

    def _issue_token(self, user_id: str) -> str:
        issued_at = self.clock()
        expires_at = token_expiry(issued_at, self.token_ttl_minutes)
        jti = uuid.uuid4().hex

        with store_operation(self.db, "issue token"):
            self.db.add(Token(jti=jti, user_id=user_id, issued_at=issued_at, expires_at=expires_at))
            self.db.commit()

        return encode_token(user_id, jti, issued_at, expires_at)

    def _dummy_hash(self) -> str:
        cached = self._dummy_hashes.get(self.bcrypt_rounds)
        if cached is None:
            cached = hash_password(uuid.uuid4().hex, self.bcrypt_rounds)
            self._dummy_hashes[self.bcrypt_rounds] = cached
        return cached
