import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from shortlink_app.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Registered account. Only the salted bcrypt hash of the password is kept."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_user_id)
    # unique=True is what makes concurrent registrations of one name safe
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    tokens = relationship("Token", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.username}>"


class Token(Base):
    """
    Issued bearer token, keyed by the JWT id (jti).

    The signed JWT proves integrity and expiry; the row lets the server
    reject tokens it never issued and revoke tokens on logout.
    """
    __tablename__ = "tokens"

    jti = Column(String(32), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="tokens")

    def __repr__(self):
        return f"<Token {self.jti} for {self.user_id}>"
