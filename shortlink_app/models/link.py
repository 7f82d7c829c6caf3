from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from shortlink_app.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShortLink(Base):
    """
    Short code -> destination mapping owned by exactly one user.

    The UNIQUE constraint on ``code`` is the reservation point: an INSERT
    either claims the code or fails with IntegrityError. Codes compare
    case-sensitively.
    """
    __tablename__ = "short_links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(30), unique=True, nullable=False)
    owner_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    destination_url = Column(String(2048), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_short_links_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self):
        return f"<ShortLink {self.code} -> {self.destination_url}>"


class CodeSequence(Base):
    """
    Counter backing the Base62 strategy.

    One row per drawn value; the autoincrement id is the sequence number,
    so values stay unique across processes.
    """
    __tablename__ = "code_sequence"

    id = Column(Integer, primary_key=True, autoincrement=True)
    drawn_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
