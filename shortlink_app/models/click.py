from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Index
from shortlink_app.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClickEvent(Base):
    """
    One redirect traversal of a short code. Append-only.

    Totals and unique-visitor counts are derived from these rows at read
    time, so concurrent writers never contend on a shared counter.
    References the link by code only.
    """
    __tablename__ = "click_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(30), nullable=False)
    visitor_fingerprint = Column(String(64), nullable=False)
    ip_address = Column(String(45), nullable=True)  # IPv4 or IPv6
    user_agent = Column(String(500), nullable=True)
    referer = Column(String(500), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_click_events_code_ts", "code", "timestamp"),
        Index("idx_click_events_code_visitor", "code", "visitor_fingerprint"),
    )

    def __repr__(self):
        return f"<ClickEvent {self.id} for {self.code}>"
