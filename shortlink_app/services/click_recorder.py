import asyncio
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from shortlink_app.config import settings
from shortlink_app.database.connection import store_operation
from shortlink_app.errors import NotFoundError, ValidationError
from shortlink_app.models.click import ClickEvent
from shortlink_app.schemas.stats import (
    ClickStats,
    DailyClicks,
    HourlyClicks,
    RefererCount,
    TopLink,
)
from shortlink_app.services.link_registry import LinkRegistry

logger = logging.getLogger(__name__)

MAX_IP_LENGTH = 45
MAX_HEADER_LENGTH = 500
MAX_TOP_LIMIT = 100

TOP_PERIODS = {
    "all": None,
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    return value[:limit] if value else value


class ClickRecorder:
    """
    Append-only click log with aggregates derived at read time.

    Sole writer of ``click_events``. Recording is a single INSERT, so
    concurrent clicks on the same code cannot lose updates. Unique visitors
    are the distinct fingerprints among a code's events.
    Queries run in a worker thread via ``asyncio.to_thread``.
    """

    def __init__(self, db: Session, registry: LinkRegistry):
        """
        Args:
            db: Database session
            registry: Link registry consulted to tell unknown codes apart
        """
        self.db = db
        self.registry = registry

    async def record(
        self,
        code: str,
        visitor_fingerprint: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        referer: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> None:
        """
        Append one click. Repeat fingerprints are expected and kept.

        Raises:
            NotFoundError: code unknown to the registry
        """
        await self._require_link(code)

        event = ClickEvent(
            code=code,
            visitor_fingerprint=visitor_fingerprint,
            ip_address=_clip(ip_address, MAX_IP_LENGTH),
            user_agent=_clip(user_agent, MAX_HEADER_LENGTH),
            referer=_clip(referer, MAX_HEADER_LENGTH),
            timestamp=timestamp or _utcnow(),
        )
        await asyncio.to_thread(self._append, event)

        logger.debug("Click recorded for %s", code)

    async def stats_for(self, code: str, days: Optional[int] = None) -> ClickStats:
        """
        Total and unique clicks for ``code`` plus the recent daily breakdown.

        A known code with no clicks yields zeros, not NotFoundError.

        Raises:
            NotFoundError: code unknown to the registry
        """
        await self._require_link(code)

        total, unique = await asyncio.to_thread(self._counts, code)
        daily = await self._daily_clicks(code, days or settings.stats_daily_days)

        logger.debug("Stats for %s: total=%d, unique=%d", code, total, unique)
        return ClickStats(total_clicks=total, unique_clicks=unique, daily_clicks=daily)

    async def daily_clicks(self, code: str, days: Optional[int] = None) -> List[DailyClicks]:
        """Clicks per UTC day for the last ``days`` days, most recent first, zero-filled"""
        await self._require_link(code)
        return await self._daily_clicks(code, days or settings.stats_daily_days)

    async def hourly_distribution(self, code: str, day: Optional[date] = None) -> List[HourlyClicks]:
        """Clicks per UTC hour (0-23) on ``day`` (default: today)"""
        await self._require_link(code)

        day = day or _utcnow().date()
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        counts = [0] * 24

        timestamps = await asyncio.to_thread(self._timestamps, code, start, start + timedelta(days=1))
        for ts in timestamps:
            counts[_as_utc(ts).hour] += 1

        return [HourlyClicks(hour=hour, count=count) for hour, count in enumerate(counts)]

    async def top_referers(self, code: str, limit: int = 10) -> List[RefererCount]:
        """Most frequent referers for ``code``"""
        await self._require_link(code)
        limit = max(1, min(limit, MAX_TOP_LIMIT))

        rows = await asyncio.to_thread(self._referer_rows, code, limit)
        return [RefererCount(referer=row.referer, count=row.count) for row in rows]

    async def top_links(self, period: str = "all", limit: int = 10) -> List[TopLink]:
        """
        Most clicked codes across the whole registry.

        Args:
            period: "all", "week" (last 7 days) or "month" (last 30 days)
            limit: Clamped to 1..100
        """
        if period not in TOP_PERIODS:
            raise ValidationError("period must be one of: all, week, month")
        limit = max(1, min(limit, MAX_TOP_LIMIT))

        rows = await asyncio.to_thread(self._top_link_rows, TOP_PERIODS[period], limit)
        return [TopLink(short_code=row.code, clicks=row.clicks) for row in rows]

    async def _daily_clicks(self, code: str, days: int) -> List[DailyClicks]:
        today = _utcnow().date()
        first_day = today - timedelta(days=days - 1)
        start = datetime.combine(first_day, time.min, tzinfo=timezone.utc)

        counts = {first_day + timedelta(days=i): 0 for i in range(days)}
        for ts in await asyncio.to_thread(self._timestamps, code, start, None):
            day = _as_utc(ts).date()
            if day in counts:
                counts[day] += 1

        return [
            DailyClicks(date=day.isoformat(), count=counts[day])
            for day in sorted(counts, reverse=True)
        ]

    async def _require_link(self, code: str) -> None:
        if not await self.registry.exists(code):
            raise NotFoundError("Short URL not found")

    def _append(self, event: ClickEvent) -> None:
        with store_operation(self.db, "record click"):
            self.db.add(event)
            self.db.commit()

    def _counts(self, code: str) -> Tuple[int, int]:
        with store_operation(self.db, "count clicks"):
            return tuple(
                self.db.query(
                    func.count(ClickEvent.id),
                    func.count(func.distinct(ClickEvent.visitor_fingerprint)),
                )
                .filter(ClickEvent.code == code)
                .one()
            )

    def _referer_rows(self, code: str, limit: int) -> list:
        with store_operation(self.db, "aggregate referers"):
            return (
                self.db.query(ClickEvent.referer, func.count(ClickEvent.id).label("count"))
                .filter(
                    ClickEvent.code == code,
                    ClickEvent.referer.isnot(None),
                    ClickEvent.referer != "",
                )
                .group_by(ClickEvent.referer)
                .order_by(func.count(ClickEvent.id).desc(), ClickEvent.referer)
                .limit(limit)
                .all()
            )

    def _top_link_rows(self, window: Optional[timedelta], limit: int) -> list:
        clicks = func.count(ClickEvent.id).label("clicks")
        with store_operation(self.db, "aggregate top links"):
            query = self.db.query(ClickEvent.code, clicks)
            if window is not None:
                query = query.filter(ClickEvent.timestamp >= _utcnow() - window)
            return (
                query.group_by(ClickEvent.code)
                .order_by(clicks.desc(), ClickEvent.code)
                .limit(limit)
                .all()
            )

    def _timestamps(self, code: str, start: datetime, end: Optional[datetime]) -> List[datetime]:
        with store_operation(self.db, "read click timestamps"):
            query = self.db.query(ClickEvent.timestamp).filter(
                ClickEvent.code == code,
                ClickEvent.timestamp >= start,
            )
            if end is not None:
                query = query.filter(ClickEvent.timestamp < end)
            return [row.timestamp for row in query.all()]
