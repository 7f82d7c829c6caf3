"""
Tests for click recording and analytics.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from shortlink_app.errors import NotFoundError, ValidationError
from shortlink_app.models.click import ClickEvent
from shortlink_app.services.click_recorder import ClickRecorder
from shortlink_app.utils.request_info import visitor_fingerprint
from tests.conftest import run

VISITOR_A = visitor_fingerprint("203.0.113.1", "Mozilla/5.0 A")
VISITOR_B = visitor_fingerprint("203.0.113.2", "Mozilla/5.0 B")


@pytest.fixture
def recorder(db_session, registry):
    return ClickRecorder(db=db_session, registry=registry)


@pytest.fixture
def code(registry, owner_id):
    return run(registry.create(owner_id, "https://example.com/page", "page1")).code


class TestRecord:

    def test_fresh_link_has_zero_clicks(self, recorder, code):
        stats = run(recorder.stats_for(code))

        assert stats.total_clicks == 0
        assert stats.unique_clicks == 0
        assert len(stats.daily_clicks) == 7
        assert all(day.count == 0 for day in stats.daily_clicks)

    def test_total_and_unique(self, recorder, code):
        for visitor in (VISITOR_A, VISITOR_A, VISITOR_B):
            run(recorder.record(code, visitor))

        stats = run(recorder.stats_for(code))

        assert stats.total_clicks == 3
        assert stats.unique_clicks == 2

    def test_counts_never_decrease(self, recorder, code):
        seen = []
        for visitor in (VISITOR_A, VISITOR_B, VISITOR_A, VISITOR_B):
            run(recorder.record(code, visitor))
            stats = run(recorder.stats_for(code))
            seen.append((stats.total_clicks, stats.unique_clicks))

        assert seen == [(1, 1), (2, 2), (3, 2), (4, 2)]

    def test_unknown_code(self, recorder):
        with pytest.raises(NotFoundError):
            run(recorder.record("missing", VISITOR_A))
        with pytest.raises(NotFoundError):
            run(recorder.stats_for("missing"))

    def test_long_headers_are_truncated(self, recorder, code, db_session):
        run(recorder.record(code, VISITOR_A, ip_address="1" * 60, user_agent="u" * 900, referer="r" * 900))

        event = db_session.query(ClickEvent).one()
        assert len(event.ip_address) == 45
        assert len(event.user_agent) == 500
        assert len(event.referer) == 500

    def test_stats_are_per_code(self, recorder, registry, owner_id, code):
        other = run(registry.create(owner_id, "https://example.com/other", "other1")).code
        run(recorder.record(code, VISITOR_A))

        assert run(recorder.stats_for(other)).total_clicks == 0


class TestBreakdowns:

    def test_daily_clicks_most_recent_first(self, recorder, code):
        now = datetime.now(timezone.utc)
        run(recorder.record(code, VISITOR_A, timestamp=now))
        run(recorder.record(code, VISITOR_B, timestamp=now))
        run(recorder.record(code, VISITOR_A, timestamp=now - timedelta(days=2)))
        run(recorder.record(code, VISITOR_A, timestamp=now - timedelta(days=30)))

        daily = run(recorder.daily_clicks(code))

        assert [day.date for day in daily][0] == now.date().isoformat()
        assert [day.count for day in daily] == [2, 0, 1, 0, 0, 0, 0]

    def test_hourly_distribution(self, recorder, code):
        day = date(2024, 1, 15)
        for hour, minute in ((3, 10), (3, 50), (17, 0)):
            ts = datetime(2024, 1, 15, hour, minute, tzinfo=timezone.utc)
            run(recorder.record(code, VISITOR_A, timestamp=ts))
        run(recorder.record(code, VISITOR_A, timestamp=datetime(2024, 1, 16, 3, 0, tzinfo=timezone.utc)))

        hours = run(recorder.hourly_distribution(code, day))

        assert len(hours) == 24
        assert hours[3].count == 2
        assert hours[17].count == 1
        assert sum(h.count for h in hours) == 3

    def test_top_referers(self, recorder, code):
        for referer in ("https://news.example", "https://news.example", "https://blog.example", "", None):
            run(recorder.record(code, VISITOR_A, referer=referer))

        referers = run(recorder.top_referers(code))

        assert [(r.referer, r.count) for r in referers] == [
            ("https://news.example", 2),
            ("https://blog.example", 1),
        ]


class TestTopLinks:

    def test_ordered_by_clicks(self, recorder, registry, owner_id, code):
        other = run(registry.create(owner_id, "https://example.com/other", "other1")).code
        for _ in range(3):
            run(recorder.record(other, VISITOR_A))
        run(recorder.record(code, VISITOR_A))

        top = run(recorder.top_links())

        assert [(t.short_code, t.clicks) for t in top] == [(other, 3), (code, 1)]

    def test_period_window(self, recorder, registry, owner_id, code):
        other = run(registry.create(owner_id, "https://example.com/other", "other1")).code
        old = datetime.now(timezone.utc) - timedelta(days=10)
        for _ in range(3):
            run(recorder.record(other, VISITOR_A, timestamp=old))
        run(recorder.record(code, VISITOR_A))

        assert [t.short_code for t in run(recorder.top_links("week"))] == [code]
        assert [t.short_code for t in run(recorder.top_links("month"))] == [other, code]

    def test_limit(self, recorder, registry, owner_id, code):
        other = run(registry.create(owner_id, "https://example.com/other", "other1")).code
        run(recorder.record(code, VISITOR_A))
        run(recorder.record(other, VISITOR_A))

        assert len(run(recorder.top_links(limit=1))) == 1

    def test_unknown_period(self, recorder):
        with pytest.raises(ValidationError):
            run(recorder.top_links("year"))
