from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from shortlink_app.dependencies import get_click_recorder
from shortlink_app.errors import ValidationError
from shortlink_app.schemas.stats import (
    HourlyResponse,
    ReferersResponse,
    StatsResponse,
    TopLinksResponse,
)
from shortlink_app.services.click_recorder import ClickRecorder

router = APIRouter(tags=["stats"])


def _require_code(code: Optional[str]) -> str:
    if not code:
        raise ValidationError("Short code required")
    return code


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    code: Optional[str] = Query(None),
    recorder: ClickRecorder = Depends(get_click_recorder)
):
    """Click counts for a code. Public: no token required."""
    stats = await recorder.stats_for(_require_code(code))
    return StatsResponse(stats=stats)


@router.get("/stats/referers", response_model=ReferersResponse)
async def get_referers(
    code: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    recorder: ClickRecorder = Depends(get_click_recorder)
):
    referers = await recorder.top_referers(_require_code(code), limit=limit)
    return ReferersResponse(referers=referers)


@router.get("/stats/hourly", response_model=HourlyResponse)
async def get_hourly(
    code: Optional[str] = Query(None),
    day: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD, defaults to today (UTC)"),
    recorder: ClickRecorder = Depends(get_click_recorder)
):
    parsed = None
    if day:
        try:
            parsed = date.fromisoformat(day)
        except ValueError:
            raise ValidationError("date must be formatted as YYYY-MM-DD")

    hours = await recorder.hourly_distribution(_require_code(code), parsed)
    return HourlyResponse(hours=hours)


@router.get("/top", response_model=TopLinksResponse)
async def get_top_links(
    period: str = Query("all"),
    limit: int = Query(10, ge=1, le=100),
    recorder: ClickRecorder = Depends(get_click_recorder)
):
    """Most clicked codes over all time, the last week or the last month"""
    urls = await recorder.top_links(period=period, limit=limit)
    return TopLinksResponse(urls=urls)
