from typing import List

from pydantic import BaseModel, Field


class DailyClicks(BaseModel):
    date: str = Field(..., description="UTC day, YYYY-MM-DD")
    count: int


class HourlyClicks(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    count: int


class ClickStats(BaseModel):
    total_clicks: int
    unique_clicks: int
    daily_clicks: List[DailyClicks] = []


class StatsResponse(BaseModel):
    stats: ClickStats


class RefererCount(BaseModel):
    referer: str
    count: int


class ReferersResponse(BaseModel):
    referers: List[RefererCount]


class HourlyResponse(BaseModel):
    hours: List[HourlyClicks]


class TopLink(BaseModel):
    short_code: str
    clicks: int


class TopLinksResponse(BaseModel):
    urls: List[TopLink]
