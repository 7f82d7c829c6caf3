from .auth import Credentials, AuthResponse
from .url import ShortenRequest, ShortenResponse, URLItem, URLListResponse
from .stats import (
    ClickStats,
    DailyClicks,
    HourlyClicks,
    HourlyResponse,
    RefererCount,
    ReferersResponse,
    StatsResponse,
    TopLink,
    TopLinksResponse,
)

__all__ = [
    "Credentials",
    "AuthResponse",
    "ShortenRequest",
    "ShortenResponse",
    "URLItem",
    "URLListResponse",
    "ClickStats",
    "DailyClicks",
    "HourlyClicks",
    "HourlyResponse",
    "RefererCount",
    "ReferersResponse",
    "StatsResponse",
    "TopLink",
    "TopLinksResponse",
]
