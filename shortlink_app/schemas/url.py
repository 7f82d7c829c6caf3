from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from shortlink_app.config import settings


def short_url_for(code: str) -> str:
    """Fully-qualified redirect URL for a code"""
    return f"{settings.base_url.rstrip('/')}/{code}"


def to_epoch_seconds(value: datetime) -> int:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class ShortenRequest(BaseModel):
    url: str = Field(..., description="The original URL to be shortened")
    custom_alias: Optional[str] = Field(None, description="Optional user-chosen short code")

    @field_validator("custom_alias")
    @classmethod
    def blank_alias_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class ShortenResponse(BaseModel):
    short_code: str

    @computed_field
    @property
    def short_url(self) -> str:
        return short_url_for(self.short_code)


class URLItem(BaseModel):
    short_code: str
    original_url: str
    created_at: int = Field(..., description="Unix epoch seconds")

    @computed_field
    @property
    def short_url(self) -> str:
        return short_url_for(self.short_code)

    @classmethod
    def from_link(cls, link) -> "URLItem":
        return cls(
            short_code=link.code,
            original_url=link.destination_url,
            created_at=to_epoch_seconds(link.created_at),
        )


class URLListResponse(BaseModel):
    urls: List[URLItem]
