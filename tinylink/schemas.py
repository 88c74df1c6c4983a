from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class LinkCreate(CamelModel):
    url: Optional[str] = None
    target_url: Optional[str] = None
    original_url: Optional[str] = None
    code: Optional[str] = None

    @property
    def destination(self) -> Optional[str]:
        # Older clients send targetUrl or originalUrl instead of url
        return self.url or self.target_url or self.original_url

class LinkResponse(CamelModel):
    code: str
    short_url: str
    original_url: str
    click_count: int
    last_clicked_at: Optional[datetime]
    created_at: datetime

    @field_validator("last_clicked_at", "created_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands timestamps back without tzinfo; they were written as UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class DeleteResponse(BaseModel):
    ok: bool = True

class HealthResponse(BaseModel):
    ok: bool
    version: str
    uptime: float
    timestamp: datetime

class ErrorResponse(BaseModel):
    error: str
