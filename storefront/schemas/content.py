from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, Field, HttpUrl, field_validator, model_validator

from storefront.schemas.base import RequestModel

# Validated as an http(s) URL, stored as plain text.
UrlString = Annotated[HttpUrl, AfterValidator(str)]


def _utc(value):
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PromotionCreate(RequestModel):
    title: str
    image_url: UrlString
    description: Optional[str] = None
    appearance_date: datetime
    close_date: datetime

    @field_validator("appearance_date", "close_date")
    @classmethod
    def to_utc(cls, v):
        return _utc(v)

    @model_validator(mode="after")
    def check_window(self):
        if self.close_date <= self.appearance_date:
            raise ValueError("Close date must be after appearance date")
        return self


class PromotionPatch(RequestModel):
    title: Optional[str] = None
    image_url: Optional[UrlString] = None
    description: Optional[str] = None
    appearance_date: Optional[datetime] = None
    close_date: Optional[datetime] = None

    @field_validator("appearance_date", "close_date")
    @classmethod
    def to_utc(cls, v):
        return _utc(v)


class NewsCreate(RequestModel):
    title: str
    content: Optional[str] = None
    link: Optional[UrlString] = None
    is_active: bool = True
    order: int = Field(default=0, ge=0)


class NewsPatch(RequestModel):
    title: Optional[str] = None
    content: Optional[str] = None
    link: Optional[UrlString] = None
    is_active: Optional[bool] = None
    order: Optional[int] = Field(default=None, ge=0)


class AboutUsUpdate(RequestModel):
    about_us: Optional[str] = None
