from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator
from typing import Optional
from datetime import date, datetime

from app.schemas.sanitize import clean_text, strip_text

# Free-text columns; markup is removed before length checks run
TEXT_FIELDS = ("company_name", "address", "city", "state", "country", "postal_code", "industry", "description")


class CompanyBase(BaseModel):
    company_name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1, max_length=50)
    state: str = Field(min_length=1, max_length=50)
    country: str = Field(min_length=1, max_length=50)
    postal_code: str = Field(min_length=1, max_length=20)
    website: Optional[HttpUrl] = None
    industry: str = Field(min_length=1, max_length=100)
    founded_date: Optional[date] = None
    description: Optional[str] = None
    social_links: Optional[dict[str, str]] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def sanitize_text(cls, v):
        return clean_text(v)

    @field_validator("website", mode="before")
    @classmethod
    def strip_website(cls, v):
        return strip_text(v) or None

    @field_validator("social_links", mode="before")
    @classmethod
    def strip_links(cls, v):
        if isinstance(v, dict):
            return {clean_text(k): strip_text(url) for k, url in v.items()}
        return v


class CompanyUpdate(CompanyBase):
    company_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1, max_length=50)
    state: Optional[str] = Field(default=None, min_length=1, max_length=50)
    country: Optional[str] = Field(default=None, min_length=1, max_length=50)
    postal_code: Optional[str] = Field(default=None, min_length=1, max_length=20)
    industry: Optional[str] = Field(default=None, min_length=1, max_length=100)


class CompanyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    company_name: str
    address: str
    city: str
    state: str
    country: str
    postal_code: str
    website: Optional[str] = None
    industry: str
    founded_date: Optional[date] = None
    description: Optional[str] = None
    social_links: Optional[dict[str, str]] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanyResponse(BaseModel):
    message: Optional[str] = None
    company: CompanyRead


class MessageResponse(BaseModel):
    message: str
