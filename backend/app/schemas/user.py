import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from app.models.user import Gender
from app.schemas.sanitize import clean_text

E164_PATTERN = re.compile(r"^\+[1-9]\d{7,14}$")


def normalize_mobile(value: str) -> str:
    value = re.sub(r"[\s\-()]", "", value or "")
    if not E164_PATTERN.match(value):
        raise ValueError("Please provide a valid mobile number with country code")
    return value


class UserRead(BaseModel):
    """Sanitized user projection; the password hash is never part of it."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    gender: Gender
    mobile_no: str
    signup_type: str
    is_email_verified: bool
    is_mobile_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    gender: Optional[Gender] = None
    mobile_no: Optional[str] = None

    @field_validator("full_name", mode="before")
    @classmethod
    def clean_name(cls, v):
        return clean_text(v)

    @field_validator("mobile_no")
    @classmethod
    def valid_mobile(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return normalize_mobile(v)


class UserResponse(BaseModel):
    message: Optional[str] = None
    user: UserRead


class AuditEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    action: str
    details: Optional[str] = None
    timestamp: datetime


class ActivityResponse(BaseModel):
    events: list[AuditEventRead]
