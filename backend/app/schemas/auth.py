import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from app.models.user import Gender
from app.schemas.sanitize import clean_text
from app.schemas.user import UserRead, normalize_mobile


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    full_name: str = Field(min_length=2, max_length=255)
    gender: Gender
    mobile_no: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if not (re.search(r"[a-z]", v) and re.search(r"[A-Z]", v) and re.search(r"\d", v)):
            raise ValueError("Password must contain at least one uppercase letter, one lowercase letter, and one number")
        return v

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = clean_text(v)
        if len(v) < 2:
            raise ValueError("Full name must be between 2 and 255 characters")
        return v

    @field_validator("mobile_no")
    @classmethod
    def valid_mobile(cls, v: str) -> str:
        return normalize_mobile(v)


class RegisterResponse(BaseModel):
    message: str
    user: UserRead
    token: str
    firebase_uid: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    firebase_token: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginResponse(BaseModel):
    message: str
    user: UserRead
    token: str
    token_type: str = "bearer"


class VerifyMobileRequest(BaseModel):
    firebase_token: str = Field(min_length=1)


class VerifyResponse(BaseModel):
    message: str
    user: UserRead


class FirebaseTokenRequest(BaseModel):
    id_token: str = Field(min_length=1)


class FirebaseTokenResponse(BaseModel):
    uid: str
    email: Optional[str] = None
    email_verified: bool


class LogoutResponse(BaseModel):
    message: str
