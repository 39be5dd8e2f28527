from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone
import enum

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


class Gender(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


class SignupType(str, enum.Enum):
    email = "e"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # bcrypt hash only, never the plaintext
    password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    gender = Column(String(10), nullable=False)
    mobile_no = Column(String(20), unique=True, index=True, nullable=False)
    signup_type = Column(String(1), default=SignupType.email.value, nullable=False)
    firebase_uid = Column(String(128), unique=True, nullable=True)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    is_mobile_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
