from sqlalchemy import Column, Integer, String, DateTime, Date, Text, JSON, ForeignKey
from app.models.user import Base, utcnow


class CompanyProfile(Base):
    __tablename__ = "company_profile"
    id = Column(Integer, primary_key=True, index=True)
    # One company per user; the unique constraint arbitrates concurrent creates
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    company_name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    country = Column(String(50), nullable=False)
    postal_code = Column(String(20), nullable=False)
    website = Column(String(255), nullable=True)
    industry = Column(String(100), nullable=False)
    founded_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    social_links = Column(JSON, nullable=True)
    logo_url = Column(String(512), nullable=True)
    logo_public_id = Column(String(255), nullable=True)
    banner_url = Column(String(512), nullable=True)
    banner_public_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
