from sqlalchemy import Column, Integer, String, DateTime
from app.models.user import Base, utcnow


class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(Integer, primary_key=True, index=True)
    # Nullable: failed logins may not resolve to a user
    user_id = Column(Integer, nullable=True, index=True)
    action = Column(String(64), nullable=False)
    details = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
