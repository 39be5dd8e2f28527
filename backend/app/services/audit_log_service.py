import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


async def log_audit_event(db: AsyncSession, user_id: int | None, action: str, details: str | None = None):
    log = AuditLog(
        user_id=user_id,
        action=action,
        details=details,
    )
    db.add(log)
    await db.commit()
    return log


async def log_login_attempt(db: AsyncSession, user_id: int | None, status: str, email: str, details: str | None = None):
    action = f"login_{status}"
    combined_details = f"email={email}"
    if details:
        combined_details = f"{combined_details}. {details}"
    return await log_audit_event(db, user_id, action, combined_details)


async def safe_log(db: AsyncSession, user_id: int | None, action: str, details: str | None = None):
    """Audit without ever failing the request that triggered it."""
    try:
        return await log_audit_event(db, user_id, action, details)
    except Exception as e:
        await db.rollback()
        logger.warning("Audit log write failed for %s: %s", action, e)
        return None


async def list_events(db: AsyncSession, user_id: int) -> list[AuditLog]:
    result = await db.execute(select(AuditLog).where(AuditLog.user_id == user_id).order_by(AuditLog.id))
    return list(result.scalars().all())
