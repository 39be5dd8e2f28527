"""
Credential Store adapter over the ``users`` table.

Uniqueness of ``email`` and ``mobile_no`` is enforced by the table's unique
constraints; ``insert_user`` reports a violation as ``UniqueViolation`` naming
the offending field.
"""
import os
import enum
from passlib.context import CryptContext
from sqlalchemy import update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from starlette.concurrency import run_in_threadpool

from app.models.user import User, SignupType, utcnow

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

UNIQUE_FIELDS = ("mobile_no", "email", "firebase_uid")


class VerificationChannel(str, enum.Enum):
    email = "email"
    mobile = "mobile"


_FLAG_COLUMNS = {
    VerificationChannel.email: User.is_email_verified,
    VerificationChannel.mobile: User.is_mobile_verified,
}


class UniqueViolation(Exception):
    def __init__(self, field: str | None):
        self.field = field
        super().__init__(f"unique constraint violated on {field or 'unknown field'}")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _violated_field(exc: IntegrityError) -> str | None:
    # SQLite: "UNIQUE constraint failed: users.email"; Postgres: constraint/index name
    text = str(exc.orig).lower()
    for field in UNIQUE_FIELDS:
        if field in text:
            return field
    return None


async def hash_password(password: str) -> str:
    return await run_in_threadpool(pwd_context.hash, password)


async def verify_password(password: str, hashed: str) -> bool:
    try:
        return await run_in_threadpool(pwd_context.verify, password, hashed)
    except ValueError:
        return False


async def find_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def find_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def find_by_mobile(db: AsyncSession, mobile_no: str) -> User | None:
    result = await db.execute(select(User).where(User.mobile_no == mobile_no))
    return result.scalar_one_or_none()


async def insert_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    full_name: str,
    gender: str,
    mobile_no: str,
    firebase_uid: str | None = None,
    signup_type: str = SignupType.email.value,
) -> User:
    user = User(
        email=normalize_email(email),
        password=await hash_password(password),
        full_name=full_name,
        gender=gender,
        mobile_no=mobile_no,
        firebase_uid=firebase_uid,
        signup_type=signup_type,
        is_email_verified=False,
        is_mobile_verified=False,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise UniqueViolation(_violated_field(exc)) from exc
    await db.refresh(user)
    return user


async def update_verification_flag(db: AsyncSession, user_id: int, channel: VerificationChannel) -> bool:
    """Flip one verification flag from false to true.

    Returns False when the flag was already set (or the user is gone); the
    conditional WHERE guarantees a flag is never flipped twice.
    """
    column = _FLAG_COLUMNS[channel]
    result = await db.execute(
        update(User)
        .where(User.id == user_id, column.is_(False))
        .values({column.key: True, "updated_at": utcnow()})
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1


async def update_profile(db: AsyncSession, user: User, changes: dict) -> User:
    for field in ("full_name", "gender", "mobile_no"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise UniqueViolation(_violated_field(exc)) from exc
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> bool:
    result = await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    return result.rowcount == 1
