"""
Registration / verification coordinator.

Users live in two places: the local ``users`` table and the external identity
provider (Firebase). Registration creates the external identity first and the
local row second; if the local insert fails, the external identity is deleted
again before the error propagates, so no external identity is ever left
pointing at a user that does not exist locally.

Each user has two independent verification channels (email, mobile). A channel
moves from unverified to verified exactly once; asking to verify an already
verified channel is rejected with ``AlreadyVerifiedError``.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import (
    AlreadyVerifiedError,
    ConflictError,
    InvalidVerificationToken,
    NotFoundError,
    UnauthorizedError,
)
from app.models.user import User
from app.schemas.auth import RegisterRequest
from app.services import user_store
from app.services.identity_provider import FirebaseIdentityProvider, IdentityTokenError
from app.services.token_service import issue_session_token
from app.services.user_store import UniqueViolation, VerificationChannel

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"

_CONFLICT_MESSAGES = {
    "email": "Email address already registered",
    "mobile_no": "Mobile number already registered",
}


@dataclass
class RegistrationResult:
    user: User
    firebase_uid: str


@dataclass
class LoginResult:
    user: User
    token: str


def _conflict(field: str | None) -> ConflictError:
    return ConflictError(_CONFLICT_MESSAGES.get(field or "", "User already exists (email or mobile number)"), field=field)


async def _rollback_identity(identity: FirebaseIdentityProvider, uid: str) -> None:
    try:
        await identity.delete_identity(uid)
        logger.info("Rolled back external identity %s after failed local insert", uid)
    except Exception:
        # The original failure is what the caller needs to see
        logger.exception("Compensating delete of external identity %s failed", uid)


async def register_user(db: AsyncSession, identity: FirebaseIdentityProvider, data: RegisterRequest) -> RegistrationResult:
    email = user_store.normalize_email(data.email)

    # Advisory pre-checks; the unique constraints are the real arbiter
    if await user_store.find_by_email(db, email):
        raise _conflict("email")
    if await user_store.find_by_mobile(db, data.mobile_no):
        raise _conflict("mobile_no")

    # Nothing local exists yet, so a failure here needs no cleanup
    uid = await identity.create_identity(email, data.password, data.full_name, data.mobile_no)

    try:
        user = await user_store.insert_user(
            db,
            email=email,
            password=data.password,
            full_name=data.full_name,
            gender=data.gender.value,
            mobile_no=data.mobile_no,
            firebase_uid=uid,
        )
    except UniqueViolation as exc:
        await _rollback_identity(identity, uid)
        raise _conflict(exc.field) from exc
    except Exception:
        await _rollback_identity(identity, uid)
        raise

    logger.info("Registered user %s (%s)", user.id, email)

    try:
        sent = await identity.send_email_verification(email)
        if not sent:
            logger.warning("Verification email for user %s was not delivered", user.id)
    except Exception as e:
        logger.warning("Could not dispatch verification link for user %s: %s", user.id, e)

    return RegistrationResult(user=user, firebase_uid=uid)


async def login_user(db: AsyncSession, identity: FirebaseIdentityProvider, email: str, password: str, id_token: str) -> LoginResult:
    email = user_store.normalize_email(email)

    try:
        verified = await identity.verify_token(id_token)
    except IdentityTokenError as e:
        logger.warning("Login rejected for %s: invalid identity token (%s)", email, e)
        raise UnauthorizedError("Invalid identity token") from e
    if (verified.email or "").lower() != email:
        logger.warning("Login rejected for %s: identity token belongs to another email", email)
        raise UnauthorizedError("Identity token does not match the provided email")

    user = await user_store.find_by_email(db, email)
    if user is None:
        logger.warning("Login failed for %s", email)
        raise UnauthorizedError(INVALID_CREDENTIALS)
    if not await user_store.verify_password(password, user.password):
        logger.warning("Login failed for %s", email)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    token = issue_session_token(user.id, user.email)
    logger.info("User %s logged in", user.id)
    return LoginResult(user=user, token=token)


async def _flip_flag(db: AsyncSession, user: User, channel: VerificationChannel, already_message: str) -> User:
    if not await user_store.update_verification_flag(db, user.id, channel):
        # Lost a race with a concurrent verification of the same channel
        raise AlreadyVerifiedError(already_message)
    await db.refresh(user)
    logger.info("User %s verified %s", user.id, channel.value)
    return user


async def verify_email(db: AsyncSession, user_id: int) -> User:
    user = await user_store.find_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.is_email_verified:
        raise AlreadyVerifiedError("Email already verified")
    return await _flip_flag(db, user, VerificationChannel.email, "Email already verified")


async def verify_mobile(db: AsyncSession, identity: FirebaseIdentityProvider, user_id: int, id_token: str) -> User:
    try:
        verified = await identity.verify_token(id_token)
    except IdentityTokenError as e:
        raise InvalidVerificationToken() from e
    except Exception as e:
        logger.warning("Identity provider error during mobile verification: %s", e)
        raise InvalidVerificationToken() from e

    user = await user_store.find_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.is_mobile_verified:
        raise AlreadyVerifiedError("Mobile number already verified")
    if user.firebase_uid and verified.uid != user.firebase_uid:
        logger.warning("Mobile verification for user %s presented another account's token", user.id)
        raise InvalidVerificationToken()
    if verified.phone_number and verified.phone_number != user.mobile_no:
        raise InvalidVerificationToken()
    return await _flip_flag(db, user, VerificationChannel.mobile, "Mobile number already verified")
