import logging
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import NotFoundError, UnauthorizedError
from app.middlewares.auth import get_current_user
from app.models.user import User
from app.schemas.auth import (
    RegisterRequest, RegisterResponse, LoginRequest, LoginResponse, VerifyMobileRequest, VerifyResponse,
    FirebaseTokenRequest, FirebaseTokenResponse, LogoutResponse
)
from app.schemas.user import UserRead, UserResponse
from app.services import registration_service, user_store
from app.services.audit_log_service import log_login_attempt, safe_log
from app.services.identity_provider import FirebaseIdentityProvider, IdentityTokenError, get_identity_provider
from app.services.rate_limit import limiter, REGISTER_LIMIT, LOGIN_LIMIT, VERIFY_LIMIT
from app.services.token_service import issue_session_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
):
    result = await registration_service.register_user(db, identity, data)
    user = result.user
    await safe_log(db, user.id, "register", f"firebase_uid={result.firebase_uid}")
    token = issue_session_token(user.id, user.email)
    return RegisterResponse(
        message="User registered successfully",
        user=UserRead.model_validate(user),
        token=token,
        firebase_uid=result.firebase_uid,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
):
    try:
        result = await registration_service.login_user(db, identity, data.email, data.password, data.firebase_token)
    except UnauthorizedError as e:
        try:
            await log_login_attempt(db, user_id=None, status="failure", email=data.email, details=e.message)
        except Exception as log_error:
            await db.rollback()
            logger.warning("Audit log write failed for login failure: %s", log_error)
        raise
    await safe_log(db, result.user.id, "login_success", f"email={result.user.email}")
    return LoginResponse(
        message="Login successful",
        user=UserRead.model_validate(result.user),
        token=result.token,
    )


@router.post("/verify-firebase-token", response_model=FirebaseTokenResponse)
@limiter.limit(VERIFY_LIMIT)
async def verify_firebase_token(
    request: Request,
    data: FirebaseTokenRequest,
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
):
    try:
        verified = await identity.verify_token(data.id_token)
    except IdentityTokenError as e:
        raise UnauthorizedError("Invalid Firebase token") from e
    return FirebaseTokenResponse(uid=verified.uid, email=verified.email, email_verified=verified.email_verified)


@router.post("/verify-email", response_model=VerifyResponse)
@limiter.limit(VERIFY_LIMIT)
async def verify_email(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await registration_service.verify_email(db, current_user.id)
    await safe_log(db, user.id, "verify_email")
    return VerifyResponse(message="Email verified successfully", user=UserRead.model_validate(user))


@router.post("/verify-mobile", response_model=VerifyResponse)
@limiter.limit(VERIFY_LIMIT)
async def verify_mobile(
    request: Request,
    data: VerifyMobileRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
):
    user = await registration_service.verify_mobile(db, identity, current_user.id, data.firebase_token)
    await safe_log(db, user.id, "verify_mobile")
    return VerifyResponse(message="Mobile number verified successfully", user=UserRead.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    # Re-read: the row may have been deleted after the gate resolved it
    user = await user_store.find_by_id(db, current_user.id)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse(user=UserRead.model_validate(user))


@router.post("/logout", response_model=LogoutResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """Logout endpoint (client-side token invalidation)."""
    # Stateless sessions: the client discards its token, nothing is revoked server-side
    return LogoutResponse(message="Logged out successfully")
