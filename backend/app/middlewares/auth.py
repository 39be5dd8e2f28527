from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import UnauthorizedError, VerificationRequiredError
from app.models.user import User
from app.services import user_store
from app.services.token_service import validate_session_token

bearer_scheme = HTTPBearer(auto_error=False)


def _extract_bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token is required")
    return credentials.credentials


# Dependency resolving the session token to a live user
async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = _extract_bearer_token(credentials)
    # TokenExpiredError / TokenInvalidError propagate as 403
    claims = validate_session_token(token)
    user = await user_store.find_by_id(db, claims["user_id"])
    if user is None:
        raise UnauthorizedError("User no longer exists")
    request.state.user_id = user.id
    return user


def require_email_verified(user: User = Depends(get_current_user)) -> User:
    if not user.is_email_verified:
        raise VerificationRequiredError("Please verify your email address to continue")
    return user

