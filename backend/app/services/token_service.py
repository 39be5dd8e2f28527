import os
import logging
from datetime import datetime, timezone
from jose import jwt, JWTError
from dotenv import load_dotenv

from app.errors import TokenExpiredError, TokenInvalidError

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '../../.env'))

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "fallback-secret-key-for-development-only")
JWT_ALGORITHM = "HS256"
SESSION_SCOPE = "access"
# 90 days
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(90 * 24 * 3600)))

# Warn if using fallback secret
if JWT_SECRET == "fallback-secret-key-for-development-only":
    logger.warning("Using fallback JWT secret. Set JWT_SECRET environment variable for production.")


def _now_ts(now: datetime | None = None) -> int:
    return int((now or datetime.now(timezone.utc)).timestamp())


def issue_session_token(user_id: int, email: str, now: datetime | None = None, expires_in_seconds: int | None = None) -> str:
    """Mint a signed, self-contained session token.

    Nothing is stored server-side: any holder of ``JWT_SECRET`` can validate it.
    """
    issued_at = _now_ts(now)
    ttl = SESSION_TTL_SECONDS if expires_in_seconds is None else expires_in_seconds
    claims = {
        "user_id": user_id,
        "email": email,
        "scope": SESSION_SCOPE,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def validate_session_token(token: str, now: datetime | None = None) -> dict:
    """Return ``{"user_id", "email"}`` for a valid token.

    Raises TokenInvalidError for a bad signature or malformed payload and
    TokenExpiredError once the current time is past the embedded expiry.
    """
    try:
        # Expiry is checked below against an injectable clock
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM], options={"verify_exp": False})
    except JWTError as e:
        logger.info("Rejected session token: %s", e)
        raise TokenInvalidError("Invalid or malformed token") from e

    user_id = payload.get("user_id")
    email = payload.get("email")
    exp = payload.get("exp")
    if payload.get("scope") != SESSION_SCOPE or not isinstance(user_id, int) or not email or not isinstance(exp, int):
        raise TokenInvalidError("Invalid or malformed token")

    if _now_ts(now) > exp:
        raise TokenExpiredError("Token has expired")

    return {"user_id": user_id, "email": email}
