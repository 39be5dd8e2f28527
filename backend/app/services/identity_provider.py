"""
External Identity Provider adapter (Firebase Authentication).

The Firebase Admin SDK is synchronous, so every call is pushed to the
threadpool. Firebase exceptions are translated here so the rest of the app
only ever sees the ``app.errors`` taxonomy or ``IdentityTokenError``.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError
from google.auth.exceptions import GoogleAuthError
from starlette.concurrency import run_in_threadpool
from dotenv import load_dotenv

from app.errors import ConflictError, UpstreamIdentityFailure
from app.services.email_service import send_verification_email

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '../../.env'))

logger = logging.getLogger(__name__)

FIREBASE_CREDENTIALS = os.getenv("FIREBASE_CREDENTIALS")
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")


class IdentityTokenError(Exception):
    """The presented ID token could not be verified (malformed, expired, revoked or provider error)."""


@dataclass(frozen=True)
class VerifiedIdentity:
    uid: str
    email: Optional[str]
    email_verified: bool
    phone_number: Optional[str]


class FirebaseIdentityProvider:
    def __init__(self, credentials_path: Optional[str] = None, project_id: Optional[str] = None):
        self.credentials_path = credentials_path or FIREBASE_CREDENTIALS
        self.project_id = project_id or FIREBASE_PROJECT_ID
        self._app: Optional[firebase_admin.App] = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is None:
            try:
                self._app = firebase_admin.get_app()
            except ValueError:
                cred = credentials.Certificate(self.credentials_path) if self.credentials_path else credentials.ApplicationDefault()
                options = {"projectId": self.project_id} if self.project_id else None
                self._app = firebase_admin.initialize_app(cred, options)
                logger.info("Firebase app initialized (project=%s)", self.project_id or "default")
        return self._app

    async def create_identity(self, email: str, password: str, display_name: str, phone: str) -> str:
        def _create() -> str:
            record = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                phone_number=phone,
                app=self._get_app(),
            )
            return record.uid

        try:
            return await run_in_threadpool(_create)
        except auth.EmailAlreadyExistsError as e:
            raise ConflictError("Email address already registered", field="email") from e
        except auth.PhoneNumberAlreadyExistsError as e:
            raise ConflictError("Mobile number already registered", field="mobile_no") from e
        except (ValueError, FirebaseError, GoogleAuthError) as e:
            logger.error("Firebase user creation failed for %s: %s", email, e)
            raise UpstreamIdentityFailure() from e

    async def delete_identity(self, uid: str) -> None:
        try:
            await run_in_threadpool(auth.delete_user, uid, app=self._get_app())
        except auth.UserNotFoundError:
            logger.warning("Firebase user %s was already gone", uid)
        except (ValueError, FirebaseError, GoogleAuthError) as e:
            raise UpstreamIdentityFailure("Failed to delete authentication user") from e

    async def update_phone(self, uid: str, phone: str) -> None:
        try:
            await run_in_threadpool(auth.update_user, uid, phone_number=phone, app=self._get_app())
        except auth.PhoneNumberAlreadyExistsError as e:
            raise ConflictError("Mobile number already in use", field="mobile_no") from e
        except (ValueError, FirebaseError, GoogleAuthError) as e:
            logger.error("Firebase phone update failed for %s: %s", uid, e)
            raise UpstreamIdentityFailure("Failed to update authentication user") from e

    async def verify_token(self, id_token: str) -> VerifiedIdentity:
        try:
            decoded = await run_in_threadpool(auth.verify_id_token, id_token, app=self._get_app())
        except (ValueError, FirebaseError, GoogleAuthError) as e:
            raise IdentityTokenError(str(e)) from e
        return VerifiedIdentity(
            uid=decoded.get("uid") or decoded.get("sub"),
            email=decoded.get("email"),
            email_verified=bool(decoded.get("email_verified", False)),
            phone_number=decoded.get("phone_number"),
        )

    async def send_email_verification(self, email: str) -> bool:
        link = await run_in_threadpool(auth.generate_email_verification_link, email, app=self._get_app())
        return await run_in_threadpool(send_verification_email, email, link)


identity_provider = FirebaseIdentityProvider()


def get_identity_provider() -> FirebaseIdentityProvider:
    return identity_provider
