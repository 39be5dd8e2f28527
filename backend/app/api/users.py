import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import ConflictError
from app.middlewares.auth import get_current_user
from app.models.user import User
from app.schemas.company import MessageResponse
from app.schemas.user import ActivityResponse, AuditEventRead, UserRead, UserResponse, UserUpdate
from app.services import company_service, user_store
from app.services.audit_log_service import list_events, safe_log
from app.services.identity_provider import FirebaseIdentityProvider, get_identity_provider
from app.services.media_service import CloudinaryMediaStore, get_media_store
from app.services.user_store import UniqueViolation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


async def _restore_phone(identity: FirebaseIdentityProvider, uid: str, phone: str) -> None:
    try:
        await identity.update_phone(uid, phone)
    except Exception:
        logger.exception("Could not restore Firebase phone number for %s", uid)


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return UserResponse(user=UserRead.model_validate(current_user))


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
):
    changes = data.model_dump(exclude_unset=True)
    if changes.get("gender") is not None:
        changes["gender"] = changes["gender"].value
    mobile_no = changes.get("mobile_no")
    if mobile_no and mobile_no != current_user.mobile_no:
        existing = await user_store.find_by_mobile(db, mobile_no)
        if existing is not None and existing.id != current_user.id:
            raise ConflictError("Mobile number already in use", field="mobile_no")
    previous_mobile = current_user.mobile_no
    uid = current_user.firebase_uid
    # Firebase holds the phone number used for mobile verification; keep it in step
    phone_changed = bool(mobile_no) and mobile_no != previous_mobile and bool(uid)
    if phone_changed:
        await identity.update_phone(uid, mobile_no)
    try:
        user = await user_store.update_profile(db, current_user, changes)
    except UniqueViolation as exc:
        if phone_changed:
            await _restore_phone(identity, uid, previous_mobile)
        raise ConflictError("Mobile number already in use", field=exc.field) from exc
    return UserResponse(message="Profile updated successfully", user=UserRead.model_validate(user))


@router.get("/activity", response_model=ActivityResponse)
async def get_activity(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """The caller's own audit trail, oldest first."""
    events = await list_events(db, current_user.id)
    return ActivityResponse(events=[AuditEventRead.model_validate(e) for e in events])


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
    media: CloudinaryMediaStore = Depends(get_media_store),
):
    user_id = current_user.id
    # External identity goes first so a failure leaves both records in place
    if current_user.firebase_uid:
        await identity.delete_identity(current_user.firebase_uid)
    if await company_service.find_by_owner(db, user_id):
        await company_service.delete_company(db, media, user_id)
    await user_store.delete_user(db, user_id)
    await safe_log(db, user_id, "account_deleted")
    logger.info("Deleted account %s", user_id)
    return MessageResponse(message="Account deleted successfully")
