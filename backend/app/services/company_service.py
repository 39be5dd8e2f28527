import logging
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.errors import ConflictError, NotFoundError
from app.models.company import CompanyProfile
from app.services.media_service import (
    BANNER_FOLDER,
    LOGO_FOLDER,
    CloudinaryMediaStore,
    make_public_id,
)

logger = logging.getLogger(__name__)

IMAGE_SLOTS = {
    "logo": (LOGO_FOLDER, "logo_url", "logo_public_id"),
    "banner": (BANNER_FOLDER, "banner_url", "banner_public_id"),
}


def _to_columns(data: dict) -> dict:
    values = dict(data)
    if values.get("website") is not None:
        values["website"] = str(values["website"])
    return values


async def find_by_owner(db: AsyncSession, owner_id: int) -> CompanyProfile | None:
    result = await db.execute(select(CompanyProfile).where(CompanyProfile.owner_id == owner_id))
    return result.scalar_one_or_none()


async def get_company(db: AsyncSession, owner_id: int) -> CompanyProfile:
    company = await find_by_owner(db, owner_id)
    if company is None:
        raise NotFoundError("Company profile not found")
    return company


async def create_company(db: AsyncSession, owner_id: int, data: dict) -> CompanyProfile:
    if await find_by_owner(db, owner_id):
        raise ConflictError("You already have a company profile", field="owner_id")
    company = CompanyProfile(owner_id=owner_id, **_to_columns(data))
    db.add(company)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("You already have a company profile", field="owner_id") from exc
    await db.refresh(company)
    logger.info("Created company %s for user %s", company.id, owner_id)
    return company


async def update_company(db: AsyncSession, owner_id: int, changes: dict) -> CompanyProfile:
    company = await get_company(db, owner_id)
    for field, value in _to_columns(changes).items():
        if value is not None:
            setattr(company, field, value)
    await db.commit()
    await db.refresh(company)
    return company


async def delete_company(db: AsyncSession, media: CloudinaryMediaStore, owner_id: int) -> None:
    company = await find_by_owner(db, owner_id)
    if company is None:
        raise NotFoundError("Company profile not found")
    for _, _, public_id_column in IMAGE_SLOTS.values():
        public_id = getattr(company, public_id_column)
        if public_id:
            await media.delete_image(public_id)
    await db.execute(delete(CompanyProfile).where(CompanyProfile.id == company.id))
    await db.commit()
    logger.info("Deleted company %s of user %s", company.id, owner_id)


async def replace_image(db: AsyncSession, media: CloudinaryMediaStore, owner_id: int, slot: str, content: bytes) -> CompanyProfile:
    """Upload a new logo/banner, record it, then drop the previous asset."""
    folder, url_column, public_id_column = IMAGE_SLOTS[slot]
    company = await get_company(db, owner_id)
    previous = getattr(company, public_id_column)

    uploaded = await media.upload_image(content, folder, make_public_id(slot, owner_id))
    setattr(company, url_column, uploaded.url)
    setattr(company, public_id_column, uploaded.public_id)
    await db.commit()
    await db.refresh(company)

    if previous and previous != uploaded.public_id:
        await media.delete_image(previous)
    return company
