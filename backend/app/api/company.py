import os
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import ValidationFailure
from app.middlewares.auth import get_current_user, require_email_verified
from app.models.user import User
from app.schemas.company import CompanyBase, CompanyRead, CompanyResponse, CompanyUpdate, MessageResponse
from app.services import company_service
from app.services.media_service import CloudinaryMediaStore, get_media_store

router = APIRouter(prefix="/company", tags=["company"])

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
ALLOWED_IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))


async def _read_image(file: UploadFile) -> bytes:
    extension = os.path.splitext(file.filename or "")[1].lower()
    if file.content_type not in ALLOWED_IMAGE_TYPES or extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationFailure("Only image files are allowed (jpeg, jpg, png, gif, webp)")
    content = await file.read(MAX_IMAGE_BYTES + 1)
    if not content:
        raise ValidationFailure("Image data is required")
    if len(content) > MAX_IMAGE_BYTES:
        raise ValidationFailure(f"Image must not exceed {MAX_IMAGE_BYTES // (1024 * 1024)}MB")
    return content


@router.get("/", response_model=CompanyResponse)
async def get_company(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    company = await company_service.get_company(db, current_user.id)
    return CompanyResponse(company=CompanyRead.model_validate(company))


@router.post("/", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    data: CompanyBase,
    current_user: User = Depends(require_email_verified),
    db: AsyncSession = Depends(get_db),
):
    company = await company_service.create_company(db, current_user.id, data.model_dump())
    return CompanyResponse(message="Company profile created successfully", company=CompanyRead.model_validate(company))


@router.put("/", response_model=CompanyResponse)
async def update_company(
    data: CompanyUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    company = await company_service.update_company(db, current_user.id, data.model_dump(exclude_unset=True))
    return CompanyResponse(message="Company profile updated successfully", company=CompanyRead.model_validate(company))


@router.delete("/", response_model=MessageResponse)
async def delete_company(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: CloudinaryMediaStore = Depends(get_media_store),
):
    await company_service.delete_company(db, media, current_user.id)
    return MessageResponse(message="Company profile deleted successfully")


@router.post("/upload/logo", response_model=CompanyResponse)
async def upload_logo(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: CloudinaryMediaStore = Depends(get_media_store),
):
    content = await _read_image(file)
    company = await company_service.replace_image(db, media, current_user.id, "logo", content)
    return CompanyResponse(message="Logo uploaded successfully", company=CompanyRead.model_validate(company))


@router.post("/upload/banner", response_model=CompanyResponse)
async def upload_banner(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: CloudinaryMediaStore = Depends(get_media_store),
):
    content = await _read_image(file)
    company = await company_service.replace_image(db, media, current_user.id, "banner", content)
    return CompanyResponse(message="Banner uploaded successfully", company=CompanyRead.model_validate(company))
