import io
import os
import time
import logging
from dataclasses import dataclass

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from starlette.concurrency import run_in_threadpool
from dotenv import load_dotenv

from app.errors import UpstreamMediaFailure

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '../../.env'))

logger = logging.getLogger(__name__)

CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")

LOGO_FOLDER = "company_logos"
BANNER_FOLDER = "company_banners"


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str


class CloudinaryMediaStore:
    def __init__(self):
        self._configured = False

    def _configure(self) -> None:
        if not self._configured:
            cloudinary.config(
                cloud_name=CLOUDINARY_CLOUD_NAME,
                api_key=CLOUDINARY_API_KEY,
                api_secret=CLOUDINARY_API_SECRET,
                secure=True,
            )
            self._configured = True

    async def upload_image(self, content: bytes, folder: str, public_id: str) -> UploadedImage:
        self._configure()
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                io.BytesIO(content),
                folder=folder,
                public_id=public_id,
                resource_type="image",
            )
        except (CloudinaryError, OSError) as e:
            logger.error("Cloudinary upload to %s failed: %s", folder, e)
            raise UpstreamMediaFailure() from e
        return UploadedImage(url=result["secure_url"], public_id=result["public_id"])

    async def delete_image(self, public_id: str) -> bool:
        """Best-effort removal of a hosted asset; failures are logged, not raised."""
        self._configure()
        try:
            result = await run_in_threadpool(cloudinary.uploader.destroy, public_id)
        except Exception as e:
            logger.warning("Could not delete Cloudinary asset %s: %s", public_id, e)
            return False
        return (result or {}).get("result") == "ok"


def make_public_id(kind: str, owner_id: int) -> str:
    return f"{kind}_{owner_id}_{int(time.time() * 1000)}"


media_store = CloudinaryMediaStore()


def get_media_store() -> CloudinaryMediaStore:
    return media_store
