import asyncio
import io
import logging

import cloudinary
import cloudinary.api
import cloudinary.uploader

from .settings import Settings, settings

logger = logging.getLogger(__name__)


class CloudinaryClient:
    def __init__(self, config: Settings):
        self.folder = config.RECEIPT_FOLDER
        self.configured = bool(
            config.CLOUDINARY_CLOUD_NAME
            and config.CLOUDINARY_API_KEY
            and config.CLOUDINARY_SECRET_KEY
        )
        cloudinary.config(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            api_key=config.CLOUDINARY_API_KEY,
            api_secret=config.CLOUDINARY_SECRET_KEY,
            secure=True,
        )

    async def connect(self) -> bool:
        if not self.configured:
            logger.warning("Cloudinary is not configured; receipts will not be stored.")
            return False

        loop = asyncio.get_running_loop()
        info = await loop.run_in_executor(None, cloudinary.api.ping)
        return info.get("status") == "ok"

    async def upload_pdf_bytes(self, content: bytes, public_id: str) -> str:
        """Upload raw PDF bytes and return the durable secure URL."""
        if not self.configured:
            raise RuntimeError("Cloudinary credentials are not configured")

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None,
            lambda: cloudinary.uploader.upload(
                io.BytesIO(content),
                resource_type="raw",
                folder=self.folder,
                public_id=public_id,
                overwrite=True,
            ),
        )
        return result["secure_url"]


cloudinary_client = CloudinaryClient(settings)
