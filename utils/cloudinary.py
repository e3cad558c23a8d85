import logging

import cloudinary.exceptions
import cloudinary.uploader
from fastapi import Depends

from config import Settings, get_settings
from utils.errors import InternalError

logger = logging.getLogger(__name__)

PROFILE_FOLDER = "user-profiles"
# 400x400 crop centred on a face, automatic quality
PROFILE_TRANSFORMATION = [
    {"width": 400, "height": 400, "crop": "fill", "gravity": "face"},
    {"quality": "auto"},
]


class CloudinaryUploader:
    """Uploads profile pictures to Cloudinary and returns their public URL"""

    def __init__(self, settings: Settings, timeout: float = 30.0):
        self.cloud_name = settings.cloudinary_cloud_name
        self.api_key = settings.cloudinary_api_key
        self.api_secret = settings.cloudinary_api_secret
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def upload(self, content: bytes, user_id: int, filename: str = "upload") -> str:
        """
        Upload image bytes as the profile picture of a user

        Args:
            content: Raw image bytes
            user_id: Owner, used for the public id so re-uploads overwrite
            filename: Original file name, passed through to the host

        Returns:
            HTTPS URL of the stored image

        Raises:
            InternalError: If uploads are not configured or the host fails
        """
        if not self.configured:
            raise InternalError("Image uploads are not configured")

        try:
            result = cloudinary.uploader.upload(
                content,
                filename=filename,
                folder=PROFILE_FOLDER,
                public_id=f"user-{user_id}",
                overwrite=True,
                resource_type="image",
                transformation=PROFILE_TRANSFORMATION,
                cloud_name=self.cloud_name,
                api_key=self.api_key,
                api_secret=self.api_secret,
                timeout=self.timeout,
            )
        except cloudinary.exceptions.Error as exc:
            logger.error("Profile picture upload failed for user %s: %s", user_id, exc)
            raise InternalError("Failed to upload image") from exc

        return result["secure_url"]


def get_image_uploader(settings: Settings = Depends(get_settings)) -> CloudinaryUploader:
    """Image host dependency, overridden in tests"""
    return CloudinaryUploader(settings)
