"""
Thumbnail uploads written to the assets directory
"""

import base64
import os
import secrets
import uuid
from typing import BinaryIO, Callable

from tubely.errors import AuthFailure, PersistFailure, ValidationFailure, VideoNotFound
from tubely.models.video import Video
from tubely.services.staging import StagingArea
from tubely.services.video_repository import VideoRepository
from tubely.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_THUMBNAIL_TYPES = {"image/jpeg", "image/png"}


def random_asset_name() -> str:
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).rstrip(b"=").decode("ascii")


class ThumbnailService:
    """Stores a thumbnail file and points the owning video record at it"""

    def __init__(
        self,
        repository: VideoRepository,
        staging: StagingArea,
        assets_root: str,
        public_base_url: str,
        max_size: int,
        name_factory: Callable[[], str] = random_asset_name,
    ):
        self.repository = repository
        self.staging = staging
        self.assets_root = assets_root
        self.public_base_url = public_base_url.rstrip("/")
        self.max_size = max_size
        self.name_factory = name_factory
        os.makedirs(self.assets_root, exist_ok=True)

    def upload(
        self,
        video_id: uuid.UUID,
        user_id: uuid.UUID,
        stream: BinaryIO,
        filename: str,
        content_type: str,
    ) -> Video:
        media_type = (content_type or "").split(";")[0].strip().lower()
        if media_type not in ALLOWED_THUMBNAIL_TYPES:
            raise ValidationFailure("Incorrect media type for thumbnail", error_code="INVALID_MIME_TYPE")

        video = self.repository.get(video_id)
        if video is None:
            raise VideoNotFound("Video not found")
        if video.user_id != user_id:
            raise AuthFailure("Unauthorized user for video")

        name = self.name_factory() + os.path.splitext(filename or "")[1]
        dest = os.path.join(self.assets_root, name)
        size = self.staging.copy_to(stream, dest, limit=self.max_size)

        video.thumbnail_url = f"{self.public_base_url}/assets/{name}"
        try:
            self.repository.update(video)
        except Exception as e:
            os.unlink(dest)
            raise PersistFailure("Unable to update video metadata", cause=e)

        logger.info(f"Stored thumbnail for video {video_id} ({size/1024:.1f}KB)")
        return video
