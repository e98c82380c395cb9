"""Local disk publishing. Files are served back from the /assets mount."""

import os
import shutil
from pathlib import Path

from tubely.errors import PublishFailure, SigningFailure
from tubely.models.upload import AccessDescriptor, StorageObject
from tubely.services.publisher import ObjectPublisher
from tubely.utils.logger import get_logger

logger = get_logger(__name__)


class LocalAssetStorage(ObjectPublisher):
    def __init__(self, assets_root: str, public_base_url: str):
        self.base = Path(assets_root)
        self.public_base_url = public_base_url.rstrip("/")
        self.base.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        path = (self.base / key).resolve()
        if self.base.resolve() not in path.parents:
            raise ValueError(f"key escapes the assets root: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/assets/{key}"

    def publish(self, local_path: str, key: str, content_type: str) -> StorageObject:
        dest = self.path_for(key)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local_path, dest)
        except OSError as e:
            dest.unlink(missing_ok=True)
            raise PublishFailure("Unable to copy video into assets", cause=e, details={"key": key})

        size = os.path.getsize(dest)
        logger.info(f"Published video to {dest} ({size/(1024*1024):.1f}MB)")
        return StorageObject(key=key, content_type=content_type, size=size)

    def describe(self, key: str) -> AccessDescriptor:
        return AccessDescriptor.static(self.url_for(key))

    def resolve(self, descriptor: AccessDescriptor) -> str:
        if descriptor.is_composite:
            raise SigningFailure(
                "Local storage cannot sign bucket references",
                details={"bucket": descriptor.bucket, "key": descriptor.key},
            )
        return descriptor.url

    def discard(self, key: str) -> bool:
        try:
            self.path_for(key).unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error(f"Failed to delete {key}: {e}")
            return False
