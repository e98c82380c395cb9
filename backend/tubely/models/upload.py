"""
Upload pipeline data models
"""

import uuid
from dataclasses import dataclass
from typing import BinaryIO, Optional

COMPOSITE_SEPARATOR = ","


@dataclass
class UploadSession:
    """One in-flight upload request"""
    video_id: uuid.UUID
    user_id: uuid.UUID
    stream: BinaryIO
    filename: str
    content_type: str
    size: Optional[int] = None


@dataclass(frozen=True)
class StorageObject:
    """A published, immutable object in the store"""
    key: str
    content_type: str
    size: int
    bucket: Optional[str] = None


@dataclass(frozen=True)
class AccessDescriptor:
    """
    Persisted pointer to a stored object.

    Either a composite "{bucket},{key}" reference that is signed on every read,
    or a static URL that is handed out as-is.
    """
    bucket: Optional[str] = None
    key: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_composite(self) -> bool:
        return self.bucket is not None and self.key is not None

    @classmethod
    def composite(cls, bucket: str, key: str) -> "AccessDescriptor":
        return cls(bucket=bucket, key=key)

    @classmethod
    def static(cls, url: str) -> "AccessDescriptor":
        return cls(url=url)

    @classmethod
    def parse(cls, value: str) -> "AccessDescriptor":
        """Parse the stored representation of a descriptor"""
        if "://" not in value and COMPOSITE_SEPARATOR in value:
            bucket, key = value.split(COMPOSITE_SEPARATOR, 1)
            if bucket and key:
                return cls.composite(bucket, key)
        return cls.static(value)

    def serialize(self) -> str:
        if self.is_composite:
            return f"{self.bucket}{COMPOSITE_SEPARATOR}{self.key}"
        return self.url
