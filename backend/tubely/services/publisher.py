"""
Common interface for the stores processed videos are published to
"""

import os
import secrets
from abc import ABC, abstractmethod
from typing import Callable

from tubely.models.upload import AccessDescriptor, StorageObject

IdFactory = Callable[[], str]


def random_object_id() -> str:
    """64 hex characters drawn from 32 random bytes"""
    return secrets.token_hex(32)


def build_object_key(prefix: str, filename: str, id_factory: IdFactory = random_object_id) -> str:
    """Build "{prefix}/{random id}{original extension}" """
    extension = os.path.splitext(filename or "")[1]
    return f"{prefix}/{id_factory()}{extension}"


class ObjectPublisher(ABC):
    """Store that receives finished files and hands out URLs for them"""

    @abstractmethod
    def publish(self, local_path: str, key: str, content_type: str) -> StorageObject:
        """Upload local_path under key; raises PublishFailure"""

    @abstractmethod
    def describe(self, key: str) -> AccessDescriptor:
        """Stable descriptor to persist for a published key"""

    @abstractmethod
    def resolve(self, descriptor: AccessDescriptor) -> str:
        """URL a client can fetch right now"""

    @abstractmethod
    def discard(self, key: str) -> bool:
        """Best-effort removal of a published object"""

    def resolve_stored(self, stored: str) -> str:
        return self.resolve(AccessDescriptor.parse(stored))
