"""
Video metadata store
Supports an in-process store (development, tests) and Redis
"""

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

import redis

from tubely.config.base import Settings
from tubely.models.video import Video
from tubely.utils.logger import get_logger

logger = get_logger(__name__)


class VideoRepository(ABC):
    @abstractmethod
    def create(self, video: Video) -> Video:
        pass

    @abstractmethod
    def get(self, video_id: uuid.UUID) -> Optional[Video]:
        pass

    @abstractmethod
    def update(self, video: Video) -> Video:
        pass

    @abstractmethod
    def list_for_user(self, user_id: uuid.UUID) -> List[Video]:
        pass


class InMemoryVideoRepository(VideoRepository):
    """Thread-safe dict-backed store; records are copied in and out"""

    def __init__(self):
        self._videos: Dict[uuid.UUID, Video] = {}
        self._lock = threading.RLock()

    def create(self, video: Video) -> Video:
        with self._lock:
            self._videos[video.id] = video.model_copy(deep=True)
        return video

    def get(self, video_id: uuid.UUID) -> Optional[Video]:
        with self._lock:
            video = self._videos.get(video_id)
            return video.model_copy(deep=True) if video else None

    def update(self, video: Video) -> Video:
        with self._lock:
            if video.id not in self._videos:
                raise KeyError(f"video {video.id} does not exist")
            video.updated_at = datetime.now(timezone.utc)
            self._videos[video.id] = video.model_copy(deep=True)
        return video

    def list_for_user(self, user_id: uuid.UUID) -> List[Video]:
        with self._lock:
            videos = [v.model_copy(deep=True) for v in self._videos.values() if v.user_id == user_id]
        return sorted(videos, key=lambda v: v.created_at, reverse=True)


class RedisVideoRepository(VideoRepository):
    """Stores each record as JSON under video:{id}, indexed per user"""

    def __init__(self, client: redis.Redis, prefix: str = "tubely"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisVideoRepository":
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PASSWORD or None,
            db=settings.REDIS_DB,
            decode_responses=True
        )
        logger.info(f"Using Redis metadata store at {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        return cls(client)

    def _video_key(self, video_id: uuid.UUID) -> str:
        return f"{self.prefix}:video:{video_id}"

    def _user_key(self, user_id: uuid.UUID) -> str:
        return f"{self.prefix}:user_videos:{user_id}"

    def create(self, video: Video) -> Video:
        pipe = self.client.pipeline()
        pipe.set(self._video_key(video.id), video.model_dump_json())
        pipe.sadd(self._user_key(video.user_id), str(video.id))
        pipe.execute()
        return video

    def get(self, video_id: uuid.UUID) -> Optional[Video]:
        raw = self.client.get(self._video_key(video_id))
        if raw is None:
            return None
        return Video.model_validate_json(raw)

    def update(self, video: Video) -> Video:
        video.updated_at = datetime.now(timezone.utc)
        # xx: only overwrite an existing record
        stored = self.client.set(self._video_key(video.id), video.model_dump_json(), xx=True)
        if not stored:
            raise KeyError(f"video {video.id} does not exist")
        return video

    def list_for_user(self, user_id: uuid.UUID) -> List[Video]:
        ids = self.client.smembers(self._user_key(user_id))
        if not ids:
            return []
        raws = self.client.mget([self._video_key(i) for i in sorted(ids)])
        videos = [Video.model_validate_json(raw) for raw in raws if raw is not None]
        return sorted(videos, key=lambda v: v.created_at, reverse=True)


def create_video_repository(settings: Settings) -> VideoRepository:
    if settings.METADATA_BACKEND == "redis":
        return RedisVideoRepository.from_settings(settings)
    logger.info("Using in-memory metadata store")
    return InMemoryVideoRepository()
