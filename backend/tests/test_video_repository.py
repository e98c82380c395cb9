"""Metadata store tests"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

from tubely.models.video import Video
from tubely.services.video_repository import (
    InMemoryVideoRepository,
    RedisVideoRepository,
    create_video_repository,
)


class FakeRedis:
    """Just enough of redis.Redis for the repository"""

    def __init__(self):
        self.values = {}
        self.sets = {}

    def set(self, key, value, xx=False):
        if xx and key not in self.values:
            return None
        self.values[key] = value
        return True

    def get(self, key):
        return self.values.get(key)

    def mget(self, keys):
        return [self.values.get(k) for k in keys]

    def sadd(self, key, member):
        self.sets.setdefault(key, set()).add(member)

    def smembers(self, key):
        return set(self.sets.get(key, set()))

    def pipeline(self):
        return self

    def execute(self):
        return []


@pytest.fixture(params=["memory", "redis"])
def store(request):
    if request.param == "memory":
        return InMemoryVideoRepository()
    return RedisVideoRepository(FakeRedis())


def test_create_and_get(store):
    video = store.create(Video(user_id=uuid.uuid4(), title="a"))

    fetched = store.get(video.id)

    assert fetched == video
    assert store.get(uuid.uuid4()) is None


def test_update_persists_video_url(store):
    video = store.create(Video(user_id=uuid.uuid4(), title="a"))
    video.video_url = "bucket,landscape/x.mp4"

    store.update(video)

    assert store.get(video.id).video_url == "bucket,landscape/x.mp4"


def test_timestamps_are_utc_aware(store):
    video = store.create(Video(user_id=uuid.uuid4(), title="a"))
    assert video.created_at.utcoffset() == timedelta(0)

    store.update(video)

    updated = store.get(video.id).updated_at
    assert updated.utcoffset() == timedelta(0)
    assert updated >= video.created_at


def test_update_unknown_video_raises(store):
    with pytest.raises(KeyError):
        store.update(Video(user_id=uuid.uuid4(), title="ghost"))


def test_list_for_user_newest_first(store):
    owner = uuid.uuid4()
    now = datetime.now(timezone.utc)
    older = store.create(Video(user_id=owner, title="old", created_at=now - timedelta(days=1)))
    newer = store.create(Video(user_id=owner, title="new", created_at=now))
    store.create(Video(user_id=uuid.uuid4(), title="someone else"))

    assert [v.id for v in store.list_for_user(owner)] == [newer.id, older.id]


def test_memory_store_returns_copies():
    store = InMemoryVideoRepository()
    video = store.create(Video(user_id=uuid.uuid4(), title="a"))

    fetched = store.get(video.id)
    fetched.title = "changed"

    assert store.get(video.id).title == "a"


def test_factory_selects_backend(settings):
    assert isinstance(create_video_repository(settings), InMemoryVideoRepository)

    settings.METADATA_BACKEND = "redis"
    with mock.patch("tubely.services.video_repository.redis.Redis") as redis_cls:
        repository = create_video_repository(settings)

    assert isinstance(repository, RedisVideoRepository)
    redis_cls.assert_called_once()
    assert redis_cls.call_args.kwargs["host"] == settings.REDIS_HOST
