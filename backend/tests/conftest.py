"""
Pytest configuration and fixtures for testing
"""

import io
import itertools
import os
import shutil
import uuid
from datetime import timedelta

import boto3
import pytest
from botocore.config import Config
from fastapi.testclient import TestClient

from tubely.config.base import Settings
from tubely.errors import RemuxFailure
from tubely.main import create_app
from tubely.models.video import Video
from tubely.services.auth import create_access_token
from tubely.services.container import build_services
from tubely.services.media import FastStartRewriter, MediaProber, StreamGeometry
from tubely.services.s3_service import S3Service
from tubely.services.staging import StagingArea
from tubely.services.video_repository import InMemoryVideoRepository

TEST_SECRET = "test-secret"
TEST_BUCKET = "tubely-test"


class FakeProber(MediaProber):
    """Returns fixed geometry, or raises the configured error"""

    def __init__(self, geometry=StreamGeometry(1280, 720), error=None):
        self.geometry = geometry
        self.error = error
        self.calls = []

    def probe(self, path):
        self.calls.append(path)
        assert os.path.exists(path)
        if self.error is not None:
            raise self.error
        return self.geometry


class FakeRemuxer(FastStartRewriter):
    """Copies the input to the sibling output path, optionally failing after a partial write"""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def remux(self, input_path):
        self.calls.append(input_path)
        output_path = self.output_path_for(input_path)
        if self.fail:
            with open(output_path, "wb") as partial:
                partial.write(b"partial")
            raise RemuxFailure("ffmpeg exited with status 1")
        shutil.copyfile(input_path, output_path)
        return output_path


class FakeS3Client:
    """In-memory stand-in for the boto3 client; presigning uses a real offline client"""

    def __init__(self, fail_upload=None):
        self.objects = {}
        self.fail_upload = fail_upload
        self.deleted = []
        self._signer = boto3.client(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
            config=Config(signature_version="s3v4"),
        )

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.fail_upload is not None:
            raise self.fail_upload
        self.objects[(bucket, key)] = {
            "body": fileobj.read(),
            "content_type": (ExtraArgs or {}).get("ContentType"),
        }

    def generate_presigned_url(self, client_method, Params, ExpiresIn):
        return self._signer.generate_presigned_url(client_method, Params=Params, ExpiresIn=ExpiresIn)

    def delete_object(self, Bucket, Key):
        self.deleted.append((Bucket, Key))
        self.objects.pop((Bucket, Key), None)


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to a temp directory"""
    return Settings(
        ASSETS_ROOT=str(tmp_path / "assets"),
        STAGING_DIR=str(tmp_path / "staging"),
        SECRET_KEY=TEST_SECRET,
        S3_BUCKET=TEST_BUCKET,
        AWS_ACCESS_KEY_ID="testing",
        AWS_SECRET_ACCESS_KEY="testing",
        VIDEO_STORAGE="s3",
        METADATA_BACKEND="memory",
        PUBLIC_BASE_URL="http://localhost:8091",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def staging_dir(settings):
    return settings.STAGING_DIR


@pytest.fixture
def staging_area(staging_dir):
    return StagingArea(staging_dir)


@pytest.fixture
def repository():
    return InMemoryVideoRepository()


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def s3_service(s3_client):
    return S3Service(s3_client, TEST_BUCKET, presign_ttl=timedelta(minutes=30))


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def remuxer():
    return FakeRemuxer()


@pytest.fixture
def object_ids():
    """Deterministic 64-character object ids"""
    counter = itertools.count(1)
    return lambda: f"{next(counter):064x}"


@pytest.fixture
def owner_id():
    return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def other_user_id():
    return uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def sample_video(repository, owner_id):
    """Draft video owned by owner_id"""
    video = Video(user_id=owner_id, title="Boots on the ground", description="test upload")
    return repository.create(video)


@pytest.fixture
def mp4_bytes():
    """Stand-in payload; the fake prober/remuxer never parse it"""
    return b"\x00\x00\x00\x18ftypmp42" + os.urandom(4096)


@pytest.fixture
def mp4_stream(mp4_bytes):
    return io.BytesIO(mp4_bytes)


@pytest.fixture
def services(settings, repository, s3_service, prober, remuxer, object_ids):
    return build_services(
        settings,
        repository=repository,
        publisher=s3_service,
        prober=prober,
        remuxer=remuxer,
        id_factory=object_ids,
    )


@pytest.fixture
def client(settings, services):
    """Create a test client for the FastAPI app"""
    return TestClient(create_app(settings, services))


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user id"""
    def _headers(user_id):
        token = create_access_token(user_id, TEST_SECRET, timedelta(minutes=5))
        return {"Authorization": f"Bearer {token}"}
    return _headers
