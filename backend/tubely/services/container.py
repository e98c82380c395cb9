"""
Wiring of the services a running app needs
"""

from dataclasses import dataclass

from tubely.config.base import Settings
from tubely.services.local_storage import LocalAssetStorage
from tubely.services.media import FastStartRewriter, FFmpegRemuxer, FFprobeProber, MediaProber
from tubely.services.publisher import IdFactory, ObjectPublisher, random_object_id
from tubely.services.s3_service import S3Service
from tubely.services.staging import StagingArea
from tubely.services.thumbnail_service import ThumbnailService
from tubely.services.upload_pipeline import UploadPipeline
from tubely.services.video_repository import VideoRepository, create_video_repository
from tubely.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    repository: VideoRepository
    publisher: ObjectPublisher
    pipeline: UploadPipeline
    thumbnails: ThumbnailService

    @property
    def token_secret(self) -> str:
        return self.settings.SECRET_KEY


def create_publisher(settings: Settings) -> ObjectPublisher:
    if settings.VIDEO_STORAGE == "local":
        logger.info(f"Publishing videos to local assets at {settings.ASSETS_ROOT}")
        return LocalAssetStorage(settings.ASSETS_ROOT, settings.PUBLIC_BASE_URL)
    if settings.VIDEO_STORAGE != "s3":
        raise ValueError(f"Unknown VIDEO_STORAGE: {settings.VIDEO_STORAGE}")
    return S3Service.from_settings(settings)


def build_services(
    settings: Settings,
    repository: VideoRepository = None,
    publisher: ObjectPublisher = None,
    prober: MediaProber = None,
    remuxer: FastStartRewriter = None,
    id_factory: IdFactory = random_object_id,
) -> ServiceContainer:
    """Create every service from settings; any collaborator may be supplied instead"""
    repository = repository or create_video_repository(settings)
    publisher = publisher or create_publisher(settings)
    staging = StagingArea(settings.STAGING_DIR)

    pipeline = UploadPipeline(
        repository=repository,
        staging=staging,
        prober=prober or FFprobeProber(settings.FFPROBE_PATH, timeout=settings.MEDIA_TOOL_TIMEOUT),
        remuxer=remuxer or FFmpegRemuxer(settings.FFMPEG_PATH, timeout=settings.MEDIA_TOOL_TIMEOUT),
        publisher=publisher,
        max_upload_size=settings.MAX_UPLOAD_SIZE,
        id_factory=id_factory,
    )
    thumbnails = ThumbnailService(
        repository=repository,
        staging=staging,
        assets_root=settings.ASSETS_ROOT,
        public_base_url=settings.PUBLIC_BASE_URL,
        max_size=settings.MAX_THUMBNAIL_SIZE,
    )
    return ServiceContainer(
        settings=settings,
        repository=repository,
        publisher=publisher,
        pipeline=pipeline,
        thumbnails=thumbnails,
    )
